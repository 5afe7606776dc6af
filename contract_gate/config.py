"""
Application configuration.

Loaded from a YAML file with a top-level "contract_gate" section:

    contract_gate:
      contracts_dir: api_specs
      executor: http          # or "synthetic"
      timeout_seconds: 10
      synthetic_seed: 42      # optional
      check_path_parameters: false

CONTRACT_GATE_CONTRACTS_DIR overrides contracts_dir when set.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml


logger = logging.getLogger(__name__)


CONTRACTS_DIR_ENV = "CONTRACT_GATE_CONTRACTS_DIR"
EXECUTORS = ("http", "synthetic")


class ConfigError(ValueError):
    """Raised when the configuration file is missing or invalid."""


@dataclass(frozen=True)
class GateConfig:
    contracts_dir: Path
    executor: str = "http"
    timeout_seconds: float = 10.0
    synthetic_seed: Optional[int] = None
    check_path_parameters: bool = False


def config_from_dict(section: Mapping, base_dir: Path) -> GateConfig:
    """
    Build a config from the "contract_gate" section.

    Args:
        section: Parsed section
        base_dir: Directory relative contracts_dir is resolved against

    Raises:
        ConfigError: If a value is missing or invalid
    """
    contracts_dir = os.environ.get(CONTRACTS_DIR_ENV) or section.get("contracts_dir")
    if not contracts_dir:
        raise ConfigError("contracts_dir must be configured")

    contracts_path = Path(contracts_dir).expanduser()
    if not contracts_path.is_absolute():
        contracts_path = base_dir / contracts_path

    executor = section.get("executor", "http")
    if executor not in EXECUTORS:
        raise ConfigError(f"executor must be one of {', '.join(EXECUTORS)}, got: {executor}")

    timeout = section.get("timeout_seconds", 10)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"timeout_seconds must be a positive number, got: {timeout}")

    seed = section.get("synthetic_seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigError(f"synthetic_seed must be an integer, got: {seed}")

    check_path_parameters = section.get("check_path_parameters", False)
    if not isinstance(check_path_parameters, bool):
        raise ConfigError(f"check_path_parameters must be true or false, got: {check_path_parameters}")

    return GateConfig(
        contracts_dir=contracts_path,
        executor=executor,
        timeout_seconds=float(timeout),
        synthetic_seed=seed,
        check_path_parameters=check_path_parameters,
    )


def load_config(config_file: Path) -> GateConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_file: Path to the config file

    Returns:
        GateConfig

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {e}") from e

    if not isinstance(config, dict) or not isinstance(config.get("contract_gate"), dict):
        raise ConfigError("Config must contain 'contract_gate' section")

    loaded = config_from_dict(config["contract_gate"], config_file.parent)
    logger.info(
        f"Config loaded: contracts_dir={loaded.contracts_dir}, executor={loaded.executor}"
    )
    return loaded
