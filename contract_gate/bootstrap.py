"""
Startup wiring.

Contracts are loaded and indexed exactly once here; everything built from
them is read-only and passed down explicitly.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from contract_gate.agent import HealthCheckAgent, HttpExecutor, SyntheticExecutor
from contract_gate.config import GateConfig
from contract_gate.contracts import ContractStore
from contract_gate.routing import EndpointResolver, HostIndex
from contract_gate.validation import RequestValidator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Runtime:
    store: ContractStore
    host_index: HostIndex
    resolver: EndpointResolver
    validator: RequestValidator


def build_runtime(contracts_dir: Union[str, Path], check_path_parameters: bool = False) -> Runtime:
    """
    Load contracts and build the resolver and validator.

    Args:
        contracts_dir: Directory holding contract documents
        check_path_parameters: Type-check captured path segments too

    Raises:
        ContractDirectoryError: If the contracts directory cannot be read
    """
    store = ContractStore(contracts_dir)
    host_index = HostIndex.build(store.contracts)
    return Runtime(
        store=store,
        host_index=host_index,
        resolver=EndpointResolver(host_index),
        validator=RequestValidator(check_path_parameters=check_path_parameters),
    )


def build_agent(config: GateConfig, runtime: Runtime) -> HealthCheckAgent:
    """Build a health-check agent with the configured executor."""
    if config.executor == "synthetic":
        executor = SyntheticExecutor(seed=config.synthetic_seed)
    else:
        executor = HttpExecutor(timeout=config.timeout_seconds)
    logger.debug(f"Using {config.executor} executor")
    return HealthCheckAgent(runtime.resolver, runtime.validator, executor)
