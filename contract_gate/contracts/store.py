"""
Contract store.

Loads every contract document in a directory once at startup. A bad file is
skipped with a warning; only an unreadable directory is fatal.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml
from jsonschema import Draft202012Validator

from .model import Contract, contract_from_document
from .references import count_references, resolve_references


logger = logging.getLogger(__name__)


CONTRACT_SUFFIXES = (".json", ".yaml", ".yml")

# Minimal shape a document must have before it is treated as a contract
OPENAPI_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["paths"],
    "properties": {
        "openapi": {"type": "string"},
        "info": {"type": "object"},
        "servers": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["url"],
                "properties": {
                    "url": {"type": "string"},
                    "variables": {"type": "object"},
                },
            },
        },
        "paths": {
            "type": "object",
            "additionalProperties": {"type": "object"},
        },
    },
}


class ContractDirectoryError(ValueError):
    """Raised when the contracts directory itself cannot be read."""


class ContractDocumentError(ValueError):
    """Raised when a single contract document cannot be loaded."""


@dataclass(frozen=True)
class SkippedContract:
    source: str
    reason: str


_document_validator = Draft202012Validator(OPENAPI_DOCUMENT_SCHEMA)


def _contract_files(contracts_dir: Path) -> List[Path]:
    if not contracts_dir.exists():
        raise ContractDirectoryError(f"Contracts directory does not exist: {contracts_dir}")
    if not contracts_dir.is_dir():
        raise ContractDirectoryError(f"Contracts path is not a directory: {contracts_dir}")

    try:
        entries = list(contracts_dir.iterdir())
    except OSError as e:
        raise ContractDirectoryError(f"Cannot read contracts directory {contracts_dir}: {e}") from e

    files = [
        entry for entry in entries
        if entry.is_file() and entry.suffix.lower() in CONTRACT_SUFFIXES
    ]
    return sorted(files, key=lambda entry: entry.name)


def parse_document(path: Path) -> Any:
    """
    Read and parse one contract file.

    Args:
        path: JSON or YAML contract file

    Returns:
        Parsed document

    Raises:
        ContractDocumentError: If the file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ContractDocumentError(f"unreadable: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ContractDocumentError(f"not parseable: {e}") from e
    except (ValueError, RecursionError) as e:
        # integers past the digit limit, nesting past the recursion limit
        raise ContractDocumentError(f"not parseable: {e}") from e


def check_document(document: Any) -> None:
    """
    Check a parsed document has the minimal contract shape.

    Raises:
        ContractDocumentError: Listing every shape violation found
    """
    try:
        problems = sorted(_document_validator.iter_errors(document), key=lambda e: [str(p) for p in e.path])
    except RecursionError as e:
        raise ContractDocumentError("document nesting too deep") from e
    if problems:
        details = "; ".join(
            f"{'/'.join(str(p) for p in problem.path) or '<root>'}: {problem.message}"
            for problem in problems
        )
        raise ContractDocumentError(f"not a contract document: {details}")


def load_contract(path: Path) -> Contract:
    """
    Load a single contract file.

    Args:
        path: Contract file path

    Returns:
        Contract with all internal references resolved

    Raises:
        ContractDocumentError: If the file is not a usable contract
    """
    document = parse_document(path)
    check_document(document)

    try:
        internal, external = count_references(document)
        logger.debug(f"{path.name}: resolving {internal} internal, {external} external references")
        resolved = resolve_references(document, source=path.name)
        return contract_from_document(path.name, resolved)
    except RecursionError as e:
        raise ContractDocumentError("document nesting too deep") from e


def load_contracts_with_report(
    contracts_dir: Union[str, Path]
) -> Tuple[List[Contract], List[SkippedContract]]:
    """
    Load every contract in a directory.

    Args:
        contracts_dir: Directory holding contract documents

    Returns:
        (contracts sorted by file name, skipped files with reasons)

    Raises:
        ContractDirectoryError: If the directory cannot be read
    """
    contracts_dir = Path(contracts_dir)
    contracts: List[Contract] = []
    skipped: List[SkippedContract] = []

    for path in _contract_files(contracts_dir):
        try:
            contracts.append(load_contract(path))
        except ContractDocumentError as e:
            logger.warning(f"Skipping contract {path.name}: {e}")
            skipped.append(SkippedContract(source=path.name, reason=str(e)))

    logger.info(
        f"Contracts loaded from {contracts_dir}: "
        f"{len(contracts)} loaded, {len(skipped)} skipped"
    )
    return contracts, skipped


def load_contracts(contracts_dir: Union[str, Path]) -> List[Contract]:
    """Load every contract in a directory, sorted by file name."""
    contracts, _ = load_contracts_with_report(contracts_dir)
    return contracts


class ContractStore:
    """
    Contracts loaded once from a directory.

    Invariants:
    - Loaded at construction, never reloaded
    - Order is file name order
    - A bad document never aborts the load
    """

    def __init__(self, contracts_dir: Union[str, Path]):
        """
        Initialize the store and load all contracts.

        Args:
            contracts_dir: Directory holding contract documents

        Raises:
            ContractDirectoryError: If the directory cannot be read
        """
        self.contracts_dir = Path(contracts_dir)
        contracts, skipped = load_contracts_with_report(self.contracts_dir)
        self._contracts: Tuple[Contract, ...] = tuple(contracts)
        self._skipped: Tuple[SkippedContract, ...] = tuple(skipped)

    @property
    def contracts(self) -> List[Contract]:
        """Loaded contracts in load order."""
        return list(self._contracts)

    @property
    def skipped(self) -> List[SkippedContract]:
        """Files that were skipped, with the reason."""
        return list(self._skipped)

    def get_contract(self, source: str) -> Contract:
        """
        Get a loaded contract by file name.

        Raises:
            ValueError: If no contract was loaded from that file
        """
        for contract in self._contracts:
            if contract.source == source:
                return contract
        raise ValueError(f"Unknown contract: {source}")

    def __len__(self) -> int:
        return len(self._contracts)
