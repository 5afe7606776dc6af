"""
Host index.

Maps a network host to the contracts whose servers advertise it.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

from contract_gate.contracts import Contract


logger = logging.getLogger(__name__)


def server_host(server_url: str) -> Optional[str]:
    """
    Extract the host of an absolute server URL.

    Args:
        server_url: Server URL from a contract

    Returns:
        Lowercased host, or None for relative or malformed URLs
    """
    try:
        return urlsplit(server_url).hostname or None
    except ValueError:
        return None


class HostIndex:
    """
    Read-only lookup from host to contracts.

    Invariants:
    - Built once, never mutated
    - Contracts under a host keep load order
    - A contract appears at most once per host
    """

    def __init__(self, entries: Dict[str, Tuple[Contract, ...]]):
        self._entries = dict(entries)

    @classmethod
    def build(cls, contracts: Iterable[Contract]) -> "HostIndex":
        """
        Index contracts by every host their servers advertise.

        Contracts without any parsable server host are left out.

        Args:
            contracts: Contracts in load order

        Returns:
            HostIndex
        """
        by_host: Dict[str, List[Contract]] = {}
        unreachable = 0

        for contract in contracts:
            hosts = []
            for server_url in contract.servers:
                host = server_host(server_url)
                if host is not None and host not in hosts:
                    hosts.append(host)

            if not hosts:
                unreachable += 1
                logger.debug(f"Contract {contract.source} has no server host, not indexed")

            for host in hosts:
                by_host.setdefault(host, []).append(contract)

        logger.info(f"Host index built: {len(by_host)} hosts, {unreachable} unreachable contracts")
        return cls({host: tuple(found) for host, found in by_host.items()})

    def lookup(self, host: str) -> Tuple[Contract, ...]:
        """
        Contracts serving a host.

        Args:
            host: Request host (case-insensitive)

        Returns:
            Contracts in load order, empty if none
        """
        return self._entries.get(host.lower(), ())

    def hosts(self) -> List[str]:
        """All indexed hosts, sorted."""
        return sorted(self._entries)

    def __contains__(self, host: object) -> bool:
        return isinstance(host, str) and host.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)
