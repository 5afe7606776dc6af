"""
Endpoint resolution.

Turns (url, method) into the contract operation that serves it. Candidates
are tried in load order and the first contract/template/method combination
that matches wins; there is no ranking by specificity.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from contract_gate.contracts import HTTP_METHODS, Contract, Operation

from .host_index import HostIndex
from .path_matcher import extract_path_parameters


logger = logging.getLogger(__name__)


class ResolutionFailure(str, Enum):
    INVALID_URL = "invalid_url"
    NO_CONTRACT_FOR_HOST = "no_contract_for_host"
    NO_ENDPOINT = "no_endpoint"


@dataclass(frozen=True)
class EndpointMatch:
    """
    A request resolved to a contract operation.

    The operation is a reference into the owning contract, never a copy.
    """

    url: str
    method: str
    path_pattern: str
    operation: Operation
    contract: Optional[Contract] = None
    path_params: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NotFound:
    reason: ResolutionFailure
    url: str
    method: str


Resolution = Union[EndpointMatch, NotFound]


def split_request_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Split an absolute http(s) URL into (host, path).

    Returns:
        (lowercased host, raw path) or None if the URL is not usable
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except (ValueError, AttributeError):
        return None

    if parts.scheme.lower() not in ("http", "https") or not host:
        return None
    return host, parts.path


def base_path(contract: Contract) -> str:
    """Path prefix of the contract's first server, without trailing slash."""
    if not contract.servers:
        return ""
    try:
        path = urlsplit(contract.servers[0]).path
    except ValueError:
        return ""
    return path.rstrip("/")


def strip_base_path(request_path: str, prefix: str) -> str:
    """Remove a base path prefix when the request path starts with it."""
    if prefix and request_path.startswith(prefix):
        return request_path[len(prefix):]
    return request_path


class EndpointResolver:
    """
    Resolves requests against an immutable host index.

    Stateless apart from the index it was given; safe to share between
    threads.
    """

    def __init__(self, host_index: HostIndex):
        """
        Initialize resolver.

        Args:
            host_index: Host index built once at startup
        """
        self.host_index = host_index

    def resolve(self, url: str, method: str) -> Resolution:
        """
        Resolve a request to a contract operation.

        Args:
            url: Absolute http(s) URL
            method: HTTP method, any case

        Returns:
            EndpointMatch on success, NotFound with the failure reason otherwise
        """
        http_method = method.strip().lower()

        split = split_request_url(url)
        if split is None:
            logger.debug(f"Not a usable absolute URL: {url!r}")
            return NotFound(ResolutionFailure.INVALID_URL, url, method)
        host, request_path = split

        candidates = self.host_index.lookup(host)
        if not candidates:
            logger.info(f"No contracts found for host {host}")
            return NotFound(ResolutionFailure.NO_CONTRACT_FOR_HOST, url, method)

        if http_method in HTTP_METHODS:
            for contract in candidates:
                match = self._match_contract(contract, url, request_path, http_method)
                if match is not None:
                    logger.debug(
                        f"{method.upper()} {url} -> {contract.source} {match.path_pattern}"
                    )
                    return match

        logger.info(f"No matching endpoint found for {url} with method {method}")
        return NotFound(ResolutionFailure.NO_ENDPOINT, url, method)

    def _match_contract(
        self, contract: Contract, url: str, request_path: str, http_method: str
    ) -> Optional[EndpointMatch]:
        api_path = strip_base_path(request_path, base_path(contract))

        for template, path_item in contract.paths.items():
            params = extract_path_parameters(api_path, template)
            if params is None:
                continue
            operation = path_item.operation_for(http_method)
            if operation is not None:
                return EndpointMatch(
                    url=url,
                    method=http_method.upper(),
                    path_pattern=template,
                    operation=operation,
                    contract=contract,
                    path_params=params,
                )
        return None
