"""
Health-check agent.

Runs the full request pipeline: interpret the text, resolve the endpoint,
validate the request and, only when it is valid, hand it to the executor.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union
from urllib.parse import parse_qsl, urlsplit

from contract_gate.routing import EndpointMatch, EndpointResolver, NotFound
from contract_gate.validation import RequestValidator, ValidationResult

from .executors import ApiHealthStatus, HttpExecutor, SyntheticExecutor
from .request_parser import ParsedRequest, RequestParser


logger = logging.getLogger(__name__)


INVALID_FORMAT_MESSAGE = (
    'Invalid request format. Expected: "Determine the status of <URL> using <METHOD> '
    '[with query parameters <params>] [with headers <headers>] [and body <body>]".'
)
CONTRACT_MISMATCH_MESSAGE = (
    "Invalid request: The endpoint or request parameters do not match our OpenAPI specification."
)
UNREACHABLE_MESSAGE = "Error: Unable to reach the specified URL."

Executor = Union[HttpExecutor, SyntheticExecutor]


@dataclass(frozen=True)
class CheckOutcome:
    """
    Result of one pipeline run.

    resolution is always set; validation only when the endpoint resolved;
    status only when validation passed.
    """

    request: ParsedRequest
    resolution: Union[EndpointMatch, NotFound]
    validation: Optional[ValidationResult] = None
    status: Optional[ApiHealthStatus] = None

    @property
    def accepted(self) -> bool:
        return self.validation is not None and self.validation.valid


def effective_query_params(request: ParsedRequest) -> Dict[str, str]:
    """Query string of the URL merged with the explicit parameters (explicit wins)."""
    try:
        from_url = dict(parse_qsl(urlsplit(request.url).query, keep_blank_values=True))
    except ValueError:
        from_url = {}
    from_url.update(request.query_params)
    return from_url


class HealthCheckAgent:
    """
    Orchestrates parsing, validation and execution of health checks.

    The executor is never called for a request that failed resolution or
    validation.
    """

    def __init__(
        self,
        resolver: EndpointResolver,
        validator: RequestValidator,
        executor: Executor,
    ):
        """
        Initialize agent.

        Args:
            resolver: Endpoint resolver over the startup host index
            validator: Request validator
            executor: Transport executor
        """
        self.resolver = resolver
        self.validator = validator
        self.executor = executor

    def check(self, request: ParsedRequest) -> CheckOutcome:
        """
        Resolve, validate and, if valid, execute a request.

        Args:
            request: Structured request

        Returns:
            CheckOutcome
        """
        resolution = self.resolver.resolve(request.url, request.method)
        if isinstance(resolution, NotFound):
            return CheckOutcome(request=request, resolution=resolution)

        validation = self.validator.validate(
            resolution,
            effective_query_params(request),
            request.body,
            headers=request.headers,
        )
        if not validation.valid:
            logger.info(
                f"Rejected {request.method} {request.url}: "
                f"{', '.join(str(e) for e in validation.errors)}"
            )
            return CheckOutcome(request=request, resolution=resolution, validation=validation)

        status = self.executor.execute(request)
        return CheckOutcome(
            request=request, resolution=resolution, validation=validation, status=status
        )

    def process_request(self, text: str) -> str:
        """
        Answer a free-text health check request.

        Args:
            text: User input

        Returns:
            Message for the user
        """
        parsed = RequestParser.parse(text)
        if parsed is None:
            return INVALID_FORMAT_MESSAGE

        outcome = self.check(parsed)
        if not outcome.accepted:
            return CONTRACT_MISMATCH_MESSAGE

        return format_status(parsed.url, outcome.status)

    def close(self) -> None:
        self.executor.close()


def format_status(url: str, status: Optional[ApiHealthStatus]) -> str:
    if status is None or status.status_code == -1:
        return UNREACHABLE_MESSAGE
    return f"The HTTP status of {url} is {status.status_code}."
