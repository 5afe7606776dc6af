"""Health-check agent: request interpretation, execution and presentation."""

from .describe import describe_endpoint, describe_not_found, describe_validation
from .executors import ApiHealthStatus, HttpExecutor, SyntheticExecutor
from .health_agent import CheckOutcome, HealthCheckAgent
from .request_parser import ParsedRequest, RequestParser

__all__ = [
    "ApiHealthStatus",
    "CheckOutcome",
    "HealthCheckAgent",
    "HttpExecutor",
    "ParsedRequest",
    "RequestParser",
    "SyntheticExecutor",
    "describe_endpoint",
    "describe_not_found",
    "describe_validation",
]
