"""Request routing: host index, path matching, endpoint resolution."""

from .endpoint_resolver import EndpointMatch, EndpointResolver, NotFound, ResolutionFailure
from .host_index import HostIndex
from .path_matcher import extract_path_parameters, find_matching_template, paths_match

__all__ = [
    "EndpointMatch",
    "EndpointResolver",
    "HostIndex",
    "NotFound",
    "ResolutionFailure",
    "extract_path_parameters",
    "find_matching_template",
    "paths_match",
]
