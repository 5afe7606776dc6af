"""
Path template matching.

A template segment wrapped in braces matches exactly one non-empty path
segment. Every other segment must match literally, and both paths must have
the same number of segments.
"""

from typing import Dict, Iterable, Optional


def is_placeholder(segment: str) -> bool:
    return len(segment) >= 2 and segment.startswith("{") and segment.endswith("}")


def extract_path_parameters(actual_path: str, template_path: str) -> Optional[Dict[str, str]]:
    """
    Match a path against a template and capture placeholder values.

    Args:
        actual_path: Request path, base path already removed
        template_path: Contract path template, e.g. "/albums/{id}/tracks"

    Returns:
        Placeholder name -> segment value, or None if the path does not match
    """
    actual_segments = actual_path.split("/")
    template_segments = template_path.split("/")

    if len(actual_segments) != len(template_segments):
        return None

    captured: Dict[str, str] = {}
    for actual, expected in zip(actual_segments, template_segments):
        if is_placeholder(expected):
            if not actual:
                return None
            captured[expected[1:-1]] = actual
        elif actual != expected:
            return None
    return captured


def paths_match(actual_path: str, template_path: str) -> bool:
    """True if the request path matches the template."""
    return extract_path_parameters(actual_path, template_path) is not None


def find_matching_template(actual_path: str, templates: Iterable[str]) -> Optional[str]:
    """First template, in iteration order, that matches the path."""
    for template in templates:
        if paths_match(actual_path, template):
            return template
    return None
