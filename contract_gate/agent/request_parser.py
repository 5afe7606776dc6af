"""
Free-text request interpreter.

Understands one phrase:

    Determine the status of <URL> using <METHOD>
        [with query parameters k=v, ...]
        [with headers k: v, ...]
        [and body <body>]
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional


REQUEST_PATTERN = re.compile(
    r"Determine the status of (\S+) using (GET|POST|PUT|DELETE|PATCH|OPTIONS|HEAD)"
    r"(?:\s+with\s+query\s+parameters\s+(.+?))?"
    r"(?:\s+with\s+headers\s+(.+?))?"
    r"(?:\s+and\s+body\s+(.+))?",
    re.IGNORECASE | re.DOTALL,
)

_PAIR_SEPARATOR = re.compile(r",\s*")


@dataclass(frozen=True)
class ParsedRequest:
    url: str
    method: str = "GET"
    query_params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None


def parse_key_value_pairs(text: Optional[str]) -> Dict[str, str]:
    """
    Parse "a=1, b: 2" style pairs.

    Entries without '=' or ':' are dropped. '=' wins over ':' so URLs and
    times survive as values.
    """
    if not text or not text.strip():
        return {}

    pairs: Dict[str, str] = {}
    for entry in _PAIR_SEPARATOR.split(text.strip()):
        entry = entry.strip()
        if "=" in entry:
            key, value = entry.split("=", 1)
        elif ":" in entry:
            key, value = entry.split(":", 1)
        else:
            continue
        pairs[key.strip()] = value.strip()
    return pairs


class RequestParser:
    """Turns user text into a ParsedRequest."""

    @staticmethod
    def parse(text: str) -> Optional[ParsedRequest]:
        """
        Parse a user request.

        Args:
            text: User input

        Returns:
            ParsedRequest, or None if the text does not follow the phrase
        """
        match = REQUEST_PATTERN.fullmatch(text.strip())
        if match is None:
            return None

        url, method, query, headers, body = match.groups()
        return ParsedRequest(
            url=url,
            method=method.upper(),
            query_params=parse_key_value_pairs(query),
            headers=parse_key_value_pairs(headers),
            body=body.strip() if body and body.strip() else None,
        )
