"""Plain-text rendering of resolution and validation results."""

from typing import List

from contract_gate.contracts import ObjectSchema
from contract_gate.routing import EndpointMatch, NotFound, ResolutionFailure
from contract_gate.validation import ValidationResult


NOT_FOUND_MESSAGES = {
    ResolutionFailure.INVALID_URL: "Not a valid absolute http(s) URL: {url}",
    ResolutionFailure.NO_CONTRACT_FOR_HOST: "No OpenAPI specs found for url: {url}",
    ResolutionFailure.NO_ENDPOINT: "No matching endpoint found for {url} with method {method}",
}


def describe_not_found(not_found: NotFound) -> str:
    return NOT_FOUND_MESSAGES[not_found.reason].format(url=not_found.url, method=not_found.method)


def describe_endpoint(match: EndpointMatch) -> str:
    """
    Render a matched endpoint: parameters and request body shape.

    Args:
        match: Resolved endpoint

    Returns:
        Multi-line description
    """
    lines: List[str] = [
        f"URL: {match.url}",
        f"Method: {match.method}",
        f"Path Pattern: {match.path_pattern}",
    ]
    if match.contract is not None:
        lines.append(f"Contract: {match.contract.title or match.contract.source}")

    lines.append("")
    lines.append("Parameters:")
    if not match.operation.parameters:
        lines.append("  None")
    for param in match.operation.parameters:
        lines.append(
            f"  - {param.name} ({param.location}, required: {str(param.required).lower()}): "
            f"{param.description or 'No description'}"
        )
        lines.append(f"    Type: {param.schema.kind.value}")

    lines.append("")
    lines.append("Request Body:")
    body = match.operation.request_body
    if body is None:
        lines.append("  None")
    else:
        lines.append(f"  Required: {str(body.required).lower()}")
        lines.append(f"  Description: {body.description or 'No description'}")
        for content_type, schema in body.content.items():
            lines.append(f"  Content Type: {content_type}")
            lines.append(f"  Schema Type: {schema.kind.value}")
            if isinstance(schema, ObjectSchema) and schema.properties:
                lines.append("  Properties:")
                for name, prop in schema.properties.items():
                    marker = " *" if name in schema.required else ""
                    lines.append(
                        f"    - {name}{marker} ({prop.kind.value}): "
                        f"{prop.description or 'No description'}"
                    )

    return "\n".join(lines)


def describe_validation(result: ValidationResult) -> str:
    """One line per violation, or "Valid request"."""
    if result.valid:
        return "Valid request"
    return "\n".join(f"  - {error}" for error in result.errors)
