"""
Eager resolution of internal $ref pointers.

Contract documents are dereferenced once at load time so nothing downstream
ever follows a JSON pointer. Pointer lookup goes through a referencing
registry holding the single document.
"""

import logging
from typing import Any, List, Tuple

from referencing import Registry, Specification
from referencing._core import Resolver
from referencing.exceptions import Unresolvable


logger = logging.getLogger(__name__)


DOCUMENT_URI = "urn:contract-gate:document"


def document_resolver(document: Any) -> Resolver:
    """Resolver with the document registered as the base resource."""
    # OpenAPI documents are not JSON Schema resources; no $id or anchor scoping
    resource = Specification.OPAQUE.create_resource(document)
    return Registry().with_resource(DOCUMENT_URI, resource).resolver(base_uri=DOCUMENT_URI)


def lookup_pointer(document: Any, ref: str) -> Any:
    """
    Follow an internal JSON pointer.

    Args:
        document: Root document
        ref: Reference string such as "#/components/schemas/Album"

    Returns:
        Target node

    Raises:
        KeyError: If the reference is external or does not resolve
    """
    return _lookup(document_resolver(document), ref)


def _lookup(resolver: Resolver, ref: str) -> Any:
    if not ref.startswith("#"):
        raise KeyError(f"External reference not supported: {ref}")
    try:
        return resolver.lookup(ref).contents
    except Unresolvable as e:
        raise KeyError(f"Unresolvable reference: {ref}") from e
    except (ValueError, TypeError) as e:
        # non-numeric list index, or a pointer through a scalar
        raise KeyError(f"Unresolvable reference: {ref}") from e


def resolve_references(document: Any, source: str = "<document>") -> Any:
    """
    Return a copy of the document with every internal $ref inlined.

    Cyclic, external and unresolvable references are replaced with an empty
    mapping, which the schema model reads as an unknown (permissive) schema.

    Args:
        document: Parsed contract document
        source: Name used in log messages

    Returns:
        Dereferenced copy of the document
    """
    return _resolve(document, document_resolver(document), source, [])


def _resolve(node: Any, resolver: Resolver, source: str, stack: List[str]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            return _resolve_ref(ref, resolver, source, stack)
        return {key: _resolve(value, resolver, source, stack) for key, value in node.items()}

    if isinstance(node, list):
        return [_resolve(item, resolver, source, stack) for item in node]

    return node


def _resolve_ref(ref: str, resolver: Resolver, source: str, stack: List[str]) -> Any:
    if ref in stack:
        logger.debug(f"{source}: cyclic reference {ref} left unresolved")
        return {}

    try:
        target = _lookup(resolver, ref)
    except KeyError as e:
        logger.warning(f"{source}: {e.args[0]}")
        return {}

    stack.append(ref)
    try:
        return _resolve(target, resolver, source, stack)
    finally:
        stack.pop()


def count_references(document: Any) -> Tuple[int, int]:
    """
    Count $ref entries in a raw document.

    Returns:
        (internal, external) reference counts
    """
    internal = external = 0
    pending = [document]
    while pending:
        node = pending.pop()
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                if ref.startswith("#"):
                    internal += 1
                else:
                    external += 1
            pending.extend(node.values())
        elif isinstance(node, list):
            pending.extend(node)
    return internal, external
