"""
Validation error taxonomy.

Validation never raises for a bad request; every violation becomes a
ValidationError entry in a ValidationResult.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class ErrorKind(str, Enum):
    MISSING_REQUIRED_PARAMETER = "missing_required_parameter"
    INVALID_PARAMETER_TYPE = "invalid_parameter_type"
    MISSING_REQUIRED_BODY = "missing_required_body"
    INVALID_CONTENT_TYPE = "invalid_content_type"
    INVALID_BODY_STRUCTURE = "invalid_body_structure"
    INVALID_BODY_FIELD_TYPE = "invalid_body_field_type"
    MISSING_REQUIRED_BODY_FIELD = "missing_required_body_field"
    UNEXPECTED_BODY = "unexpected_body"


@dataclass(frozen=True)
class ValidationError:
    kind: ErrorKind
    field: Optional[str] = None

    def __str__(self) -> str:
        if self.field is None:
            return self.kind.value
        return f"{self.kind.value}: {self.field}"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one request.

    Invariants:
    - valid iff there are no errors
    - errors keep the order they were found in
    """

    errors: Tuple[ValidationError, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def kinds(self) -> List[ErrorKind]:
        return [error.kind for error in self.errors]

    def fields_for(self, kind: ErrorKind) -> List[Optional[str]]:
        """Fields reported for one error kind, in order."""
        return [error.field for error in self.errors if error.kind == kind]
