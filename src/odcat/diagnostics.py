"""
Diagnostics accumulated while mapping and validating catalog metadata.

Every mapping function returns a MappingResult: the (possibly invalid)
entity it built plus the ordered list of problems found on the way.
Callers merge child results into their own explicitly; no accumulator
is shared between entities.

Kinds:
    PARSE                 malformed date / URL / bool / code, field skipped
    VALIDATION            POD 1.1 business rule violated
    STRUCTURAL            a required nested structure is absent
    DUPLICATE_IDENTIFIER  two datasets in one catalog share an identifier
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class DiagnosticKind(Enum):
    """Category of a recorded problem."""
    PARSE = "parse"
    VALIDATION = "validation"
    STRUCTURAL = "structural"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single problem found in source metadata.

    Properties:
        kind: DiagnosticKind
        message: Human-readable description
        field: Canonical field name the problem relates to (optional)
        source: Dataset title/identifier, set when merged into a catalog
    """

    kind: DiagnosticKind
    message: str
    field: Optional[str] = None
    source: Optional[str] = None

    def tagged(self, source: Optional[str]) -> Diagnostic:
        """Return a copy attributed to `source` (keeps an existing tag)."""
        if source is None or self.source is not None:
            return self
        return replace(self, source=source)

    def __str__(self) -> str:
        prefix = f"[{self.source}] " if self.source else ""
        return f"{prefix}{self.message}"


def parse_error(message: str, field: Optional[str] = None) -> Diagnostic:
    return Diagnostic(DiagnosticKind.PARSE, message, field)


def validation_error(message: str, field: Optional[str] = None) -> Diagnostic:
    return Diagnostic(DiagnosticKind.VALIDATION, message, field)


@dataclass
class MappingResult(Generic[T]):
    """An entity together with the diagnostics produced while building it."""

    value: T
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def add(self, diagnostic: Optional[Diagnostic]) -> None:
        if diagnostic is not None:
            self.diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic], source: Optional[str] = None) -> None:
        for diagnostic in diagnostics:
            self.diagnostics.append(diagnostic.tagged(source))

    def merge(self, child: MappingResult[Any], source: Optional[str] = None) -> Any:
        """Absorb a child result's diagnostics and hand back its value."""
        self.extend(child.diagnostics, source)
        return child.value

    def messages(self) -> List[str]:
        return [str(d) for d in self.diagnostics]


class OdcatError(Exception):
    """Base class for errors raised by this package."""
    pass


class StructuralError(OdcatError):
    """Raised when a required structure is absent and mapping cannot proceed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.diagnostic = Diagnostic(DiagnosticKind.STRUCTURAL, message, field)


class LoadError(OdcatError):
    """
    Raised by the load_* helpers when a loaded tree is invalid.

    Carries the full ordered diagnostic list. `partial` holds whatever
    entity was built (for catalogs: the datasets that loaded cleanly).
    """

    def __init__(
        self,
        diagnostics: List[Diagnostic],
        partial: Any = None,
        title: Optional[str] = None,
        identifier: Optional[str] = None,
    ):
        self.diagnostics = list(diagnostics)
        self.partial = partial
        self.title = title
        self.identifier = identifier
        label = identifier or title
        head = f"{label}: " if label else ""
        super().__init__(f"{head}{len(self.diagnostics)} problem(s): " + "; ".join(self.messages()))

    def messages(self) -> List[str]:
        return [str(d) for d in self.diagnostics]


__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "MappingResult",
    "OdcatError",
    "StructuralError",
    "LoadError",
    "parse_error",
    "validation_error",
]
