"""Diagnostics collected by provider, resource and data source operations."""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"


@dataclass
class Diagnostic:
    severity: str
    summary: str
    detail: str = ""
    path: Optional[str] = None

    def __str__(self) -> str:
        where = f" [{self.path}]" if self.path else ""
        text = f"{self.severity.upper()}{where}: {self.summary}"
        return f"{text}: {self.detail}" if self.detail else text

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "summary": self.summary,
            "detail": self.detail,
            "path": self.path,
        }


class Diagnostics:
    """Ordered list of warnings and errors raised during an operation."""

    def __init__(self):
        self._items: List[Diagnostic] = []

    def add_error(self, summary: str, detail: str = "") -> None:
        self._add(Diagnostic(ERROR, summary, detail))

    def add_attribute_error(self, path: str, summary: str, detail: str = "") -> None:
        self._add(Diagnostic(ERROR, summary, detail, path))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self._add(Diagnostic(WARNING, summary, detail))

    def extend(self, other: "Diagnostics") -> None:
        self._items.extend(other)

    def has_error(self) -> bool:
        return any(d.severity == ERROR for d in self._items)

    def errors(self) -> List[Diagnostic]:
        return [d for d in self._items if d.severity == ERROR]

    def to_list(self) -> List[dict]:
        return [d.to_dict() for d in self._items]

    def _add(self, diagnostic: Diagnostic) -> None:
        if diagnostic.severity == ERROR:
            logger.error("%s", diagnostic)
        else:
            logger.warning("%s", diagnostic)
        self._items.append(diagnostic)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


@dataclass
class OperationResult:
    """Outcome of a resource or data source operation.

    ``state`` is the new state to record. ``removed`` is set when the remote
    object no longer exists and the caller should forget it.
    """
    state: Optional[Any] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    removed: bool = False

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_error()
