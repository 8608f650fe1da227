"""Data models for API comparison.

``ApiMember`` is the comparison unit; ``ApiDifference`` the output unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from apidiff.surface.descriptors import Accessibility


class MemberKind(str, Enum):
    CLASS = "Class"
    INTERFACE = "Interface"
    STRUCT = "Struct"
    ENUM = "Enum"
    DELEGATE = "Delegate"
    METHOD = "Method"
    PROPERTY = "Property"
    FIELD = "Field"
    EVENT = "Event"
    CONSTRUCTOR = "Constructor"

    @property
    def is_type(self) -> bool:
        return self in _TYPE_KINDS


_TYPE_KINDS = frozenset(
    {
        MemberKind.CLASS,
        MemberKind.INTERFACE,
        MemberKind.STRUCT,
        MemberKind.ENUM,
        MemberKind.DELEGATE,
    }
)


class ChangeType(str, Enum):
    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"
    MOVED = "Moved"
    EXCLUDED = "Excluded"


class ElementKind(str, Enum):
    TYPE = "Type"
    METHOD = "Method"
    PROPERTY = "Property"
    FIELD = "Field"
    EVENT = "Event"
    CONSTRUCTOR = "Constructor"

    @classmethod
    def for_member(cls, kind: MemberKind) -> ElementKind:
        if kind.is_type:
            return cls.TYPE
        return cls(kind.value)


class Severity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"


@dataclass(frozen=True, slots=True, eq=False)
class ApiMember:
    """One exported entity: a type itself or one of its members.

    Identity key is ``(full_name, signature)``; two overloads share a full
    name but never a signature.
    """

    name: str
    full_name: str
    kind: MemberKind
    signature: str
    namespace: str = ""
    declaring_type: str = ""  # empty for top-level types
    accessibility: Accessibility = Accessibility.PUBLIC
    attributes: tuple[str, ...] = ()

    def is_valid(self) -> bool:
        return bool(self.name.strip() and self.full_name.strip() and self.signature.strip())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiMember):
            return NotImplemented
        return (self.full_name, self.signature) == (other.full_name, other.signature)

    def __hash__(self) -> int:
        return hash((self.full_name, self.signature))

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.full_name}"


@dataclass(slots=True)
class ApiDifference:
    """One detected change.

    Created by the difference calculator; the classification fields
    (``change_type``, ``is_breaking_change``, ``severity``, ``description``)
    are rewritten once by the change classifier.
    """

    change_type: ChangeType
    element_kind: ElementKind
    element_name: str
    description: str
    is_breaking_change: bool = False
    severity: Severity = Severity.INFO
    old_signature: str | None = None
    new_signature: str | None = None
    details: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ComparisonSummary:
    added_count: int = 0
    removed_count: int = 0
    modified_count: int = 0
    breaking_changes_count: int = 0

    @property
    def total_changes(self) -> int:
        return self.added_count + self.removed_count + self.modified_count


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """Outcome of comparing a baseline surface with a candidate surface."""

    baseline_name: str
    candidate_name: str
    baseline_location: str = ""
    candidate_location: str = ""
    differences: tuple[ApiDifference, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def summary(self) -> ComparisonSummary:
        return ComparisonSummary(
            added_count=len(self.differences_of(ChangeType.ADDED)),
            removed_count=len(self.differences_of(ChangeType.REMOVED)),
            modified_count=len(self.differences_of(ChangeType.MODIFIED)),
            breaking_changes_count=len(self.breaking_changes),
        )

    @property
    def has_breaking_changes(self) -> bool:
        return any(d.is_breaking_change for d in self.differences)

    @property
    def total_differences(self) -> int:
        return len(self.differences)

    @property
    def breaking_changes(self) -> list[ApiDifference]:
        return [d for d in self.differences if d.is_breaking_change]

    def differences_of(self, change_type: ChangeType) -> list[ApiDifference]:
        return [d for d in self.differences if d.change_type is change_type]
