"""Compute raw differences between matched types and members.

Verdicts set here are provisional; ``ChangeClassifier`` has the final say.
"""

from __future__ import annotations

import structlog

from apidiff.compare.analyzer import TypeAnalyzer
from apidiff.compare.models import (
    ApiDifference,
    ApiMember,
    ChangeType,
    ElementKind,
    Severity,
)
from apidiff.core.logging import get_logger
from apidiff.surface.descriptors import Accessibility, TypeDescriptor


def is_reduced_accessibility(old: Accessibility, new: Accessibility) -> bool:
    """True when ``new`` is strictly less visible than ``old``."""
    return new.rank < old.rank


def _describe(change_type: ChangeType, member: ApiMember) -> str:
    return f"{change_type.value} {member.kind.value.lower()} '{member.full_name}'"


class DifferenceCalculator:
    def __init__(
        self,
        type_analyzer: TypeAnalyzer | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._analyzer = type_analyzer or TypeAnalyzer()
        self._log = logger or get_logger(__name__)

    # -- types --------------------------------------------------------------

    def calculate_added_type(self, new_type: TypeDescriptor) -> ApiDifference:
        if new_type is None:
            raise ValueError("new_type must not be None")
        try:
            member = self._analyzer.analyze_type(new_type)
        except Exception as e:
            self._log.error("added_type_failed", type=new_type.full_name, error=str(e))
            raise
        return self.calculate_added_member(member)

    def calculate_removed_type(self, old_type: TypeDescriptor) -> ApiDifference:
        if old_type is None:
            raise ValueError("old_type must not be None")
        try:
            member = self._analyzer.analyze_type(old_type)
        except Exception as e:
            self._log.error("removed_type_failed", type=old_type.full_name, error=str(e))
            raise
        return self.calculate_removed_member(member)

    def calculate_type_changes(
        self,
        old_type: TypeDescriptor,
        new_type: TypeDescriptor,
        signatures_equivalent: bool = False,
    ) -> ApiDifference | None:
        """Type-level change between a matched pair, or None.

        An accessibility change is reported on its own (breaking only when
        reduced). Otherwise ``signatures_equivalent`` suppresses the textual
        signature comparison for pairs matched through a rename.
        """
        if old_type is None or new_type is None:
            raise ValueError("old_type and new_type must not be None")
        try:
            old = self._analyzer.analyze_type(old_type)
            new = self._analyzer.analyze_type(new_type)
        except Exception as e:
            self._log.error(
                "type_changes_failed",
                old_type=old_type.full_name,
                new_type=new_type.full_name,
                error=str(e),
            )
            raise

        if old.accessibility != new.accessibility:
            breaking = is_reduced_accessibility(old.accessibility, new.accessibility)
            return self._modified(
                old, new, breaking, Severity.ERROR if breaking else Severity.INFO
            )

        if signatures_equivalent or old.signature == new.signature:
            return None

        return self._modified(old, new, True, Severity.WARNING)

    # -- members ------------------------------------------------------------

    def calculate_added_member(self, new_member: ApiMember) -> ApiDifference:
        if new_member is None:
            raise ValueError("new_member must not be None")
        return ApiDifference(
            change_type=ChangeType.ADDED,
            element_kind=ElementKind.for_member(new_member.kind),
            element_name=new_member.full_name,
            description=_describe(ChangeType.ADDED, new_member),
            is_breaking_change=False,
            severity=Severity.INFO,
            new_signature=new_member.signature,
        )

    def calculate_removed_member(self, old_member: ApiMember) -> ApiDifference:
        if old_member is None:
            raise ValueError("old_member must not be None")
        return ApiDifference(
            change_type=ChangeType.REMOVED,
            element_kind=ElementKind.for_member(old_member.kind),
            element_name=old_member.full_name,
            description=_describe(ChangeType.REMOVED, old_member),
            is_breaking_change=True,
            severity=Severity.ERROR,
            old_signature=old_member.signature,
        )

    def calculate_member_changes(
        self, old_member: ApiMember, new_member: ApiMember
    ) -> ApiDifference | None:
        """One Modified difference listing every detected note, or None.

        Accessibility and attribute changes are itemized in ``details``; a
        signature change with neither is reported as a generic, breaking one.
        """
        if old_member is None or new_member is None:
            raise ValueError("old_member and new_member must not be None")
        try:
            if old_member.signature == new_member.signature:
                return None

            notes: list[str] = []
            breaking = False
            severity = Severity.INFO

            if old_member.accessibility != new_member.accessibility:
                notes.append(
                    f"Accessibility changed from '{old_member.accessibility.value}' "
                    f"to '{new_member.accessibility.value}'"
                )
                if is_reduced_accessibility(old_member.accessibility, new_member.accessibility):
                    breaking = True
                    severity = Severity.ERROR

            notes.extend(
                f"Removed attribute '{a}'"
                for a in old_member.attributes
                if a not in new_member.attributes
            )
            notes.extend(
                f"Added attribute '{a}'"
                for a in new_member.attributes
                if a not in old_member.attributes
            )

            if not notes:
                notes.append("Member signature changed")
                breaking = True
                severity = Severity.WARNING

            diff = self._modified(old_member, new_member, breaking, severity)
            diff.details.extend(notes)
            return diff
        except Exception as e:
            self._log.error(
                "member_changes_failed",
                old_member=old_member.full_name,
                new_member=new_member.full_name,
                error=str(e),
            )
            return None

    def _modified(
        self, old: ApiMember, new: ApiMember, breaking: bool, severity: Severity
    ) -> ApiDifference:
        return ApiDifference(
            change_type=ChangeType.MODIFIED,
            element_kind=ElementKind.for_member(old.kind),
            element_name=old.full_name,
            description=_describe(ChangeType.MODIFIED, old),
            is_breaking_change=breaking,
            severity=severity,
            old_signature=old.signature,
            new_signature=new.signature,
        )
