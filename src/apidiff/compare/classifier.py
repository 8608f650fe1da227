"""Apply exclusions and breaking-change policy to raw differences."""

from __future__ import annotations

import re

import structlog

from apidiff.compare.models import ApiDifference, ChangeType, ElementKind, Severity
from apidiff.compare.wildcards import compile_wildcard
from apidiff.config.models import BreakingChangeRules, ExclusionConfig
from apidiff.core.logging import get_logger


class ChangeClassifier:
    """Final classification pass for ``ApiDifference`` records.

    Exclusion patterns are compiled once here; a pattern that fails to
    compile is logged and skipped.
    """

    def __init__(
        self,
        rules: BreakingChangeRules,
        exclusions: ExclusionConfig,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if rules is None or exclusions is None:
            raise ValueError("rules and exclusions must not be None")
        self.rules = rules
        self.exclusions = exclusions
        self._log = logger or get_logger(__name__)
        self._excluded_types = frozenset(exclusions.excluded_types)
        self._excluded_members = frozenset(exclusions.excluded_members)
        self._type_patterns = self._compile("type", exclusions.excluded_type_patterns)
        self._member_patterns = self._compile("member", exclusions.excluded_member_patterns)

    def _compile(self, scope: str, patterns: list[str]) -> tuple[tuple[str, re.Pattern[str]], ...]:
        compiled = []
        for pattern in patterns:
            try:
                compiled.append((pattern, compile_wildcard(pattern)))
            except re.error as e:
                self._log.warning("invalid_exclusion_pattern", scope=scope, pattern=pattern, error=str(e))
        self._log.debug("exclusion_patterns_compiled", scope=scope, count=len(compiled))
        return tuple(compiled)

    def classify_change(self, difference: ApiDifference) -> ApiDifference:
        """Classify ``difference`` in place and return it."""
        if difference is None:
            raise ValueError("difference must not be None")
        if difference.change_type is ChangeType.EXCLUDED:
            return difference

        if self._should_exclude(difference):
            difference.change_type = ChangeType.EXCLUDED
            difference.is_breaking_change = False
            difference.severity = Severity.INFO
            difference.description = (
                f"Excluded {difference.element_kind.value}: {difference.element_name}"
            )
            self._log.debug(
                "change_excluded",
                kind=difference.element_kind.value,
                name=difference.element_name,
            )
            return difference

        match difference.change_type:
            case ChangeType.ADDED:
                self._classify_added(difference)
            case ChangeType.REMOVED:
                self._classify_removed(difference)
            case ChangeType.MODIFIED:
                self._classify_modified(difference)
            case ChangeType.MOVED:
                difference.is_breaking_change = True
                difference.severity = Severity.WARNING

        self._log.debug(
            "change_classified",
            kind=difference.element_kind.value,
            name=difference.element_name,
            change=difference.change_type.value,
            breaking=difference.is_breaking_change,
        )
        return difference

    def is_type_excluded(self, type_name: str) -> bool:
        if not type_name or not type_name.strip():
            return False
        if type_name in self._excluded_types:
            self._log.debug("type_excluded", name=type_name, rule="exact")
            return True
        for pattern, regex in self._type_patterns:
            if regex.fullmatch(type_name):
                self._log.debug("type_excluded", name=type_name, rule=pattern)
                return True
        return False

    def is_member_excluded(self, member_name: str) -> bool:
        """Excluded by name, by pattern, or because its declaring type is."""
        if not member_name or not member_name.strip():
            return False
        if member_name in self._excluded_members:
            self._log.debug("member_excluded", name=member_name, rule="exact")
            return True
        for pattern, regex in self._member_patterns:
            if regex.fullmatch(member_name):
                self._log.debug("member_excluded", name=member_name, rule=pattern)
                return True
        declaring_type, dot, _ = member_name.rpartition(".")
        if dot and declaring_type and self.is_type_excluded(declaring_type):
            self._log.debug("member_excluded", name=member_name, rule="declaring_type")
            return True
        return False

    def _should_exclude(self, difference: ApiDifference) -> bool:
        if difference.element_kind is ElementKind.TYPE:
            return self.is_type_excluded(difference.element_name)
        return self.is_member_excluded(difference.element_name)

    def _classify_added(self, difference: ApiDifference) -> None:
        if difference.element_kind is ElementKind.TYPE:
            breaking = self.rules.treat_added_type_as_breaking
        else:
            breaking = self.rules.treat_added_member_as_breaking
        difference.is_breaking_change = breaking
        difference.severity = Severity.WARNING if breaking else Severity.INFO

    def _classify_removed(self, difference: ApiDifference) -> None:
        if difference.element_kind is ElementKind.TYPE:
            breaking = self.rules.treat_type_removal_as_breaking
        else:
            breaking = self.rules.treat_member_removal_as_breaking
        difference.is_breaking_change = breaking
        difference.severity = Severity.ERROR if breaking else Severity.WARNING

    def _classify_modified(self, difference: ApiDifference) -> None:
        if (
            difference.old_signature != difference.new_signature
            and self.rules.treat_signature_change_as_breaking
        ):
            difference.is_breaking_change = True
            difference.severity = Severity.ERROR
        elif not difference.is_breaking_change:
            difference.severity = Severity.INFO
