"""Tests for compare/classifier.py module."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from apidiff.compare.classifier import ChangeClassifier
from apidiff.compare.models import ApiDifference, ChangeType, ElementKind, Severity
from apidiff.config.models import BreakingChangeRules, ExclusionConfig


def _classifier(
    rules: BreakingChangeRules | None = None, **exclusions: list[str]
) -> ChangeClassifier:
    return ChangeClassifier(rules or BreakingChangeRules(), ExclusionConfig(**exclusions))


def _diff(
    change_type: ChangeType,
    kind: ElementKind = ElementKind.TYPE,
    name: str = "Contoso.Widget",
    **kwargs: object,
) -> ApiDifference:
    return ApiDifference(
        change_type=change_type,
        element_kind=kind,
        element_name=name,
        description=f"{change_type.value} {name}",
        **kwargs,  # type: ignore[arg-type]
    )


class TestExclusion:
    """Excluded differences bypass classification."""

    def test_given_excluded_type_pattern_when_classified_then_excluded(self) -> None:
        """Matching differences become non-breaking Excluded entries."""
        # Given
        diff = _diff(
            ChangeType.REMOVED,
            name="Contoso.Internal.Cache",
            is_breaking_change=True,
            severity=Severity.ERROR,
        )

        # When
        result = _classifier(excluded_type_patterns=["Contoso.Internal.*"]).classify_change(diff)

        # Then
        assert result is diff
        assert diff.change_type is ChangeType.EXCLUDED
        assert diff.is_breaking_change is False
        assert diff.severity is Severity.INFO
        assert diff.description == "Excluded Type: Contoso.Internal.Cache"

    def test_given_member_of_excluded_type_when_classified_then_excluded(self) -> None:
        """A member is excluded when its declaring type is."""
        # Given
        diff = _diff(ChangeType.REMOVED, ElementKind.METHOD, name="Contoso.Legacy.Run")

        # When
        _classifier(excluded_types=["Contoso.Legacy"]).classify_change(diff)

        # Then
        assert diff.change_type is ChangeType.EXCLUDED

    def test_given_already_excluded_when_classified_then_untouched(self) -> None:
        """Excluded differences are terminal."""
        diff = _diff(ChangeType.EXCLUDED)
        diff.description = "kept"

        _classifier().classify_change(diff)

        assert diff.description == "kept"

    @pytest.mark.parametrize(
        ("exclusions", "name", "expected"),
        [
            ({"excluded_types": ["Contoso.Widget"]}, "Contoso.Widget", True),
            ({"excluded_types": ["Contoso.Widget"]}, "contoso.widget", False),
            ({"excluded_type_patterns": ["contoso.*"]}, "Contoso.Widget", True),
            ({"excluded_type_patterns": ["*.Internal"]}, "Contoso.Widget", False),
            ({"excluded_type_patterns": ["Contoso.*Cache"]}, "Contoso.Cache\n", False),
            ({}, "", False),
            ({}, "   ", False),
        ],
    )
    def test_is_type_excluded(
        self, exclusions: dict[str, list[str]], name: str, expected: bool
    ) -> None:
        """Exact names are case-sensitive; patterns are not."""
        assert _classifier(**exclusions).is_type_excluded(name) is expected

    @pytest.mark.parametrize(
        ("exclusions", "name", "expected"),
        [
            ({"excluded_members": ["Contoso.Widget.Run"]}, "Contoso.Widget.Run", True),
            ({"excluded_member_patterns": ["*.Dispose"]}, "Contoso.Widget.Dispose", True),
            ({"excluded_type_patterns": ["*.Widget"]}, "Contoso.Widget.Run", True),
            ({"excluded_members": ["Contoso.Widget.Run"]}, "Contoso.Widget.Stop", False),
            ({"excluded_member_patterns": ["*.Dispose"]}, "Contoso.Widget.Dispose\n", False),
        ],
    )
    def test_is_member_excluded(
        self, exclusions: dict[str, list[str]], name: str, expected: bool
    ) -> None:
        """Members match by name, by pattern or through their declaring type."""
        assert _classifier(**exclusions).is_member_excluded(name) is expected


class TestClassification:
    """Breaking-change policy per change type."""

    @pytest.mark.parametrize(
        ("rules", "kind", "breaking", "severity"),
        [
            (BreakingChangeRules(), ElementKind.TYPE, False, Severity.INFO),
            (BreakingChangeRules(), ElementKind.METHOD, False, Severity.INFO),
            (
                BreakingChangeRules(treat_added_type_as_breaking=True),
                ElementKind.TYPE,
                True,
                Severity.WARNING,
            ),
            (
                BreakingChangeRules(treat_added_member_as_breaking=True),
                ElementKind.PROPERTY,
                True,
                Severity.WARNING,
            ),
        ],
    )
    def test_added(
        self,
        rules: BreakingChangeRules,
        kind: ElementKind,
        breaking: bool,
        severity: Severity,
    ) -> None:
        """Additions are breaking only when a rule says so."""
        diff = _classifier(rules).classify_change(_diff(ChangeType.ADDED, kind))

        assert diff.is_breaking_change is breaking
        assert diff.severity is severity

    @pytest.mark.parametrize(
        ("rules", "kind", "breaking", "severity"),
        [
            (BreakingChangeRules(), ElementKind.TYPE, True, Severity.ERROR),
            (BreakingChangeRules(), ElementKind.FIELD, True, Severity.ERROR),
            (
                BreakingChangeRules(treat_type_removal_as_breaking=False),
                ElementKind.TYPE,
                False,
                Severity.WARNING,
            ),
            (
                BreakingChangeRules(treat_member_removal_as_breaking=False),
                ElementKind.EVENT,
                False,
                Severity.WARNING,
            ),
        ],
    )
    def test_removed(
        self,
        rules: BreakingChangeRules,
        kind: ElementKind,
        breaking: bool,
        severity: Severity,
    ) -> None:
        """Removals follow the removal rules."""
        diff = _classifier(rules).classify_change(_diff(ChangeType.REMOVED, kind))

        assert diff.is_breaking_change is breaking
        assert diff.severity is severity

    def test_modified_signature_change_escalates_to_error(self) -> None:
        """Differing signatures are Error-level breaking changes by default."""
        # Given
        diff = _diff(
            ChangeType.MODIFIED,
            ElementKind.METHOD,
            old_signature="public void Run()",
            new_signature="public void Run(int x)",
            is_breaking_change=True,
            severity=Severity.WARNING,
        )

        # When
        _classifier().classify_change(diff)

        # Then
        assert diff.is_breaking_change is True
        assert diff.severity is Severity.ERROR

    def test_modified_with_rule_off_keeps_calculator_verdict(self) -> None:
        """With the signature rule off, the earlier verdict stands."""
        # Given
        rules = BreakingChangeRules(treat_signature_change_as_breaking=False)
        breaking = _diff(
            ChangeType.MODIFIED,
            old_signature="a",
            new_signature="b",
            is_breaking_change=True,
            severity=Severity.WARNING,
        )
        benign = _diff(
            ChangeType.MODIFIED,
            old_signature="a",
            new_signature="b",
            severity=Severity.WARNING,
        )

        # When
        classifier = _classifier(rules)
        classifier.classify_change(breaking)
        classifier.classify_change(benign)

        # Then
        assert breaking.is_breaking_change is True
        assert breaking.severity is Severity.WARNING
        assert benign.is_breaking_change is False
        assert benign.severity is Severity.INFO

    def test_moved_is_breaking_warning(self) -> None:
        """Moves are always breaking with Warning severity."""
        diff = _classifier().classify_change(_diff(ChangeType.MOVED))

        assert diff.is_breaking_change is True
        assert diff.severity is Severity.WARNING


class TestConstruction:
    """ChangeClassifier construction."""

    def test_none_arguments_rejected(self) -> None:
        """Rules and exclusions are required."""
        with pytest.raises(ValueError):
            ChangeClassifier(None, ExclusionConfig())  # type: ignore[arg-type]

    def test_none_difference_rejected(self) -> None:
        """classify_change(None) raises ValueError."""
        with pytest.raises(ValueError):
            _classifier().classify_change(None)  # type: ignore[arg-type]

    def test_patterns_compiled_once(self) -> None:
        """Pattern compilation is logged once per scope."""
        logger = MagicMock()

        ChangeClassifier(
            BreakingChangeRules(),
            ExclusionConfig(excluded_type_patterns=["A.*", "B.*"]),
            logger,
        )

        compiled = [
            c.kwargs for c in logger.debug.call_args_list if c.args[0] == "exclusion_patterns_compiled"
        ]
        assert compiled == [{"scope": "type", "count": 2}, {"scope": "member", "count": 0}]
