"""Shared fixtures for report tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from apidiff.compare.models import (
    ApiDifference,
    ChangeType,
    ComparisonResult,
    ElementKind,
    Severity,
)

TIMESTAMP = datetime(2024, 5, 1, 12, 30, 0, tzinfo=UTC)


@pytest.fixture
def mixed_result() -> ComparisonResult:
    """One of each common change type, two of them breaking."""
    return ComparisonResult(
        baseline_name="Contoso.Api",
        candidate_name="Contoso.Api.V2",
        baseline_location="/builds/v1/Contoso.Api.dll",
        candidate_location="",
        timestamp=TIMESTAMP,
        differences=(
            ApiDifference(
                change_type=ChangeType.ADDED,
                element_kind=ElementKind.TYPE,
                element_name="Contoso.Api.Bar",
                description="Added class 'Contoso.Api.Bar'",
                new_signature="public class Bar",
            ),
            ApiDifference(
                change_type=ChangeType.REMOVED,
                element_kind=ElementKind.METHOD,
                element_name="Contoso.Api.Foo.Run",
                description="Removed method 'Contoso.Api.Foo.Run'",
                is_breaking_change=True,
                severity=Severity.ERROR,
                old_signature="public void Run(int count)",
            ),
            ApiDifference(
                change_type=ChangeType.MODIFIED,
                element_kind=ElementKind.TYPE,
                element_name="Contoso.Api.Foo",
                description="Modified class 'Contoso.Api.Foo'",
                is_breaking_change=True,
                severity=Severity.WARNING,
                old_signature="public class Foo",
                new_signature="public sealed class Foo",
                details=["Member signature changed"],
            ),
            ApiDifference(
                change_type=ChangeType.EXCLUDED,
                element_kind=ElementKind.TYPE,
                element_name="Contoso.Internal.Cache",
                description="Excluded Type: Contoso.Internal.Cache",
            ),
        ),
    )


@pytest.fixture
def empty_result() -> ComparisonResult:
    return ComparisonResult(
        baseline_name="Contoso.Api",
        candidate_name="Contoso.Api",
        timestamp=TIMESTAMP,
    )
