"""Shared fixtures for comparison engine tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from apidiff.compare import build_comparer
from apidiff.compare.comparer import ApiComparer
from apidiff.config.models import ComparisonConfig
from apidiff.surface import SurfaceDocument, TypeDescriptor, parse_surface

SurfaceFactory = Callable[..., SurfaceDocument]


@pytest.fixture
def make_surface() -> SurfaceFactory:
    """Build a surface from type entries in document form."""

    def factory(*types: dict[str, Any], name: str = "Contoso.Api") -> SurfaceDocument:
        return parse_surface({"name": name, "types": list(types)}, location=f"{name}.json")

    return factory


@pytest.fixture
def make_type(make_surface: SurfaceFactory) -> Callable[..., TypeDescriptor]:
    """Build a single type descriptor from keyword fields."""

    def factory(**fields: Any) -> TypeDescriptor:
        fields.setdefault("name", "Widget")
        fields.setdefault("namespace", "Contoso.Api")
        return make_surface(fields).types[0]

    return factory


@pytest.fixture
def make_comparer() -> Callable[..., ApiComparer]:
    """Comparer wired from a configuration given as a (camelCase or snake_case) dict."""

    def factory(config: dict[str, Any] | None = None) -> ApiComparer:
        return build_comparer(ComparisonConfig.model_validate(config or {}))

    return factory
