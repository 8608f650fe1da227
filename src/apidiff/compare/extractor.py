"""Walk an API surface and extract its exposed types and members."""

from __future__ import annotations

import structlog

from apidiff.compare.analyzer import TypeAnalyzer
from apidiff.compare.models import ApiMember
from apidiff.compare.wildcards import matches_wildcard
from apidiff.config.models import FilterConfig
from apidiff.core.errors import SurfaceLoadError
from apidiff.core.logging import get_logger
from apidiff.surface.descriptors import ReflectedSurface, TypeDescriptor

COMPILER_GENERATED_ATTRIBUTE = "CompilerGeneratedAttribute"


def is_compiler_generated(type_desc: TypeDescriptor) -> bool:
    """Closures, iterators and other synthesized types. Always excluded."""
    return (
        "<" in type_desc.name
        or type_desc.name.startswith("__")
        or COMPILER_GENERATED_ATTRIBUTE in type_desc.attributes
    )


def looks_compiler_generated(type_desc: TypeDescriptor) -> bool:
    """Wider naming heuristic, dropped unless ``include_compiler_generated``."""
    return (
        is_compiler_generated(type_desc)
        or "AnonymousType" in type_desc.name
        or "DisplayClass" in type_desc.name
    )


def _namespace_starts_with(type_desc: TypeDescriptor, prefixes: list[str]) -> bool:
    namespace = type_desc.namespace.lower()
    return any(namespace.startswith(prefix.lower()) for prefix in prefixes)


class ApiExtractor:
    """Produces the comparable entities of one surface.

    Types come back ordered by full name. Without a filter only exported
    types are considered; ``FilterConfig.include_internals`` widens that to
    every declared type.
    """

    def __init__(
        self,
        type_analyzer: TypeAnalyzer | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._analyzer = type_analyzer or TypeAnalyzer()
        self._log = logger or get_logger(__name__)

    def extract_api_members(
        self, surface: ReflectedSurface, filter_config: FilterConfig | None = None
    ) -> list[ApiMember]:
        """Every selected type as an ``ApiMember``, each followed by its members."""
        if surface is None:
            raise ValueError("surface must not be None")

        self._log.info("extracting_api_members", surface=surface.name)
        if filter_config is not None:
            self._log.info(
                "applying_filters",
                includes=len(filter_config.include_namespaces) + len(filter_config.include_types),
                excludes=len(filter_config.exclude_namespaces) + len(filter_config.exclude_types),
            )

        members: list[ApiMember] = []
        for type_desc in self.get_public_types(surface, filter_config):
            try:
                members.append(self._analyzer.analyze_type(type_desc))
                type_members = self.extract_type_members(type_desc)
            except Exception as e:
                self._log.error("extract_type_failed", type=type_desc.full_name, error=str(e))
                continue
            members.extend(type_members)
            self._log.debug("type_extracted", type=type_desc.full_name, members=len(type_members))

        self._log.info("api_members_extracted", surface=surface.name, count=len(members))
        return members

    def extract_type_members(self, type_desc: TypeDescriptor) -> list[ApiMember]:
        """Methods, properties, fields, events then constructors of one type."""
        if type_desc is None:
            raise ValueError("type_desc must not be None")
        return [
            *self._analyzer.analyze_methods(type_desc),
            *self._analyzer.analyze_properties(type_desc),
            *self._analyzer.analyze_fields(type_desc),
            *self._analyzer.analyze_events(type_desc),
            *self._analyzer.analyze_constructors(type_desc),
        ]

    def get_public_types(
        self, surface: ReflectedSurface, filter_config: FilterConfig | None = None
    ) -> list[TypeDescriptor]:
        """Selected types of ``surface``, sorted by full name.

        A ``SurfaceLoadError`` while enumerating degrades to the types that
        did load; any other failure is logged and re-raised.
        """
        if surface is None:
            raise ValueError("surface must not be None")

        try:
            declared = list(surface.get_types())
        except SurfaceLoadError as e:
            self._log.error("surface_partially_loaded", surface=surface.name, error=str(e))
            for failure in e.details.get("failures", []):
                self._log.error("type_load_failure", surface=surface.name, failure=failure)
            declared = list(e.loaded_types)
        except Exception as e:
            self._log.error("surface_types_failed", surface=surface.name, error=str(e))
            raise

        include_internals = filter_config is not None and filter_config.include_internals
        types = [
            t
            for t in declared
            if (include_internals or t.is_exported)
            and not is_compiler_generated(t)
            and not t.is_special_name
        ]

        if filter_config is not None:
            types = self._apply_filters(types, filter_config)

        return sorted(types, key=lambda t: t.full_name)

    def _apply_filters(
        self, types: list[TypeDescriptor], config: FilterConfig
    ) -> list[TypeDescriptor]:
        if config.include_namespaces:
            self._log.debug("filter_include_namespaces", namespaces=config.include_namespaces)
            types = [t for t in types if _namespace_starts_with(t, config.include_namespaces)]

        if config.exclude_namespaces:
            self._log.debug("filter_exclude_namespaces", namespaces=config.exclude_namespaces)
            types = [t for t in types if not _namespace_starts_with(t, config.exclude_namespaces)]

        if config.include_types:
            self._log.debug("filter_include_types", patterns=config.include_types)
            types = [
                t
                for t in types
                if any(matches_wildcard(t.full_name, p) for p in config.include_types)
            ]

        if config.exclude_types:
            self._log.debug("filter_exclude_types", patterns=config.exclude_types)
            types = [
                t
                for t in types
                if not any(matches_wildcard(t.full_name, p) for p in config.exclude_types)
            ]

        if not config.include_compiler_generated:
            types = [t for t in types if not looks_compiler_generated(t)]

        return types
