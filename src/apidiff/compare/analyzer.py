"""Turn type and member descriptors into ``ApiMember`` records."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from apidiff.compare.models import ApiMember, MemberKind
from apidiff.compare.signatures import SignatureBuilder
from apidiff.core.logging import get_logger
from apidiff.surface.descriptors import Accessibility, TypeDescriptor, TypeKind

# Attributes the compiler or debugger tooling applies on its own.
NOISE_ATTRIBUTES = frozenset(
    {
        "CompilerGeneratedAttribute",
        "DebuggerHiddenAttribute",
        "DebuggerNonUserCodeAttribute",
    }
)

_KIND_BY_TYPE_KIND = {
    TypeKind.CLASS: MemberKind.CLASS,
    TypeKind.INTERFACE: MemberKind.INTERFACE,
    TypeKind.STRUCT: MemberKind.STRUCT,
    TypeKind.ENUM: MemberKind.ENUM,
    TypeKind.DELEGATE: MemberKind.DELEGATE,
}


def filter_attributes(attributes: Iterable[str]) -> tuple[str, ...]:
    return tuple(a for a in attributes if a not in NOISE_ATTRIBUTES)


class TypeAnalyzer:
    """Builds ``ApiMember`` records for one type and its exposed members.

    A member is exposed when it is public or overrides a public declaration.
    Fields must be public themselves; constructors public or protected.
    """

    def __init__(
        self,
        signature_builder: SignatureBuilder | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._signatures = signature_builder or SignatureBuilder()
        self._log = logger or get_logger(__name__)

    def analyze_type(self, type_desc: TypeDescriptor) -> ApiMember:
        try:
            return ApiMember(
                name=type_desc.name,
                full_name=type_desc.full_name,
                namespace=type_desc.namespace,
                declaring_type=(
                    type_desc.declaring_type.full_name if type_desc.declaring_type else ""
                ),
                signature=self._signatures.build_type_signature(type_desc),
                attributes=filter_attributes(type_desc.attributes),
                kind=_KIND_BY_TYPE_KIND[type_desc.kind],
                accessibility=type_desc.accessibility,
            )
        except Exception as e:
            self._log.error("analyze_type_failed", type=type_desc.name, error=str(e))
            raise

    def analyze_methods(self, type_desc: TypeDescriptor) -> list[ApiMember]:
        def build() -> list[ApiMember]:
            return [
                self._member(
                    type_desc,
                    method.name,
                    MemberKind.METHOD,
                    self._signatures.build_method_signature(method, type_desc),
                    method.accessibility,
                    method.attributes,
                )
                for method in type_desc.methods
                if not method.is_special_name and method.is_public_or_override
            ]

        return self._guarded("methods", type_desc, build)

    def analyze_properties(self, type_desc: TypeDescriptor) -> list[ApiMember]:
        def build() -> list[ApiMember]:
            return [
                self._member(
                    type_desc,
                    prop.name,
                    MemberKind.PROPERTY,
                    self._signatures.build_property_signature(prop, type_desc),
                    prop.accessibility,
                    prop.attributes,
                )
                for prop in type_desc.properties
                if any(accessor.is_public_or_override for accessor in prop.accessors)
            ]

        return self._guarded("properties", type_desc, build)

    def analyze_fields(self, type_desc: TypeDescriptor) -> list[ApiMember]:
        def build() -> list[ApiMember]:
            return [
                self._member(
                    type_desc,
                    fld.name,
                    MemberKind.FIELD,
                    self._signatures.build_field_signature(fld),
                    fld.accessibility,
                    fld.attributes,
                )
                for fld in type_desc.fields
                # Backing fields are named <Prop>k__BackingField.
                if fld.accessibility is Accessibility.PUBLIC and not fld.name.startswith("<")
            ]

        return self._guarded("fields", type_desc, build)

    def analyze_events(self, type_desc: TypeDescriptor) -> list[ApiMember]:
        def build() -> list[ApiMember]:
            return [
                self._member(
                    type_desc,
                    event.name,
                    MemberKind.EVENT,
                    self._signatures.build_event_signature(event, type_desc),
                    event.accessibility,
                    event.attributes,
                )
                for event in type_desc.events
                if any(accessor.is_public_or_override for accessor in event.accessors)
            ]

        return self._guarded("events", type_desc, build)

    def analyze_constructors(self, type_desc: TypeDescriptor) -> list[ApiMember]:
        def build() -> list[ApiMember]:
            return [
                self._member(
                    type_desc,
                    ctor.name,
                    MemberKind.CONSTRUCTOR,
                    self._signatures.build_constructor_signature(ctor, type_desc),
                    ctor.accessibility,
                    ctor.attributes,
                )
                for ctor in type_desc.constructors
                if ctor.accessibility in (Accessibility.PUBLIC, Accessibility.PROTECTED)
            ]

        return self._guarded("constructors", type_desc, build)

    def _member(
        self,
        type_desc: TypeDescriptor,
        name: str,
        kind: MemberKind,
        signature: str,
        accessibility: Accessibility,
        attributes: Iterable[str],
    ) -> ApiMember:
        return ApiMember(
            name=name,
            full_name=f"{type_desc.full_name}.{name}",
            namespace=type_desc.namespace,
            declaring_type=type_desc.full_name,
            signature=signature,
            attributes=filter_attributes(attributes),
            kind=kind,
            accessibility=accessibility,
        )

    def _guarded(
        self,
        what: str,
        type_desc: TypeDescriptor,
        build: Callable[[], list[ApiMember]],
    ) -> list[ApiMember]:
        try:
            return build()
        except Exception as e:
            self._log.error(f"analyze_{what}_failed", type=type_desc.full_name, error=str(e))
            return []
