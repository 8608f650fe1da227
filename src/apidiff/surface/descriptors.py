"""Descriptor model for one compiled API surface.

A surface is the set of types one artifact exposes, each type carrying its
declared members. Descriptors are plain frozen dataclasses with no loader
coupling; anything that can produce them (a metadata document, a test
fixture) satisfies the ``ReflectedSurface`` protocol.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from apidiff.core.errors import SurfaceLoadError


class Accessibility(str, Enum):
    """Declared accessibility, ordered from most to least visible."""

    PUBLIC = "Public"
    PROTECTED_INTERNAL = "ProtectedInternal"
    INTERNAL = "Internal"
    PROTECTED = "Protected"
    PRIVATE_PROTECTED = "PrivateProtected"
    PRIVATE = "Private"

    @property
    def rank(self) -> int:
        """Visibility rank: Public=5 down to Private=0."""
        return _ACCESSIBILITY_RANK[self]

    @property
    def keyword(self) -> str:
        return _ACCESSIBILITY_KEYWORD[self]

    @classmethod
    def most_visible(cls, *levels: Accessibility | None) -> Accessibility:
        present = [level for level in levels if level is not None]
        if not present:
            return cls.PRIVATE
        return max(present, key=lambda level: level.rank)


_ACCESSIBILITY_RANK = {
    Accessibility.PUBLIC: 5,
    Accessibility.PROTECTED_INTERNAL: 4,
    Accessibility.INTERNAL: 3,
    Accessibility.PROTECTED: 2,
    Accessibility.PRIVATE_PROTECTED: 1,
    Accessibility.PRIVATE: 0,
}

_ACCESSIBILITY_KEYWORD = {
    Accessibility.PUBLIC: "public",
    Accessibility.PROTECTED_INTERNAL: "protected internal",
    Accessibility.INTERNAL: "internal",
    Accessibility.PROTECTED: "protected",
    Accessibility.PRIVATE_PROTECTED: "private protected",
    Accessibility.PRIVATE: "private",
}


class TypeKind(str, Enum):
    CLASS = "Class"
    INTERFACE = "Interface"
    STRUCT = "Struct"
    ENUM = "Enum"
    DELEGATE = "Delegate"


@dataclass(frozen=True, slots=True)
class TypeRef:
    """Reference to a type from a signature position.

    Exactly one shape applies: a named type (optionally with generic
    arguments), a generic parameter, or a wrapper (array, by-ref, pointer)
    around ``element_type``.
    """

    name: str  # simple name, generic definitions keep the `N arity marker
    namespace: str = ""
    generic_arguments: tuple[TypeRef, ...] = ()
    element_type: TypeRef | None = None
    array_rank: int = 0  # 0 = not an array
    is_by_ref: bool = False
    is_pointer: bool = False
    is_generic_parameter: bool = False

    @property
    def is_array(self) -> bool:
        return self.array_rank > 0

    @property
    def definition_name(self) -> str:
        """Namespace-qualified name without generic arguments."""
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def full_name(self) -> str:
        if self.element_type is not None:
            inner = self.element_type.full_name
            if self.is_array:
                return f"{inner}[{',' * (self.array_rank - 1)}]"
            if self.is_pointer:
                return f"{inner}*"
            return f"{inner}&"
        if self.generic_arguments:
            args = ",".join(arg.full_name for arg in self.generic_arguments)
            return f"{self.definition_name}[{args}]"
        return self.definition_name

    @classmethod
    def named(cls, full_name: str, *generic_arguments: TypeRef) -> TypeRef:
        namespace, _, name = full_name.rpartition(".")
        return cls(name=name, namespace=namespace, generic_arguments=tuple(generic_arguments))

    @classmethod
    def generic_parameter(cls, name: str) -> TypeRef:
        return cls(name=name, is_generic_parameter=True)

    @classmethod
    def array_of(cls, element: TypeRef, rank: int = 1) -> TypeRef:
        return cls(name=element.name, element_type=element, array_rank=rank)

    @classmethod
    def by_ref(cls, element: TypeRef) -> TypeRef:
        return cls(name=element.name, element_type=element, is_by_ref=True)

    @classmethod
    def pointer_to(cls, element: TypeRef) -> TypeRef:
        return cls(name=element.name, element_type=element, is_pointer=True)


@dataclass(frozen=True, slots=True)
class GenericParameter:
    name: str
    reference_type_constraint: bool = False  # class
    value_type_constraint: bool = False  # struct
    default_constructor_constraint: bool = False  # new()
    constraint_types: tuple[TypeRef, ...] = ()


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    name: str
    parameter_type: TypeRef
    is_out: bool = False
    is_params: bool = False
    has_default_value: bool = False
    default_value: Any = None


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """A method, or a property/event accessor.

    ``base_accessibility`` is the accessibility of the declaration this
    method overrides; None when the method introduces its own slot.
    """

    name: str
    accessibility: Accessibility = Accessibility.PUBLIC
    return_type: TypeRef | None = None  # None = void
    parameters: tuple[ParameterDescriptor, ...] = ()
    generic_parameters: tuple[GenericParameter, ...] = ()
    is_static: bool = False
    is_virtual: bool = False
    is_abstract: bool = False
    is_final: bool = False
    is_special_name: bool = False
    base_accessibility: Accessibility | None = None
    attributes: tuple[str, ...] = ()

    @property
    def is_public_or_override(self) -> bool:
        return self.accessibility is Accessibility.PUBLIC or (
            self.base_accessibility is Accessibility.PUBLIC
        )


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    name: str
    property_type: TypeRef
    getter: MethodDescriptor | None = None
    setter: MethodDescriptor | None = None
    attributes: tuple[str, ...] = ()

    @property
    def accessibility(self) -> Accessibility:
        return Accessibility.most_visible(
            self.getter.accessibility if self.getter else None,
            self.setter.accessibility if self.setter else None,
        )

    @property
    def accessors(self) -> tuple[MethodDescriptor, ...]:
        return tuple(m for m in (self.getter, self.setter) if m is not None)


@dataclass(frozen=True, slots=True)
class EventDescriptor:
    name: str
    handler_type: TypeRef | None = None
    add_method: MethodDescriptor | None = None
    remove_method: MethodDescriptor | None = None
    attributes: tuple[str, ...] = ()

    @property
    def accessibility(self) -> Accessibility:
        return Accessibility.most_visible(
            self.add_method.accessibility if self.add_method else None,
            self.remove_method.accessibility if self.remove_method else None,
        )

    @property
    def accessors(self) -> tuple[MethodDescriptor, ...]:
        return tuple(m for m in (self.add_method, self.remove_method) if m is not None)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    field_type: TypeRef
    accessibility: Accessibility = Accessibility.PUBLIC
    is_static: bool = False
    is_init_only: bool = False  # readonly
    is_literal: bool = False  # const
    attributes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ConstructorDescriptor:
    accessibility: Accessibility = Accessibility.PUBLIC
    is_static: bool = False
    parameters: tuple[ParameterDescriptor, ...] = ()
    attributes: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return ".cctor" if self.is_static else ".ctor"


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """One declared type with its members.

    Nested types reference their ``declaring_type``; their full name joins
    the outer full name and their own name with ``+``.
    """

    name: str  # generic definitions keep the `N arity marker
    namespace: str = ""
    kind: TypeKind = TypeKind.CLASS
    accessibility: Accessibility = Accessibility.PUBLIC
    declaring_type: TypeDescriptor | None = None
    is_abstract: bool = False
    is_sealed: bool = False
    is_special_name: bool = False
    base_type: TypeRef | None = None
    interfaces: tuple[TypeRef, ...] = ()
    generic_parameters: tuple[GenericParameter, ...] = ()
    attributes: tuple[str, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    fields: tuple[FieldDescriptor, ...] = ()
    events: tuple[EventDescriptor, ...] = ()
    constructors: tuple[ConstructorDescriptor, ...] = ()

    @property
    def full_name(self) -> str:
        if self.declaring_type is not None:
            return f"{self.declaring_type.full_name}+{self.name}"
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.INTERFACE

    @property
    def is_exported(self) -> bool:
        """Visible outside the artifact: public all the way out."""
        if self.accessibility is not Accessibility.PUBLIC:
            return False
        return self.declaring_type is None or self.declaring_type.is_exported


@runtime_checkable
class ReflectedSurface(Protocol):
    """An inspectable API surface: one compiled artifact's declared types."""

    @property
    def name(self) -> str: ...

    @property
    def location(self) -> str: ...

    def get_types(self) -> Iterable[TypeDescriptor]: ...


@dataclass(frozen=True, slots=True)
class SurfaceDocument:
    """In-memory surface, as produced by ``apidiff.surface.loader``.

    When some type entries failed to load, ``get_types`` raises
    ``SurfaceLoadError.partial_load`` carrying the types that did.
    """

    name: str
    location: str = ""
    types: tuple[TypeDescriptor, ...] = ()
    load_failures: tuple[str, ...] = ()

    def get_types(self) -> Iterator[TypeDescriptor]:
        if self.load_failures:
            raise SurfaceLoadError.partial_load(self.name, list(self.load_failures), self.types)
        return iter(self.types)
