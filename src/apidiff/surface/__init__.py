"""API surface descriptors and document loading."""

from apidiff.surface.descriptors import (
    Accessibility,
    ConstructorDescriptor,
    EventDescriptor,
    FieldDescriptor,
    GenericParameter,
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    ReflectedSurface,
    SurfaceDocument,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)
from apidiff.surface.loader import load_surface, parse_surface, parse_type_ref

__all__ = [
    "Accessibility",
    "ConstructorDescriptor",
    "EventDescriptor",
    "FieldDescriptor",
    "GenericParameter",
    "MethodDescriptor",
    "ParameterDescriptor",
    "PropertyDescriptor",
    "ReflectedSurface",
    "SurfaceDocument",
    "TypeDescriptor",
    "TypeKind",
    "TypeRef",
    "load_surface",
    "parse_surface",
    "parse_type_ref",
]
