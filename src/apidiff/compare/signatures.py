"""Normalized signatures for types and members.

A signature is a single line in C# declaration order::

    public static IEnumerable<T> Where<T>(IEnumerable<T> source, Func<T, bool> predicate)
    public int Count { get; set; }
    public sealed class Widget : Component, IDisposable

Identical declared shape always yields the identical string, so signatures
serve as the member matching key within one type.
"""

from __future__ import annotations

from typing import Any

import structlog

from apidiff.core.logging import get_logger
from apidiff.surface.descriptors import (
    ConstructorDescriptor,
    EventDescriptor,
    FieldDescriptor,
    GenericParameter,
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)

PRIMITIVE_KEYWORDS = {
    "System.Boolean": "bool",
    "System.Byte": "byte",
    "System.SByte": "sbyte",
    "System.Char": "char",
    "System.Decimal": "decimal",
    "System.Double": "double",
    "System.Single": "float",
    "System.Int32": "int",
    "System.UInt32": "uint",
    "System.Int64": "long",
    "System.UInt64": "ulong",
    "System.Int16": "short",
    "System.UInt16": "ushort",
    "System.String": "string",
    "System.Object": "object",
    "System.Void": "void",
}

# Implicit base types that never appear in a type signature.
UNIVERSAL_BASES = frozenset({"System.Object", "System.ValueType", "System.Enum"})

_NULLABLE = "System.Nullable`1"

_KIND_KEYWORDS = {
    TypeKind.CLASS: "class",
    TypeKind.INTERFACE: "interface",
    TypeKind.STRUCT: "struct",
    TypeKind.ENUM: "enum",
    TypeKind.DELEGATE: "delegate",
}


def strip_arity(name: str) -> str:
    """``List`1`` -> ``List``."""
    return name.split("`", 1)[0]


def render_type_name(ref: TypeRef | None) -> str:
    """Render a type reference the way it reads in C# source."""
    if ref is None:
        return "void"
    if ref.element_type is not None:
        inner = render_type_name(ref.element_type)
        if ref.is_array:
            return f"{inner}[{',' * (ref.array_rank - 1)}]"
        if ref.is_pointer:
            return f"{inner}*"
        return inner  # by-ref: the ref/out modifier carries the marker
    if ref.is_generic_parameter:
        return ref.name

    keyword = PRIMITIVE_KEYWORDS.get(ref.definition_name)
    if keyword is not None:
        return keyword

    simple = ref.name.rsplit("+", 1)[-1]
    if ref.generic_arguments:
        if ref.definition_name == _NULLABLE:
            return f"{render_type_name(ref.generic_arguments[0])}?"
        args = ", ".join(render_type_name(arg) for arg in ref.generic_arguments)
        return f"{strip_arity(simple)}<{args}>"
    return simple


def render_generic_parameter(param: GenericParameter) -> str:
    """``T`` or ``T : class, new(), IComparable<T>``."""
    constraints: list[str] = []
    if param.reference_type_constraint:
        constraints.append("class")
    elif param.value_type_constraint:
        constraints.append("struct")
    if param.default_constructor_constraint and not param.value_type_constraint:
        constraints.append("new()")
    constraints.extend(
        render_type_name(c) for c in param.constraint_types if c.definition_name != "System.Object"
    )
    if not constraints:
        return param.name
    return f"{param.name} : {', '.join(constraints)}"


def format_default_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


class SignatureBuilder:
    """Builds normalized signatures for surface descriptors.

    Every ``build_*`` method is total: a failure while inspecting one entity
    is logged and yields ``"Error: <name>"`` instead of raising.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._log = logger or get_logger(__name__)

    # -- members ------------------------------------------------------------

    def build_method_signature(
        self, method: MethodDescriptor, declaring_type: TypeDescriptor | None = None
    ) -> str:
        """``declaring_type`` decides whether non-abstract virtuals read ``virtual``.

        Without it (or on interfaces) the keyword is omitted.
        """
        try:
            parts = [method.accessibility.keyword]
            parts.extend(_method_modifiers(method, declaring_type))
            parts.append(render_type_name(method.return_type))
            name = method.name
            if method.generic_parameters:
                generics = ", ".join(render_generic_parameter(p) for p in method.generic_parameters)
                name = f"{name}<{generics}>"
            parts.append(f"{name}({self._parameter_list(method.parameters)})")
            return " ".join(parts)
        except Exception as e:
            self._log.error("signature_failed", member=method.name, kind="method", error=str(e))
            return f"Error: {method.name}"

    def build_property_signature(
        self, prop: PropertyDescriptor, declaring_type: TypeDescriptor | None = None
    ) -> str:
        try:
            parts = [prop.accessibility.keyword]
            if any(accessor.is_static for accessor in prop.accessors):
                parts.append("static")
            if prop.getter is not None:
                parts.extend(_virtual_modifiers(prop.getter, declaring_type))
            parts.append(render_type_name(prop.property_type))
            accessors = "".join(
                f"{keyword}; "
                for keyword, accessor in (("get", prop.getter), ("set", prop.setter))
                if accessor is not None
            )
            parts.append(f"{prop.name} {{ {accessors}}}")
            return " ".join(parts)
        except Exception as e:
            self._log.error("signature_failed", member=prop.name, kind="property", error=str(e))
            return f"Error: {prop.name}"

    def build_field_signature(self, fld: FieldDescriptor) -> str:
        try:
            parts = [fld.accessibility.keyword]
            if fld.is_static:
                parts.append("static")
            if fld.is_init_only:
                parts.append("readonly")
            if fld.is_literal:
                parts.append("const")
            parts.append(render_type_name(fld.field_type))
            parts.append(fld.name)
            return " ".join(parts)
        except Exception as e:
            self._log.error("signature_failed", member=fld.name, kind="field", error=str(e))
            return f"Error: {fld.name}"

    def build_event_signature(
        self, event: EventDescriptor, declaring_type: TypeDescriptor | None = None
    ) -> str:
        try:
            parts: list[str] = []
            accessor = event.add_method or event.remove_method
            if accessor is not None:
                parts.append(event.accessibility.keyword)
                if accessor.is_static:
                    parts.append("static")
                parts.extend(_virtual_modifiers(accessor, declaring_type))
            parts.append("event")
            handler = event.handler_type or TypeRef.named("System.Object")
            parts.append(render_type_name(handler))
            parts.append(event.name)
            return " ".join(parts)
        except Exception as e:
            self._log.error("signature_failed", member=event.name, kind="event", error=str(e))
            return f"Error: {event.name}"

    def build_constructor_signature(
        self, ctor: ConstructorDescriptor, declaring_type: TypeDescriptor | None = None
    ) -> str:
        type_name = declaring_type.name if declaring_type is not None else "Unknown"
        try:
            parts = [ctor.accessibility.keyword]
            if ctor.is_static:
                parts.append("static")
            parts.append(f"{strip_arity(type_name)}({self._parameter_list(ctor.parameters)})")
            return " ".join(parts)
        except Exception as e:
            self._log.error("signature_failed", member=type_name, kind="constructor", error=str(e))
            return f"Error: Constructor in {type_name}"

    # -- types --------------------------------------------------------------

    def build_type_signature(self, type_desc: TypeDescriptor) -> str:
        try:
            parts = [type_desc.accessibility.keyword]
            if type_desc.is_sealed and type_desc.kind not in (TypeKind.STRUCT, TypeKind.ENUM):
                parts.append("static" if type_desc.is_abstract else "sealed")
            elif type_desc.is_abstract and not type_desc.is_interface:
                parts.append("abstract")
            parts.append(_KIND_KEYWORDS[type_desc.kind])

            name = strip_arity(type_desc.name)
            if type_desc.generic_parameters:
                generics = ", ".join(
                    render_generic_parameter(p) for p in type_desc.generic_parameters
                )
                name = f"{name}<{generics}>"
            parts.append(name)
            return " ".join(parts) + self._inheritance_list(type_desc)
        except Exception as e:
            self._log.error("signature_failed", member=type_desc.name, kind="type", error=str(e))
            return f"Error: {type_desc.name}"

    # -- helpers ------------------------------------------------------------

    def _inheritance_list(self, type_desc: TypeDescriptor) -> str:
        bases: list[str] = []
        base = type_desc.base_type
        if base is not None and base.definition_name not in UNIVERSAL_BASES:
            bases.append(render_type_name(base))
        bases.extend(render_type_name(i) for i in type_desc.interfaces)
        return f" : {', '.join(bases)}" if bases else ""

    def _parameter_list(self, parameters: tuple[ParameterDescriptor, ...]) -> str:
        return ", ".join(self._parameter(p) for p in parameters)

    def _parameter(self, param: ParameterDescriptor) -> str:
        if param.is_out:
            prefix = "out "
        elif param.parameter_type.is_by_ref:
            prefix = "ref "
        elif param.is_params:
            prefix = "params "
        else:
            prefix = ""
        text = f"{prefix}{render_type_name(param.parameter_type)} {param.name}"
        if param.has_default_value:
            text += f" = {format_default_value(param.default_value)}"
        return text


def _virtual_modifiers(
    method: MethodDescriptor, declaring_type: TypeDescriptor | None
) -> list[str]:
    if method.is_virtual and not method.is_final:
        if method.is_abstract:
            return ["abstract"]
        if declaring_type is not None and not declaring_type.is_interface:
            return ["virtual"]
        return []
    if method.is_virtual and method.is_final:
        return ["sealed override"]
    return []


def _method_modifiers(
    method: MethodDescriptor, declaring_type: TypeDescriptor | None
) -> list[str]:
    if method.is_static:
        return ["static"]
    return _virtual_modifiers(method, declaring_type)
