"""Load surface metadata documents into descriptors.

A surface document describes one compiled artifact::

    name: Contoso.Api
    location: bin/Contoso.Api.dll        # optional, defaults to the file path
    types:
      - name: Repository`1
        namespace: Contoso.Api.Data
        kind: class                      # class|interface|struct|enum|delegate
        accessibility: public
        abstract: true
        generic_parameters:
          - name: T
            constraints: [class, new(), Contoso.Api.IEntity]
        interfaces: [System.IDisposable]
        attributes: [ObsoleteAttribute]
        methods:
          - name: Find
            return_type: T
            parameters:
              - {name: id, type: System.Int32}
              - {name: cache, type: System.Boolean, default: true}
        properties:
          - {name: Count, type: System.Int32, set: protected}
        fields:
          - {name: MaxSize, type: System.Int32, static: true, const: true}
        events:
          - {name: Changed, type: System.EventHandler}
        constructors:
          - accessibility: protected
        nested_types: []

Type references are strings in reflection notation (``System.Int32[]``,
``System.Int32&``, ``System.Collections.Generic.List`1[System.String]``,
a generic parameter name in scope, or a C# keyword such as ``int``) or
structured objects (``{name, namespace, generic_arguments}`` or
``{element_type, array_rank | by_ref | pointer}``).

Each type entry is validated on its own: a malformed entry does not stop
the rest of the document from loading (see ``SurfaceLoadError.partial_load``).
"""

from __future__ import annotations

import json
from collections.abc import Collection, Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from apidiff.core.errors import SurfaceLoadError
from apidiff.core.logging import get_logger
from apidiff.surface.descriptors import (
    Accessibility,
    ConstructorDescriptor,
    EventDescriptor,
    FieldDescriptor,
    GenericParameter,
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    SurfaceDocument,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)

log = get_logger(__name__)

_KEYWORD_ALIASES = {
    "bool": "System.Boolean",
    "byte": "System.Byte",
    "sbyte": "System.SByte",
    "char": "System.Char",
    "decimal": "System.Decimal",
    "double": "System.Double",
    "float": "System.Single",
    "int": "System.Int32",
    "uint": "System.UInt32",
    "long": "System.Int64",
    "ulong": "System.UInt64",
    "short": "System.Int16",
    "ushort": "System.UInt16",
    "string": "System.String",
    "object": "System.Object",
    "void": "System.Void",
}

_ACCESSIBILITY_NAMES = {
    "public": Accessibility.PUBLIC,
    "protectedinternal": Accessibility.PROTECTED_INTERNAL,
    "internal": Accessibility.INTERNAL,
    "protected": Accessibility.PROTECTED,
    "privateprotected": Accessibility.PRIVATE_PROTECTED,
    "protectedprivate": Accessibility.PRIVATE_PROTECTED,
    "private": Accessibility.PRIVATE,
}

_CONSTRAINT_KEYWORDS = frozenset({"class", "struct", "new()"})


# =============================================================================
# Type references
# =============================================================================


def parse_type_ref(text: str, generic_scope: Collection[str] = ()) -> TypeRef:
    """Parse a reflection-notation type reference.

    Args:
        text: e.g. ``System.Int32[]``, ``T&``, ``System.Nullable`1[System.Int32]``.
        generic_scope: Generic parameter names declared by the enclosing
            type or method; bare names in this set become generic parameters.

    Raises:
        ValueError: Empty input, unbalanced brackets, or an arity mismatch.
    """
    text = text.strip()
    if not text:
        raise ValueError("empty type reference")

    if text.endswith("&"):
        return TypeRef.by_ref(parse_type_ref(text[:-1], generic_scope))
    if text.endswith("*"):
        return TypeRef.pointer_to(parse_type_ref(text[:-1], generic_scope))

    if text.endswith("]"):
        start = _matching_open_bracket(text)
        head, inner = text[:start], text[start + 1 : -1]
        if not head.strip():
            raise ValueError(f"missing type name before brackets in {text!r}")
        if set(inner) <= {","}:
            return TypeRef.array_of(parse_type_ref(head, generic_scope), rank=len(inner) + 1)
        definition = _parse_named(head)
        arguments = tuple(
            parse_type_ref(_unwrap_qualified(arg), generic_scope)
            for arg in _split_top_level(inner)
        )
        _check_arity(definition.name, len(arguments))
        return TypeRef(
            name=definition.name,
            namespace=definition.namespace,
            generic_arguments=arguments,
        )

    if "[" in text or "]" in text:
        raise ValueError(f"unbalanced brackets in type reference {text!r}")
    if text in generic_scope:
        return TypeRef.generic_parameter(text)
    return _parse_named(text)


def _parse_named(text: str) -> TypeRef:
    text = text.strip()
    text = _KEYWORD_ALIASES.get(text, text)
    # Nested type separators never carry the namespace dot.
    outer, plus, nested = text.partition("+")
    namespace, _, simple = outer.rpartition(".")
    if not simple:
        raise ValueError(f"invalid type name {text!r}")
    return TypeRef(name=f"{simple}{plus}{nested}", namespace=namespace)


def _matching_open_bracket(text: str) -> int:
    depth = 0
    for index in range(len(text) - 1, -1, -1):
        char = text[index]
        if char == "]":
            depth += 1
        elif char == "[":
            depth -= 1
            if depth == 0:
                return index
    raise ValueError(f"unbalanced brackets in type reference {text!r}")


def _split_top_level(inner: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in inner:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    if any(not part.strip() for part in parts):
        raise ValueError(f"empty generic argument in [{inner}]")
    return parts


def _unwrap_qualified(arg: str) -> str:
    """``[System.Int32, mscorlib]`` -> ``System.Int32``."""
    arg = arg.strip()
    if arg.startswith("[") and arg.endswith("]"):
        return _split_top_level(arg[1:-1])[0]
    return arg


def _check_arity(name: str, argument_count: int) -> None:
    _, tick, arity = name.rpartition("`")
    if tick and arity.isdigit() and int(arity) != argument_count:
        raise ValueError(f"{name} expects {arity} generic argument(s), got {argument_count}")


def _type_ref(value: str | Mapping[str, Any], generic_scope: Collection[str]) -> TypeRef:
    if isinstance(value, str):
        return parse_type_ref(value, generic_scope)
    if not isinstance(value, Mapping):
        raise ValueError(f"type reference must be a string or mapping, got {value!r}")

    element = value.get("element_type")
    if element is not None:
        inner = _type_ref(element, generic_scope)
        if value.get("by_ref"):
            return TypeRef.by_ref(inner)
        if value.get("pointer"):
            return TypeRef.pointer_to(inner)
        rank = value.get("array_rank", 1)
        if not isinstance(rank, int) or isinstance(rank, bool) or rank < 1:
            raise ValueError(f"array_rank must be a positive integer, got {rank!r}")
        return TypeRef.array_of(inner, rank=rank)

    name = value.get("name")
    if not name:
        raise ValueError("structured type reference requires 'name' or 'element_type'")
    namespace = value.get("namespace", "")
    if not isinstance(name, str) or not isinstance(namespace, str):
        raise ValueError(f"type reference name and namespace must be strings: {dict(value)!r}")
    if value.get("generic_parameter") or (not namespace and name in generic_scope):
        return TypeRef.generic_parameter(name)
    raw_arguments = value.get("generic_arguments", ())
    if not isinstance(raw_arguments, list | tuple):
        raise ValueError(f"generic_arguments must be a list, got {raw_arguments!r}")
    arguments = tuple(_type_ref(arg, generic_scope) for arg in raw_arguments)
    _check_arity(name, len(arguments))
    return TypeRef(name=name, namespace=namespace, generic_arguments=arguments)


def _accessibility(value: str) -> Accessibility:
    key = value.replace(" ", "").replace("_", "").lower()
    try:
        return _ACCESSIBILITY_NAMES[key]
    except KeyError:
        raise ValueError(f"unknown accessibility {value!r}") from None


def _type_kind(value: str) -> TypeKind:
    for kind in TypeKind:
        if kind.value.lower() == value.strip().lower():
            return kind
    raise ValueError(f"unknown type kind {value!r}")


# =============================================================================
# Document schema
# =============================================================================

TypeRefValue = str | dict[str, Any]


class _Doc(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class _GenericParameterDoc(_Doc):
    name: str = Field(min_length=1)
    constraints: list[TypeRefValue] = Field(default_factory=list)


class _ParameterDoc(_Doc):
    name: str
    type: TypeRefValue
    out: bool = False
    ref: bool = False
    params: bool = False
    default_value: Any = Field(default=None, alias="default")


class _AccessorDoc(_Doc):
    accessibility: str | None = None
    static: bool | None = None
    virtual: bool | None = None
    abstract: bool | None = None
    final: bool | None = None
    overrides: str | None = None


class _MemberModifiersDoc(_Doc):
    accessibility: str = "public"
    static: bool = False
    virtual: bool = False
    abstract: bool = False
    final: bool = False
    overrides: str | None = None  # accessibility of the overridden declaration
    attributes: list[str] = Field(default_factory=list)


class _MethodDoc(_MemberModifiersDoc):
    name: str = Field(min_length=1)
    return_type: TypeRefValue = "System.Void"
    parameters: list[_ParameterDoc] = Field(default_factory=list)
    generic_parameters: list[str | _GenericParameterDoc] = Field(default_factory=list)
    special_name: bool = False


class _PropertyDoc(_MemberModifiersDoc):
    name: str = Field(min_length=1)
    type: TypeRefValue
    get: bool | str | _AccessorDoc = True
    set: bool | str | _AccessorDoc = False


class _EventDoc(_MemberModifiersDoc):
    name: str = Field(min_length=1)
    type: TypeRefValue | None = None
    add: bool | str | _AccessorDoc = True
    remove: bool | str | _AccessorDoc = True


class _FieldDoc(_Doc):
    name: str = Field(min_length=1)
    type: TypeRefValue
    accessibility: str = "public"
    static: bool = False
    readonly: bool = False
    const: bool = False
    attributes: list[str] = Field(default_factory=list)


class _ConstructorDoc(_Doc):
    accessibility: str = "public"
    static: bool = False
    parameters: list[_ParameterDoc] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)


class _TypeDoc(_Doc):
    name: str = Field(min_length=1)
    namespace: str = ""
    kind: str = "class"
    accessibility: str = "public"
    abstract: bool = False
    sealed: bool = False
    static: bool = False  # abstract + sealed
    special_name: bool = False
    base_type: TypeRefValue | None = None
    interfaces: list[TypeRefValue] = Field(default_factory=list)
    generic_parameters: list[str | _GenericParameterDoc] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    methods: list[_MethodDoc] = Field(default_factory=list)
    properties: list[_PropertyDoc] = Field(default_factory=list)
    fields_: list[_FieldDoc] = Field(default_factory=list, alias="fields")
    events: list[_EventDoc] = Field(default_factory=list)
    constructors: list[_ConstructorDoc] = Field(default_factory=list)
    nested_types: list[dict[str, Any]] = Field(default_factory=list)


class _SurfaceDoc(_Doc):
    name: str = Field(min_length=1)
    location: str | None = None
    types: list[dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# Conversion
# =============================================================================


def _generic_parameters(
    docs: list[str | _GenericParameterDoc], scope: Collection[str]
) -> tuple[GenericParameter, ...]:
    result = []
    for doc in docs:
        if isinstance(doc, str):
            result.append(GenericParameter(name=doc))
            continue
        keywords = {c for c in doc.constraints if isinstance(c, str) and c in _CONSTRAINT_KEYWORDS}
        result.append(
            GenericParameter(
                name=doc.name,
                reference_type_constraint="class" in keywords,
                value_type_constraint="struct" in keywords,
                default_constructor_constraint="new()" in keywords,
                constraint_types=tuple(
                    _type_ref(c, scope)
                    for c in doc.constraints
                    if not (isinstance(c, str) and c in _CONSTRAINT_KEYWORDS)
                ),
            )
        )
    return tuple(result)


def _generic_names(docs: list[str | _GenericParameterDoc]) -> set[str]:
    return {doc if isinstance(doc, str) else doc.name for doc in docs}


def _parameters(docs: list[_ParameterDoc], scope: Collection[str]) -> tuple[ParameterDescriptor, ...]:
    result = []
    for doc in docs:
        parameter_type = _type_ref(doc.type, scope)
        if (doc.out or doc.ref) and not parameter_type.is_by_ref:
            parameter_type = TypeRef.by_ref(parameter_type)
        result.append(
            ParameterDescriptor(
                name=doc.name,
                parameter_type=parameter_type,
                is_out=doc.out,
                is_params=doc.params,
                has_default_value="default_value" in doc.model_fields_set,
                default_value=doc.default_value,
            )
        )
    return tuple(result)


def _method(doc: _MethodDoc, type_scope: Collection[str]) -> MethodDescriptor:
    scope = set(type_scope) | _generic_names(doc.generic_parameters)
    return MethodDescriptor(
        name=doc.name,
        accessibility=_accessibility(doc.accessibility),
        return_type=_type_ref(doc.return_type, scope),
        parameters=_parameters(doc.parameters, scope),
        generic_parameters=_generic_parameters(doc.generic_parameters, scope),
        is_static=doc.static,
        is_virtual=doc.virtual or doc.abstract,
        is_abstract=doc.abstract,
        is_final=doc.final,
        is_special_name=doc.special_name,
        base_accessibility=_accessibility(doc.overrides) if doc.overrides else None,
        attributes=tuple(doc.attributes),
    )


def _accessor(
    name: str, spec: bool | str | _AccessorDoc, owner: _MemberModifiersDoc
) -> MethodDescriptor | None:
    """Build an accessor; unspecified modifiers fall back to the owning member's."""
    if spec is False:
        return None
    if spec is True:
        override = _AccessorDoc()
    elif isinstance(spec, str):
        override = _AccessorDoc(accessibility=spec)
    else:
        override = spec

    def pick(value: Any, default: Any) -> Any:
        return default if value is None else value

    abstract = pick(override.abstract, owner.abstract)
    overrides = pick(override.overrides, owner.overrides)
    return MethodDescriptor(
        name=name,
        accessibility=_accessibility(pick(override.accessibility, owner.accessibility)),
        is_static=pick(override.static, owner.static),
        is_virtual=pick(override.virtual, owner.virtual) or abstract,
        is_abstract=abstract,
        is_final=pick(override.final, owner.final),
        is_special_name=True,
        base_accessibility=_accessibility(overrides) if overrides else None,
    )


def _property(doc: _PropertyDoc, scope: Collection[str]) -> PropertyDescriptor:
    property_type = _type_ref(doc.type, scope)
    getter = _accessor(f"get_{doc.name}", doc.get, doc)
    setter = _accessor(f"set_{doc.name}", doc.set, doc)
    if getter is not None:
        getter = _with_return(getter, property_type)
    return PropertyDescriptor(
        name=doc.name,
        property_type=property_type,
        getter=getter,
        setter=setter,
        attributes=tuple(doc.attributes),
    )


def _with_return(method: MethodDescriptor, return_type: TypeRef) -> MethodDescriptor:
    return replace(method, return_type=return_type)


def _event(doc: _EventDoc, scope: Collection[str]) -> EventDescriptor:
    return EventDescriptor(
        name=doc.name,
        handler_type=_type_ref(doc.type, scope) if doc.type is not None else None,
        add_method=_accessor(f"add_{doc.name}", doc.add, doc),
        remove_method=_accessor(f"remove_{doc.name}", doc.remove, doc),
        attributes=tuple(doc.attributes),
    )


def _field(doc: _FieldDoc, scope: Collection[str]) -> FieldDescriptor:
    return FieldDescriptor(
        name=doc.name,
        field_type=_type_ref(doc.type, scope),
        accessibility=_accessibility(doc.accessibility),
        is_static=doc.static or doc.const,
        is_init_only=doc.readonly,
        is_literal=doc.const,
        attributes=tuple(doc.attributes),
    )


def _constructor(doc: _ConstructorDoc, scope: Collection[str]) -> ConstructorDescriptor:
    return ConstructorDescriptor(
        accessibility=_accessibility(doc.accessibility),
        is_static=doc.static,
        parameters=_parameters(doc.parameters, scope),
        attributes=tuple(doc.attributes),
    )


def _type(doc: _TypeDoc, declaring_type: TypeDescriptor | None) -> TypeDescriptor:
    # Nested types see the generic parameters of their declaring types.
    scope: set[str] = _generic_names(doc.generic_parameters)
    outer = declaring_type
    while outer is not None:
        scope |= {p.name for p in outer.generic_parameters}
        outer = outer.declaring_type

    return TypeDescriptor(
        name=doc.name,
        namespace=declaring_type.namespace if declaring_type is not None else doc.namespace,
        kind=_type_kind(doc.kind),
        accessibility=_accessibility(doc.accessibility),
        declaring_type=declaring_type,
        is_abstract=doc.abstract or doc.static,
        is_sealed=doc.sealed or doc.static,
        is_special_name=doc.special_name,
        base_type=_type_ref(doc.base_type, scope) if doc.base_type is not None else None,
        interfaces=tuple(_type_ref(i, scope) for i in doc.interfaces),
        generic_parameters=_generic_parameters(doc.generic_parameters, scope),
        attributes=tuple(doc.attributes),
        methods=tuple(_method(m, scope) for m in doc.methods),
        properties=tuple(_property(p, scope) for p in doc.properties),
        fields=tuple(_field(f, scope) for f in doc.fields_),
        events=tuple(_event(e, scope) for e in doc.events),
        constructors=tuple(_constructor(c, scope) for c in doc.constructors),
    )


def _load_type_entry(
    entry: Any,
    declaring_type: TypeDescriptor | None,
    loaded: list[TypeDescriptor],
    failures: list[str],
) -> None:
    """Convert one type entry and its nested types, recording failures."""
    label = entry.get("name", "<unnamed>") if isinstance(entry, Mapping) else repr(entry)
    if declaring_type is not None:
        label = f"{declaring_type.full_name}+{label}"
    try:
        doc = _TypeDoc.model_validate(entry)
        descriptor = _type(doc, declaring_type)
    except (ValidationError, ValueError) as e:
        reason = f"{label}: {e}"
        log.warning("surface_type_skipped", type=label, reason=str(e))
        failures.append(reason)
        return
    loaded.append(descriptor)
    for nested in doc.nested_types:
        _load_type_entry(nested, descriptor, loaded, failures)


# =============================================================================
# Public API
# =============================================================================


def parse_surface(data: Any, location: str = "", *, strict: bool = True) -> SurfaceDocument:
    """Build a surface from an already-decoded document.

    Args:
        data: Decoded JSON/YAML document.
        location: Where the document came from, used when it names none.
        strict: Raise on type entries that fail to convert. When False the
            failures are recorded on the surface instead, and enumerating its
            types raises ``partial_load`` carrying the types that did load.

    Raises:
        SurfaceLoadError: The document shape is invalid (``invalid_document``),
            or, when strict, some types failed to convert (``partial_load``).
    """
    try:
        doc = _SurfaceDoc.model_validate(data)
    except ValidationError as e:
        raise SurfaceLoadError.invalid_document(location or "<memory>", str(e)) from e

    loaded: list[TypeDescriptor] = []
    failures: list[str] = []
    for entry in doc.types:
        _load_type_entry(entry, None, loaded, failures)

    if failures and strict:
        raise SurfaceLoadError.partial_load(doc.name, failures, tuple(loaded))

    surface = SurfaceDocument(
        name=doc.name,
        location=doc.location or location,
        types=tuple(loaded),
        load_failures=tuple(failures),
    )
    log.debug("surface_parsed", surface=surface.name, types=len(surface.types))
    return surface


def load_surface(path: Path | str, *, strict: bool = True) -> SurfaceDocument:
    """Read a JSON or YAML surface document from disk.

    ``.json`` files are decoded as JSON; anything else as YAML. See
    ``parse_surface`` for ``strict``.

    Raises:
        SurfaceLoadError: Missing file, undecodable content, invalid shape,
            or (when strict) a partial load.
    """
    path = Path(path)
    if not path.is_file():
        raise SurfaceLoadError.file_not_found(str(path))

    try:
        text = path.read_text(encoding="utf-8-sig")
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise SurfaceLoadError.parse_error(str(path), str(e)) from e

    log.info("surface_loading", path=str(path))
    return parse_surface(data, location=str(path), strict=strict)
