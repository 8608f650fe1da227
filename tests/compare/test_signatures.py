"""Tests for compare/signatures.py module."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from apidiff.compare.signatures import (
    SignatureBuilder,
    format_default_value,
    render_generic_parameter,
    render_type_name,
    strip_arity,
)
from apidiff.surface import (
    Accessibility,
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

INT = TypeRef.named("System.Int32")
STRING = TypeRef.named("System.String")
T = TypeRef.generic_parameter("T")


@pytest.fixture
def builder() -> SignatureBuilder:
    return SignatureBuilder()


class TestRenderTypeName:
    """render_type_name() tests."""

    @pytest.mark.parametrize(
        ("ref", "expected"),
        [
            (INT, "int"),
            (STRING, "string"),
            (None, "void"),
            (TypeRef.named("System.Void"), "void"),
            (T, "T"),
            (TypeRef.array_of(INT), "int[]"),
            (TypeRef.array_of(INT, rank=3), "int[,,]"),
            (TypeRef.pointer_to(TypeRef.named("System.Byte")), "byte*"),
            (TypeRef.by_ref(INT), "int"),
            (TypeRef.named("System.Nullable`1", INT), "int?"),
            (TypeRef.named("System.Collections.Generic.List`1", STRING), "List<string>"),
            (
                TypeRef.named("System.Collections.Generic.Dictionary`2", STRING, TypeRef.array_of(T)),
                "Dictionary<string, T[]>",
            ),
            (TypeRef.named("Contoso.Api.Outer+Inner"), "Inner"),
            (TypeRef.named("Contoso.Api.Widget"), "Widget"),
        ],
    )
    def test_given_type_ref_when_rendered_then_reads_like_source(
        self, ref: TypeRef | None, expected: str
    ) -> None:
        """Type references render with keywords and angle-bracket generics."""
        assert render_type_name(ref) == expected

    def test_strip_arity_removes_backtick_suffix(self) -> None:
        """``List`1`` -> ``List``."""
        assert strip_arity("List`1") == "List"
        assert strip_arity("Widget") == "Widget"


class TestGenericParameterRendering:
    """render_generic_parameter() tests."""

    @pytest.mark.parametrize(
        ("param", "expected"),
        [
            (GenericParameter("T"), "T"),
            (GenericParameter("T", reference_type_constraint=True), "T : class"),
            (
                GenericParameter("T", value_type_constraint=True, default_constructor_constraint=True),
                "T : struct",
            ),
            (
                GenericParameter(
                    "T",
                    reference_type_constraint=True,
                    default_constructor_constraint=True,
                    constraint_types=(TypeRef.named("System.IComparable`1", T),),
                ),
                "T : class, new(), IComparable<T>",
            ),
            (
                GenericParameter("T", constraint_types=(TypeRef.named("System.Object"),)),
                "T",
            ),
        ],
    )
    def test_given_constraints_when_rendered_then_ordered(
        self, param: GenericParameter, expected: str
    ) -> None:
        """Constraints follow class/struct, new(), then types."""
        assert render_generic_parameter(param) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "null"), (True, "true"), (False, "false"), ("x", '"x"'), (42, "42")],
    )
    def test_format_default_value(self, value: object, expected: str) -> None:
        """Default values render as C# literals."""
        assert format_default_value(value) == expected


class TestMemberSignatures:
    """SignatureBuilder member signature tests."""

    def test_given_static_generic_method_when_built_then_full_declaration(
        self, builder: SignatureBuilder
    ) -> None:
        """Static generic method with params and defaults."""
        # Given
        method = MethodDescriptor(
            name="Where",
            is_static=True,
            return_type=TypeRef.named("System.Collections.Generic.IEnumerable`1", T),
            generic_parameters=(GenericParameter("T"),),
            parameters=(
                ParameterDescriptor(
                    "source", TypeRef.named("System.Collections.Generic.IEnumerable`1", T)
                ),
                ParameterDescriptor("limit", INT, has_default_value=True, default_value=10),
            ),
        )

        # When
        signature = builder.build_method_signature(method)

        # Then
        assert signature == (
            "public static IEnumerable<T> Where<T>(IEnumerable<T> source, int limit = 10)"
        )

    def test_given_ref_out_params_when_built_then_prefixes(self, builder: SignatureBuilder) -> None:
        """ref, out and params modifiers prefix parameters."""
        # Given
        method = MethodDescriptor(
            name="TryParse",
            return_type=TypeRef.named("System.Boolean"),
            parameters=(
                ParameterDescriptor("text", TypeRef.by_ref(STRING)),
                ParameterDescriptor("value", TypeRef.by_ref(INT), is_out=True),
                ParameterDescriptor("rest", TypeRef.array_of(STRING), is_params=True),
            ),
        )

        # When
        signature = builder.build_method_signature(method)

        # Then
        assert signature == (
            "public bool TryParse(ref string text, out int value, params string[] rest)"
        )

    @pytest.mark.parametrize(
        ("method", "declaring_kind", "expected"),
        [
            (MethodDescriptor("Run", is_virtual=True), TypeKind.CLASS, "public virtual void Run()"),
            (MethodDescriptor("Run", is_virtual=True), TypeKind.INTERFACE, "public void Run()"),
            (MethodDescriptor("Run", is_virtual=True), None, "public void Run()"),
            (
                MethodDescriptor("Run", is_virtual=True, is_abstract=True),
                TypeKind.CLASS,
                "public abstract void Run()",
            ),
            (
                MethodDescriptor("Run", is_virtual=True, is_final=True),
                TypeKind.CLASS,
                "public sealed override void Run()",
            ),
            (
                MethodDescriptor("Run", accessibility=Accessibility.PROTECTED),
                TypeKind.CLASS,
                "protected void Run()",
            ),
        ],
    )
    def test_given_modifiers_when_built_then_keywords_follow_declaring_type(
        self,
        builder: SignatureBuilder,
        method: MethodDescriptor,
        declaring_kind: TypeKind | None,
        expected: str,
    ) -> None:
        """virtual is only spelled out when the declaring type is a known non-interface."""
        # Given
        declaring = (
            TypeDescriptor(name="Widget", kind=declaring_kind) if declaring_kind else None
        )

        # When
        signature = builder.build_method_signature(method, declaring)

        # Then
        assert signature == expected

    def test_given_property_when_built_then_lists_accessors(self, builder: SignatureBuilder) -> None:
        """Properties list their get/set accessors."""
        # Given
        prop = PropertyDescriptor(
            name="Count",
            property_type=INT,
            getter=MethodDescriptor("get_Count", return_type=INT, is_special_name=True),
            setter=MethodDescriptor(
                "set_Count", accessibility=Accessibility.PROTECTED, is_special_name=True
            ),
        )

        # When
        signature = builder.build_property_signature(prop)

        # Then
        assert signature == "public int Count { get; set; }"

    def test_given_read_only_static_property_when_built_then_static_getter_only(
        self, builder: SignatureBuilder
    ) -> None:
        """Static properties carry the static keyword."""
        # Given
        prop = PropertyDescriptor(
            name="Default",
            property_type=STRING,
            getter=MethodDescriptor("get_Default", is_static=True, is_special_name=True),
        )

        # When
        signature = builder.build_property_signature(prop)

        # Then
        assert signature == "public static string Default { get; }"

    @pytest.mark.parametrize(
        ("fld", "expected"),
        [
            (FieldDescriptor("Max", INT, is_static=True, is_literal=True), "public static const int Max"),
            (FieldDescriptor("Empty", STRING, is_static=True, is_init_only=True), "public static readonly string Empty"),
            (FieldDescriptor("value", INT), "public int value"),
        ],
    )
    def test_given_field_when_built_then_modifiers_in_order(
        self, builder: SignatureBuilder, fld: FieldDescriptor, expected: str
    ) -> None:
        """Field modifiers: static, readonly, const."""
        assert builder.build_field_signature(fld) == expected

    def test_given_event_when_built_then_event_keyword(self, builder: SignatureBuilder) -> None:
        """Events render with their handler type."""
        # Given
        event = EventDescriptor(
            name="Changed",
            handler_type=TypeRef.named("System.EventHandler"),
            add_method=MethodDescriptor("add_Changed", is_special_name=True),
            remove_method=MethodDescriptor("remove_Changed", is_special_name=True),
        )

        # When
        signature = builder.build_event_signature(event)

        # Then
        assert signature == "public event EventHandler Changed"

    def test_given_constructor_when_built_then_uses_type_name(self, builder: SignatureBuilder) -> None:
        """Constructors use the declaring type's simple name without arity."""
        # Given
        declaring = TypeDescriptor(name="Repository`1", namespace="Contoso.Api")
        ctor = ConstructorDescriptor(parameters=(ParameterDescriptor("capacity", INT),))

        # When
        signature = builder.build_constructor_signature(ctor, declaring)

        # Then
        assert signature == "public Repository(int capacity)"


class TestTypeSignatures:
    """SignatureBuilder type signature tests."""

    @pytest.mark.parametrize(
        ("type_desc", "expected"),
        [
            (TypeDescriptor("Widget"), "public class Widget"),
            (TypeDescriptor("Widget", is_sealed=True), "public sealed class Widget"),
            (TypeDescriptor("Helpers", is_sealed=True, is_abstract=True), "public static class Helpers"),
            (TypeDescriptor("Base", is_abstract=True), "public abstract class Base"),
            (
                TypeDescriptor("IWidget", kind=TypeKind.INTERFACE, is_abstract=True),
                "public interface IWidget",
            ),
            (TypeDescriptor("Point", kind=TypeKind.STRUCT, is_sealed=True), "public struct Point"),
            (
                TypeDescriptor(
                    "Repository`1",
                    generic_parameters=(GenericParameter("T", reference_type_constraint=True),),
                    base_type=TypeRef.named("Contoso.Api.RepositoryBase"),
                    interfaces=(TypeRef.named("System.IDisposable"),),
                ),
                "public class Repository<T : class> : RepositoryBase, IDisposable",
            ),
            (
                TypeDescriptor("Color", kind=TypeKind.ENUM, base_type=TypeRef.named("System.Enum")),
                "public enum Color",
            ),
        ],
    )
    def test_given_type_when_built_then_declaration_line(
        self, builder: SignatureBuilder, type_desc: TypeDescriptor, expected: str
    ) -> None:
        """Type signatures carry modifiers, generics and non-universal bases."""
        assert builder.build_type_signature(type_desc) == expected


class TestDeterminism:
    """Identical shapes yield identical signatures."""

    def test_given_equal_descriptors_when_built_twice_then_identical(
        self, builder: SignatureBuilder, make_type: Callable[..., TypeDescriptor]
    ) -> None:
        """Two independently loaded copies of a type render the same."""
        # Given
        fields = {
            "methods": [
                {"name": "Find", "return_type": "T", "parameters": [{"name": "id", "type": "int"}]}
            ],
            "generic_parameters": ["T"],
            "name": "Repository`1",
        }
        first = make_type(**fields)
        second = make_type(**fields)

        # When
        a = builder.build_method_signature(first.methods[0], first)
        b = builder.build_method_signature(second.methods[0], second)

        # Then
        assert a == b == "public T Find(int id)"


class TestErrorHandling:
    """Failures yield an error signature instead of raising."""

    def test_given_broken_parameter_when_built_then_error_signature(
        self, builder: SignatureBuilder
    ) -> None:
        """A descriptor that cannot be rendered yields ``Error: <name>``."""
        # Given
        method = MethodDescriptor(
            name="Broken",
            parameters=(ParameterDescriptor("x", None),),  # type: ignore[arg-type]
        )

        # When
        signature = builder.build_method_signature(method)

        # Then
        assert signature == "Error: Broken"

    def test_given_broken_constructor_when_built_then_names_type(
        self, builder: SignatureBuilder
    ) -> None:
        """Constructor failures name the declaring type."""
        # Given
        ctor = ConstructorDescriptor(parameters=(ParameterDescriptor("x", None),))  # type: ignore[arg-type]

        # When
        signature = builder.build_constructor_signature(ctor, TypeDescriptor("Widget"))

        # Then
        assert signature == "Error: Constructor in Widget"
