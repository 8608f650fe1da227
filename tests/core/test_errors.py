"""Tests for error types and codes."""

import pytest

from apidiff.core.errors import (
    ApiDiffError,
    ComparisonError,
    ConfigError,
    ErrorCode,
    InternalError,
    SurfaceLoadError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_FILE_NOT_FOUND, 2000),
            (ErrorCode.SURFACE_FILE_NOT_FOUND, 3000),
            (ErrorCode.SURFACE_PARTIAL_LOAD, 3000),
            (ErrorCode.COMPARISON_FAILED, 4000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        # When
        value = code.value

        # Then
        assert expected_range <= value < expected_range + 1000


class TestApiDiffError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = ApiDiffError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        """String form carries numeric code, name and message."""
        # Given
        error = ApiDiffError(code=ErrorCode.INTERNAL_ERROR, message="boom")

        # When
        text = str(error)

        # Then
        assert text == "[9001] INTERNAL_ERROR: boom"

    def test_given_error_when_raised_then_catchable_as_exception(self) -> None:
        """Errors are regular exceptions."""
        with pytest.raises(ApiDiffError):
            raise ConfigError.missing_required("filters")


class TestFactories:
    """Classmethod factory tests."""

    def test_given_config_file_not_found_when_created_then_carries_path(self) -> None:
        """file_not_found records the missing path."""
        # When
        error = ConfigError.file_not_found("/tmp/missing.yaml")

        # Then
        assert error.code == ErrorCode.CONFIG_FILE_NOT_FOUND
        assert error.details["path"] == "/tmp/missing.yaml"

    def test_given_partial_load_when_created_then_exposes_loaded_types(self) -> None:
        """partial_load keeps the successfully loaded types."""
        # Given
        loaded = ("TypeA", "TypeB")

        # When
        error = SurfaceLoadError.partial_load("Contoso.Api", ["Broken: bad kind"], loaded)

        # Then
        assert error.code == ErrorCode.SURFACE_PARTIAL_LOAD
        assert error.loaded_types == loaded
        assert error.details["failures"] == ["Broken: bad kind"]

    def test_given_partial_load_when_to_dict_then_omits_loaded_types(self) -> None:
        """Loaded descriptors are not part of the serialized form."""
        # Given
        error = SurfaceLoadError.partial_load("Contoso.Api", ["x"], ("TypeA",))

        # When
        result = error.to_dict()

        # Then
        assert "loaded_types" not in result["details"]
        assert result["details"]["failures"] == ["x"]

    def test_given_comparison_failure_when_created_then_names_both_sides(self) -> None:
        """ComparisonError.failed names baseline and candidate."""
        # When
        error = ComparisonError.failed("v1", "v2", "kaboom")

        # Then
        assert error.code == ErrorCode.COMPARISON_FAILED
        assert "kaboom" in error.message
        assert error.details["baseline"] == "v1"
        assert error.details["candidate"] == "v2"

    def test_given_unexpected_when_created_then_keeps_details(self) -> None:
        """InternalError.unexpected keeps arbitrary context."""
        # When
        error = InternalError.unexpected("bad state", stage="reconcile")

        # Then
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.details == {"stage": "reconcile"}
