"""Comparison and classification engine."""

from apidiff.compare.analyzer import TypeAnalyzer
from apidiff.compare.calculator import DifferenceCalculator, is_reduced_accessibility
from apidiff.compare.classifier import ChangeClassifier
from apidiff.compare.comparer import ApiComparer, TypePair, build_comparer
from apidiff.compare.extractor import ApiExtractor
from apidiff.compare.mapper import NameMapper
from apidiff.compare.models import (
    ApiDifference,
    ApiMember,
    ChangeType,
    ComparisonResult,
    ComparisonSummary,
    ElementKind,
    MemberKind,
    Severity,
)
from apidiff.compare.signatures import SignatureBuilder, render_type_name

__all__ = [
    "ApiComparer",
    "ApiDifference",
    "ApiExtractor",
    "ApiMember",
    "ChangeClassifier",
    "ChangeType",
    "ComparisonResult",
    "ComparisonSummary",
    "DifferenceCalculator",
    "ElementKind",
    "MemberKind",
    "NameMapper",
    "Severity",
    "SignatureBuilder",
    "TypeAnalyzer",
    "TypePair",
    "build_comparer",
    "is_reduced_accessibility",
    "render_type_name",
]
