"""Compare two API surfaces.

Pipeline per run::

    extract types (both sides) -> reconcile types -> per matched pair:
    compare members + type-level change -> classify -> ComparisonResult

Type reconciliation runs three passes so that precedence holds globally:
exact full name, then explicit mapping rules, then same-simple-name
auto-mapping. Each baseline and each candidate type joins at most one pair.
Unmatched candidate types are Added; unmatched baseline types are Removed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from apidiff.compare.analyzer import TypeAnalyzer
from apidiff.compare.calculator import DifferenceCalculator
from apidiff.compare.classifier import ChangeClassifier
from apidiff.compare.extractor import ApiExtractor
from apidiff.compare.mapper import NameMapper
from apidiff.compare.models import ApiDifference, ComparisonResult
from apidiff.compare.signatures import SignatureBuilder, strip_arity
from apidiff.config.models import ComparisonConfig, FilterConfig
from apidiff.core.errors import ApiDiffError, ComparisonError
from apidiff.core.logging import get_logger
from apidiff.surface.descriptors import ReflectedSurface, TypeDescriptor


@dataclass(frozen=True, slots=True)
class TypePair:
    old: TypeDescriptor
    new: TypeDescriptor
    via: str  # "exact" | "mapping" | "auto"


def _simple_name(full_name: str) -> str:
    return full_name.rpartition(".")[2]


class ApiComparer:
    def __init__(
        self,
        extractor: ApiExtractor,
        calculator: DifferenceCalculator,
        mapper: NameMapper,
        classifier: ChangeClassifier,
        *,
        filter_config: FilterConfig | None = None,
        type_analyzer: TypeAnalyzer | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._extractor = extractor
        self._calculator = calculator
        self._mapper = mapper
        self._classifier = classifier
        self._filter = filter_config
        self._analyzer = type_analyzer or TypeAnalyzer()
        self._log = logger or get_logger(__name__)

    # -- entry points -------------------------------------------------------

    def compare_assemblies(
        self, baseline: ReflectedSurface, candidate: ReflectedSurface
    ) -> ComparisonResult:
        """Compare two surfaces end to end.

        Raises:
            ValueError: Either surface is None.
            ApiDiffError: Extraction or comparison failed; non-domain errors
                are wrapped in ``ComparisonError``.
        """
        if baseline is None or candidate is None:
            raise ValueError("baseline and candidate must not be None")

        self._log.info("comparison_started", baseline=baseline.name, candidate=candidate.name)
        try:
            old_types = self._extractor.get_public_types(baseline, self._filter)
            new_types = self._extractor.get_public_types(candidate, self._filter)
            self._log.debug("types_found", baseline=len(old_types), candidate=len(new_types))
            differences = self.compare_types(old_types, new_types)
        except ApiDiffError as e:
            self._log.error("comparison_failed", error=str(e))
            raise
        except Exception as e:
            self._log.error("comparison_failed", error=str(e))
            raise ComparisonError.failed(baseline.name, candidate.name, str(e)) from e

        result = ComparisonResult(
            baseline_name=baseline.name,
            candidate_name=candidate.name,
            baseline_location=baseline.location,
            candidate_location=candidate.location,
            differences=tuple(differences),
        )
        summary = result.summary
        self._log.info(
            "comparison_complete",
            total=result.total_differences,
            added=summary.added_count,
            removed=summary.removed_count,
            modified=summary.modified_count,
            breaking=summary.breaking_changes_count,
        )
        return result

    def compare_types(
        self, old_types: Iterable[TypeDescriptor], new_types: Iterable[TypeDescriptor]
    ) -> list[ApiDifference]:
        if old_types is None or new_types is None:
            raise ValueError("old_types and new_types must not be None")
        old_list = list(old_types)
        new_list = list(new_types)

        pairs, added, removed = self.reconcile_types(old_list, new_list)

        differences: list[ApiDifference] = []
        for new_type in added:
            differences.append(self._classify(self._calculator.calculate_added_type(new_type)))
        for old_type in removed:
            differences.append(self._classify(self._calculator.calculate_removed_type(old_type)))

        for pair in pairs:
            try:
                member_diffs = self.compare_members(pair.old, pair.new)
                type_diff = self._calculator.calculate_type_changes(
                    pair.old,
                    pair.new,
                    signatures_equivalent=self._signatures_equivalent(pair),
                )
            except Exception as e:
                self._log.error(
                    "type_pair_failed",
                    old_type=pair.old.full_name,
                    new_type=pair.new.full_name,
                    error=str(e),
                )
                continue
            differences.extend(member_diffs)
            if type_diff is not None:
                differences.append(self._classify(type_diff))

        return differences

    def compare_members(
        self, old_type: TypeDescriptor, new_type: TypeDescriptor
    ) -> list[ApiDifference]:
        """Member differences of one matched pair, keyed by signature."""
        if old_type is None or new_type is None:
            raise ValueError("old_type and new_type must not be None")

        try:
            old_members = self._extractor.extract_type_members(old_type)
            new_members = self._extractor.extract_type_members(new_type)
            self._log.debug(
                "members_found",
                type=old_type.full_name,
                baseline=len(old_members),
                candidate=len(new_members),
            )
            old_by_signature = {m.signature: m for m in old_members}
            new_by_signature = {m.signature: m for m in new_members}

            differences: list[ApiDifference] = []
            for member in new_members:
                if member.signature not in old_by_signature:
                    self._log.debug("member_added", member=member.full_name)
                    differences.append(
                        self._classify(self._calculator.calculate_added_member(member))
                    )
            for member in old_members:
                if member.signature not in new_by_signature:
                    self._log.debug("member_removed", member=member.full_name)
                    differences.append(
                        self._classify(self._calculator.calculate_removed_member(member))
                    )
            for member in old_members:
                counterpart = new_by_signature.get(member.signature)
                if counterpart is None:
                    continue
                # Matched by signature; attribute-only changes stay invisible.
                diff = self._calculator.calculate_member_changes(member, counterpart)
                if diff is not None:
                    self._log.debug("member_modified", member=member.full_name)
                    differences.append(self._classify(diff))
            return differences
        except Exception as e:
            self._log.error(
                "compare_members_failed",
                old_type=old_type.full_name,
                new_type=new_type.full_name,
                error=str(e),
            )
            return []

    # -- reconciliation -----------------------------------------------------

    def reconcile_types(
        self, old_types: list[TypeDescriptor], new_types: list[TypeDescriptor]
    ) -> tuple[list[TypePair], list[TypeDescriptor], list[TypeDescriptor]]:
        """Match baseline and candidate types.

        Returns:
            (pairs, added candidate types, removed baseline types)
        """
        fold = self._fold
        pairs: list[TypePair] = []
        matched_old: set[int] = set()
        matched_new: set[int] = set()

        def pair(old: TypeDescriptor, new: TypeDescriptor, via: str) -> None:
            matched_old.add(id(old))
            matched_new.add(id(new))
            pairs.append(TypePair(old, new, via))
            if via != "exact":
                self._log.debug("type_matched", old=old.full_name, new=new.full_name, via=via)

        old_by_name = {t.full_name: t for t in old_types}
        for new in new_types:
            old = old_by_name.get(new.full_name)
            if old is not None and id(old) not in matched_old:
                pair(old, new, "exact")

        # Baseline types reachable from each candidate name through the mapper.
        mapped_from: dict[str, list[TypeDescriptor]] = {}
        for old in old_types:
            if id(old) in matched_old:
                continue
            for target in self._mapper.map_full_type_name(old.full_name):
                mapped_from.setdefault(fold(target), []).append(old)
        for new in new_types:
            if id(new) in matched_new:
                continue
            for old in mapped_from.get(fold(new.full_name), []):
                if id(old) not in matched_old:
                    pair(old, new, "mapping")
                    break

        for new in new_types:
            if id(new) in matched_new or not self._mapper.should_auto_map_type(new.full_name):
                continue
            simple = fold(_simple_name(new.full_name))
            for old in old_types:
                if (
                    id(old) not in matched_old
                    and self._mapper.should_auto_map_type(old.full_name)
                    and fold(_simple_name(old.full_name)) == simple
                ):
                    pair(old, new, "auto")
                    break

        added = [t for t in new_types if id(t) not in matched_new]
        removed = [t for t in old_types if id(t) not in matched_old]
        return pairs, added, removed

    def _fold(self, name: str) -> str:
        return name.casefold() if self._mapper.config.ignore_case else name

    def _signatures_equivalent(self, pair: TypePair) -> bool:
        """A renamed pair whose signatures differ only by the type name."""
        if pair.via == "exact":
            return False
        old_signature = self._analyzer.analyze_type(pair.old).signature
        new_signature = self._analyzer.analyze_type(pair.new).signature
        old_name = strip_arity(pair.old.name)
        new_name = strip_arity(pair.new.name)
        renamed = re.sub(rf"\b{re.escape(old_name)}\b", new_name, old_signature)
        return self._fold(renamed) == self._fold(new_signature)

    def _classify(self, difference: ApiDifference) -> ApiDifference:
        return self._classifier.classify_change(difference)


def build_comparer(
    config: ComparisonConfig, logger: structlog.stdlib.BoundLogger | None = None
) -> ApiComparer:
    """Wire an ``ApiComparer`` and its collaborators from one configuration."""
    signature_builder = SignatureBuilder(logger)
    analyzer = TypeAnalyzer(signature_builder, logger)
    return ApiComparer(
        extractor=ApiExtractor(analyzer, logger),
        calculator=DifferenceCalculator(analyzer, logger),
        mapper=NameMapper(config.mappings, logger),
        classifier=ChangeClassifier(config.breaking_change_rules, config.exclusions, logger),
        filter_config=config.filters,
        type_analyzer=analyzer,
        logger=logger,
    )
