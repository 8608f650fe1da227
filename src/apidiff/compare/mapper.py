"""Translate baseline names into candidate names using mapping rules."""

from __future__ import annotations

import structlog

from apidiff.config.models import MappingConfig
from apidiff.core.logging import get_logger


def _combine(namespace: str, suffix: str) -> str:
    return f"{namespace}.{suffix}" if namespace else suffix


class NameMapper:
    """Applies namespace and type renames from a ``MappingConfig``.

    Type rules are tried in configuration order and the first match wins;
    namespace rules prefer an exact match, then the longest prefix.
    ``ignore_case`` governs every comparison.
    """

    def __init__(
        self,
        config: MappingConfig,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if config is None:
            raise ValueError("config must not be None")
        self.config = config
        self._log = logger or get_logger(__name__)

    def _fold(self, value: str) -> str:
        return value.casefold() if self.config.ignore_case else value

    def _equals(self, left: str, right: str) -> bool:
        return self._fold(left) == self._fold(right)

    def map_namespace(self, namespace: str) -> list[str]:
        """Candidate namespaces for ``namespace``; never empty.

        An exact rule beats a prefix rule, and the longest matching prefix
        wins. A prefix rule ``Old -> New`` maps ``Old.Sub`` to ``New.Sub`` for
        every target.
        """
        if not namespace:
            return [""]

        for source, targets in self.config.namespace_mappings.items():
            if self._equals(source, namespace):
                self._log.debug("namespace_mapped", source=namespace, targets=targets)
                return list(targets)

        folded = self._fold(namespace)
        prefix_rules = [
            (source, targets)
            for source, targets in self.config.namespace_mappings.items()
            if folded.startswith(self._fold(f"{source}."))
        ]
        if not prefix_rules:
            return [namespace]

        source, targets = max(prefix_rules, key=lambda rule: len(rule[0]))
        suffix = namespace[len(source) + 1 :]
        results = [_combine(target, suffix) for target in targets]
        self._log.debug(
            "namespace_prefix_mapped", source=namespace, rule=source, targets=results
        )
        return results

    def map_type_name(self, type_name: str) -> str:
        if not type_name:
            return ""
        for source, target in self.config.type_mappings.items():
            if self._equals(source, type_name):
                self._log.debug("type_name_mapped", source=type_name, target=target)
                return target
        return type_name

    def map_full_type_name(self, full_name: str) -> list[str]:
        """Candidate full names for a baseline type.

        An exact type mapping on the full name wins outright. Otherwise the
        namespace and simple name are mapped separately and recombined.
        """
        if not full_name:
            return [""]

        for source, target in self.config.type_mappings.items():
            if self._equals(source, full_name):
                self._log.debug("full_type_name_mapped", source=full_name, target=target)
                return [target]

        namespace, dot, simple = full_name.rpartition(".")
        if not dot or not namespace:
            return [self.map_type_name(full_name)]

        mapped_type = self.map_type_name(simple)
        results = [_combine(ns, mapped_type) for ns in self.map_namespace(namespace)]
        self._log.debug("full_type_name_candidates", source=full_name, targets=results)
        return results

    def should_auto_map_type(self, full_name: str) -> bool:
        """Whether ``full_name`` may be matched by simple name alone.

        Requires auto-mapping to be enabled, a namespace, and no generic
        arity marker on the simple name.
        """
        if not self.config.auto_map_same_name_types or not full_name:
            return False
        namespace, dot, simple = full_name.rpartition(".")
        if not dot or not namespace:
            return False
        return "`" not in simple
