"""Capability queries against a value provider."""

import logging
from dataclasses import replace
from typing import Mapping, Optional, Protocol, Sequence, Union

from .errors import CapabilityQueryFailed
from .requirements import FeatureOracle, evaluate_requirement
from .types import (
    CapabilityDefinition,
    CapabilityGroup,
    CapabilityKind,
    CapabilityValue,
    Catalog,
)

logger = logging.getLogger(__name__)

COMPONENT_SEPARATOR = " ,"
INTEGER_FALLBACK = "0"
STRING_FALLBACK = ""


class ValueProvider(Protocol):
    """Issues driver queries for capability values.

    Each call returns the value together with an ``ok`` flag that is False
    when the driver signalled an error for that query.
    """

    def query_integer_vector(self, key: int, arity: int) -> tuple[Sequence[int], bool]:
        ...

    def query_string(self, key: int) -> tuple[str, bool]:
        ...


class StaticValueProvider:
    """Provider answering from a fixed ``enum -> value`` mapping.

    Integer entries may be a single int or a sequence of ints. Unknown keys
    are reported as failed queries. Every call is appended to ``calls``.
    """

    def __init__(self, values: Optional[Mapping[int, Union[int, str, Sequence[int]]]] = None) -> None:
        self.values = dict(values or {})
        self.calls: list[tuple[str, int]] = []

    def query_integer_vector(self, key: int, arity: int) -> tuple[Sequence[int], bool]:
        self.calls.append(("integer", key))
        value = self.values.get(key)
        if value is None or isinstance(value, str):
            return [0] * arity, False
        if isinstance(value, int):
            return [value], True
        return list(value), True

    def query_string(self, key: int) -> tuple[str, bool]:
        self.calls.append(("string", key))
        value = self.values.get(key)
        if not isinstance(value, str):
            return "", False
        return value, True


def _query_integer_vector(
    definition: CapabilityDefinition, provider: ValueProvider
) -> CapabilityValue:
    values, ok = provider.query_integer_vector(definition.enum, definition.components)
    if not ok:
        return CapabilityValue(INTEGER_FALLBACK, ok=False)
    try:
        values = [int(v) for v in values]
    except (TypeError, ValueError):
        logger.warning("%s: provider returned malformed value %r", definition.name, values)
        return CapabilityValue(INTEGER_FALLBACK, ok=False)
    if len(values) != definition.components:
        logger.warning(
            "%s: expected %d components, provider returned %d",
            definition.name,
            definition.components,
            len(values),
        )
        return CapabilityValue(INTEGER_FALLBACK, ok=False)
    return CapabilityValue(COMPONENT_SEPARATOR.join(str(v) for v in values))


def _query_string(
    definition: CapabilityDefinition, provider: ValueProvider
) -> CapabilityValue:
    value, ok = provider.query_string(definition.enum)
    if not ok or value is None:
        return CapabilityValue(STRING_FALLBACK, ok=False)
    return CapabilityValue(str(value))


def query_capability(
    definition: CapabilityDefinition, provider: ValueProvider
) -> CapabilityValue:
    """Query and decode one capability, falling back to a typed default on error.

    Provider errors are logged and never propagated.
    """
    if definition.kind is CapabilityKind.INTEGER_VECTOR:
        query = _query_integer_vector
    elif definition.kind is CapabilityKind.STRING_VALUE:
        query = _query_string
    else:
        raise TypeError(f"Unhandled capability kind: {definition.kind}")

    try:
        result = query(definition, provider)
    except CapabilityQueryFailed as e:
        logger.debug("%s: query failed: %s", definition.name, e)
        result = CapabilityValue(fallback_value(definition.kind), ok=False)
    except Exception as e:
        logger.warning(
            "%s (0x%04X): provider error: %s", definition.name, definition.enum, e
        )
        result = CapabilityValue(fallback_value(definition.kind), ok=False)

    if not result.ok:
        logger.debug(
            "%s (0x%04X): recorded fallback %r", definition.name, definition.enum, result.value
        )
    return result


def fallback_value(kind: CapabilityKind) -> str:
    if kind is CapabilityKind.INTEGER_VECTOR:
        return INTEGER_FALLBACK
    if kind is CapabilityKind.STRING_VALUE:
        return STRING_FALLBACK
    raise TypeError(f"Unhandled capability kind: {kind}")


def populate_group(group: CapabilityGroup, provider: ValueProvider) -> CapabilityGroup:
    """Record one value per definition of a supported group, in declared order."""
    if not group.supported:
        return group
    for definition in group.definitions:
        group.record(definition.name, query_capability(definition, provider))
    failed = sum(1 for cap in group.capabilities.values() if not cap.ok)
    logger.debug(
        "Group %s: %d capabilities, %d fallbacks",
        group.name,
        len(group.capabilities),
        failed,
    )
    return group


def run_catalog(
    catalog: Catalog, provider: ValueProvider, oracle: FeatureOracle
) -> list[CapabilityGroup]:
    """Evaluate and query every group of ``catalog``.

    Returns fresh groups, the catalog itself is left untouched.
    """
    groups = []
    for template in catalog.groups:
        result = evaluate_requirement(template.requirement, oracle)
        group = replace(
            template,
            definitions=list(template.definitions),
            supported=result.supported,
            version_check_skipped=result.version_check_skipped,
            capabilities={},
        )
        if not group.supported:
            logger.info("Group %s not supported, skipping", group.name)
        groups.append(populate_group(group, provider))
    return groups
