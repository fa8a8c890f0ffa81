"""
Chip Families

Per-family records, the routing table that maps readings onto record fields,
and the Snapshot holding one cycle's records.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Type, Union

from ..adapters.base_adapter import Reading, SubfeatureKind

FAMILY_AMDGPU = "amdgpu"
FAMILY_K10TEMP = "k10temp"

# Tctl carries a legacy +27°C offset on some parts; only Tdie is accurate
LABEL_TDIE = "Tdie"

DEFAULT_MAX_PER_FAMILY = 4


@dataclass
class AmdgpuRecord:
    """Readings of one amdgpu chip."""
    temp_input: float = 0.0
    power_average: float = 0.0


@dataclass
class K10TempRecord:
    """Readings of one k10temp chip."""
    tdie: float = 0.0


FamilyRecord = Union[AmdgpuRecord, K10TempRecord]

# Family name -> record class, in render order
FAMILIES: Dict[str, Type] = {
    FAMILY_AMDGPU: AmdgpuRecord,
    FAMILY_K10TEMP: K10TempRecord,
}


def any_label(label: str) -> bool:
    return True


def label_is(expected: str) -> Callable[[str], bool]:
    """Build a predicate matching one exact label."""
    def predicate(label: str) -> bool:
        return label == expected
    predicate.__name__ = f"label_is_{expected}"
    return predicate


@dataclass(frozen=True)
class RoutingRule:
    """
    ``(family, kind, label predicate) -> target_field`` mapping.

    A reading matching family, subfeature kind and label updates ``target_field`` on
    the chip's record.
    """
    family: str
    kind: int
    target_field: str
    label_predicate: Callable[[str], bool] = any_label

    def matches(self, family: str, reading: Reading) -> bool:
        return (
            self.family == family
            and self.kind == reading.kind
            and self.label_predicate(reading.label)
        )


ROUTING_RULES: Tuple[RoutingRule, ...] = (
    RoutingRule(FAMILY_AMDGPU, SubfeatureKind.TEMP_INPUT, "temp_input"),
    RoutingRule(FAMILY_AMDGPU, SubfeatureKind.POWER_AVERAGE, "power_average"),
    RoutingRule(FAMILY_K10TEMP, SubfeatureKind.TEMP_INPUT, "tdie", label_is(LABEL_TDIE)),
)


def route_reading(
    family: str,
    record: FamilyRecord,
    reading: Reading,
    rules: Tuple[RoutingRule, ...] = ROUTING_RULES,
) -> Optional[str]:
    """
    Apply the first rule matching ``reading`` to ``record``.

    Returns:
        The updated field name, or None if the reading is not tracked
    """
    for rule in rules:
        if rule.matches(family, reading):
            setattr(record, rule.target_field, reading.value)
            return rule.target_field
    return None


@dataclass
class Snapshot:
    """
    Records of one collection cycle, grouped by family.

    Each family holds at most ``max_per_family`` records; chips beyond that
    are dropped by :meth:`allocate` returning None.
    """
    max_per_family: int = DEFAULT_MAX_PER_FAMILY
    records: Dict[str, List[FamilyRecord]] = field(
        default_factory=lambda: {name: [] for name in FAMILIES}
    )

    @property
    def amdgpu_records(self) -> List[AmdgpuRecord]:
        return self.records[FAMILY_AMDGPU]

    @property
    def k10temp_records(self) -> List[K10TempRecord]:
        return self.records[FAMILY_K10TEMP]

    def is_known(self, family: str) -> bool:
        return family in FAMILIES

    def is_full(self, family: str) -> bool:
        return len(self.records[family]) >= self.max_per_family

    def allocate(self, family: str) -> Optional[FamilyRecord]:
        """
        Append a zero-valued record for a newly seen chip.

        Returns:
            The new record, or None if the family is unknown or at capacity
        """
        if not self.is_known(family) or self.is_full(family):
            return None
        record = FAMILIES[family]()
        self.records[family].append(record)
        return record

    def counts(self) -> Dict[str, int]:
        return {name: len(records) for name, records in self.records.items()}
