"""
Snapshot Aggregation

Reduces each family's records to one display value per metric: the
arithmetic mean, rounded half-up to an integer.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .classifiers.families import Snapshot


@dataclass(frozen=True)
class AmdgpuAggregate:
    temp_input: int
    power_average: int


@dataclass(frozen=True)
class K10TempAggregate:
    tdie: int


@dataclass(frozen=True)
class Aggregate:
    """Display values per family; None means the family had no records."""
    amdgpu: Optional[AmdgpuAggregate] = None
    k10temp: Optional[K10TempAggregate] = None

    @property
    def is_empty(self) -> bool:
        return self.amdgpu is None and self.k10temp is None


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def display_value(value: float) -> int:
    """
    Round half-up for display: ``trunc(value + 0.5)``.

    41.5 -> 42, 41.49999 -> 41. Not banker's rounding, so ``round()`` is not
    used.
    """
    return math.trunc(value + 0.5)


def aggregate(snapshot: Snapshot) -> Aggregate:
    """
    Compute per-family display values for ``snapshot``.

    Args:
        snapshot: Records collected in one cycle

    Returns:
        Aggregate with one entry per non-empty family
    """
    amdgpu = None
    if snapshot.amdgpu_records:
        records = snapshot.amdgpu_records
        amdgpu = AmdgpuAggregate(
            temp_input=display_value(mean([r.temp_input for r in records])),
            power_average=display_value(mean([r.power_average for r in records])),
        )

    k10temp = None
    if snapshot.k10temp_records:
        k10temp = K10TempAggregate(
            tdie=display_value(mean([r.tdie for r in snapshot.k10temp_records])),
        )

    return Aggregate(amdgpu=amdgpu, k10temp=k10temp)
