"""
Chip Classification Module

This module buckets detected chips into known families and routes their
readings into per-family records.

Known Families:
    - amdgpu: GPU temperature and average power
    - k10temp: AMD CPU die temperature (Tdie)
"""

from .families import (
    FAMILIES,
    FAMILY_AMDGPU,
    FAMILY_K10TEMP,
    ROUTING_RULES,
    AmdgpuRecord,
    K10TempRecord,
    RoutingRule,
    Snapshot,
    route_reading,
)
from .discovery import collect_snapshot

__all__ = [
    "FAMILIES",
    "FAMILY_AMDGPU",
    "FAMILY_K10TEMP",
    "ROUTING_RULES",
    "AmdgpuRecord",
    "K10TempRecord",
    "RoutingRule",
    "Snapshot",
    "route_reading",
    "collect_snapshot",
]
