"""
Discovery & Classification

Walks every detected chip once per cycle and fills a fresh Snapshot.
"""

import logging

from ..adapters.base_adapter import BaseSensorBackend, Reading
from .families import DEFAULT_MAX_PER_FAMILY, Snapshot, route_reading

logger = logging.getLogger("sensorsmonitor.discovery")


def collect_snapshot(
    backend: BaseSensorBackend,
    max_per_family: int = DEFAULT_MAX_PER_FAMILY,
) -> Snapshot:
    """
    Run one discovery pass over ``backend``.

    Chips of unknown families are skipped, as are chips of a family that has
    already reached ``max_per_family``. Unlabeled features are skipped.
    Any BackendError raised while resolving a label or reading a value
    propagates: a snapshot is never returned half-built.

    Args:
        backend: Initialized sensor backend
        max_per_family: Record cap per family

    Returns:
        The populated Snapshot
    """
    snapshot = Snapshot(max_per_family=max_per_family)

    for chip in backend.enumerate_chips():
        if not snapshot.is_known(chip.family):
            continue

        record = snapshot.allocate(chip.family)
        if record is None:
            logger.debug(
                f"Dropping {chip.family} chip {chip.path or '?'}: "
                f"limit of {max_per_family} reached"
            )
            continue

        for feature in backend.enumerate_features(chip):
            label = backend.label(chip, feature)
            if label is None:
                logger.debug(f"Skipping unlabeled feature {feature.name} of {chip.family}")
                continue

            for sub in backend.enumerate_readable_subfeatures(chip, feature):
                value = backend.read_value(chip, sub)
                reading = Reading(kind=sub.kind, value=value, label=label)
                route_reading(chip.family, record, reading)

    return snapshot
