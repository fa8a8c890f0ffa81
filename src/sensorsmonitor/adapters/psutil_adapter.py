"""
psutil Backend Adapter

Temperature-only backend built on psutil.sensors_temperatures(). Useful on
hosts without libsensors; psutil reads the same hwmon sysfs tree but exposes
no power readings.
"""

import logging
from typing import Iterator, Optional

import psutil

from ..errors import BackendError, EXIT_BACKEND_INIT, EXIT_FAIL_READ_SENSOR
from .base_adapter import (
    BaseSensorBackend,
    ChipIdentity,
    FeatureHandle,
    FeatureKind,
    SubfeatureHandle,
    SubfeatureKind,
    require_finite,
)

logger = logging.getLogger("sensorsmonitor.adapters.psutil")


class PsutilAdapter(BaseSensorBackend):
    """
    Sensor backend on top of psutil.

    Each hwmon device name is reported as one chip, each of its temperature
    entries as a feature with a single TEMP_INPUT subfeature. psutil groups
    devices sharing a name, so two GPUs of the same family appear as one chip
    with both sets of features.
    """

    def initialize(self) -> None:
        """Check that the platform exposes temperature sensors."""
        if not hasattr(psutil, "sensors_temperatures"):
            raise BackendError(
                "sensors_temperatures",
                detail="not supported on this platform",
                exit_code=EXIT_BACKEND_INIT,
            )
        try:
            psutil.sensors_temperatures()
        except Exception as e:
            raise BackendError(
                "sensors_temperatures", detail=str(e), exit_code=EXIT_BACKEND_INIT
            ) from e
        self._initialized = True
        logger.debug("psutil temperature backend initialized")

    def enumerate_chips(self) -> Iterator[ChipIdentity]:
        try:
            temps = psutil.sensors_temperatures()
        except Exception as e:
            raise BackendError(
                "sensors_temperatures", detail=str(e), exit_code=EXIT_FAIL_READ_SENSOR
            ) from e

        for name, entries in temps.items():
            yield ChipIdentity(family=name, handle=list(entries), adapter="hwmon")

    def enumerate_features(self, chip: ChipIdentity) -> Iterator[FeatureHandle]:
        for index, entry in enumerate(chip.handle, start=1):
            yield FeatureHandle(
                chip=chip,
                name=f"temp{index}",
                kind=FeatureKind.TEMP,
                handle=entry,
            )

    def enumerate_readable_subfeatures(
        self, chip: ChipIdentity, feature: FeatureHandle
    ) -> Iterator[SubfeatureHandle]:
        yield SubfeatureHandle(
            chip=chip,
            feature=feature,
            name=f"{feature.name}_input",
            kind=SubfeatureKind.TEMP_INPUT,
            handle=feature.handle,
        )

    def read_value(self, chip: ChipIdentity, subfeature: SubfeatureHandle) -> float:
        current = getattr(subfeature.handle, "current", None)
        if current is None:
            raise BackendError(
                f"can't get value of subfeature {subfeature.name}",
                detail="no current reading",
                exit_code=EXIT_FAIL_READ_SENSOR,
            )
        return require_finite(subfeature, float(current))

    def label(self, chip: ChipIdentity, feature: FeatureHandle) -> Optional[str]:
        # psutil reports a missing temp*_label as an empty string
        return getattr(feature.handle, "label", "") or None

    def shutdown(self) -> None:
        self._initialized = False
