"""
libsensors Backend Adapter

Reads chips, features and subfeatures through lm-sensors' libsensors, using
the PySensors ctypes binding (imported as ``sensors``).
"""

import logging
import os
from typing import Any, Dict, Iterator, Optional

try:
    import sensors
    HAS_PYSENSORS = True
    _IMPORT_ERROR: Optional[BaseException] = None
except (ImportError, OSError, AttributeError) as e:
    # PySensors binds libsensors.so at import time
    sensors = None
    HAS_PYSENSORS = False
    _IMPORT_ERROR = e

from ..errors import (
    BackendError,
    EXIT_BACKEND_INIT,
    EXIT_FAIL_READ_SENSOR,
)
from .base_adapter import (
    BaseSensorBackend,
    ChipIdentity,
    FeatureHandle,
    SubfeatureHandle,
    MODE_R,
    MODE_W,
    require_finite,
)

logger = logging.getLogger("sensorsmonitor.adapters.libsensors")


def _text(value: Any) -> str:
    """ctypes ``c_char_p`` fields come back as bytes on Python 3."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class LibsensorsAdapter(BaseSensorBackend):
    """
    Sensor backend on top of libsensors.

    Chip prefixes ("amdgpu", "k10temp", ...) become the family discriminator.
    Subfeature kinds are libsensors' own subfeature type numbers.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._config_file = self.config.get("sensors", {}).get("config_file")

    def initialize(self) -> None:
        """Initialize libsensors."""
        if not HAS_PYSENSORS:
            raise BackendError(
                "sensors_init",
                detail=f"libsensors binding unavailable: {_IMPORT_ERROR}",
                exit_code=EXIT_BACKEND_INIT,
            )

        try:
            if self._config_file:
                # fopen() in the binding takes c_char_p
                sensors.init(os.fsencode(self._config_file))
            else:
                sensors.init()
        except Exception as e:
            raise BackendError(
                "sensors_init", detail=str(e), exit_code=EXIT_BACKEND_INIT
            ) from e

        self._initialized = True
        logger.debug("libsensors initialized")

    def enumerate_chips(self) -> Iterator[ChipIdentity]:
        for chip in sensors.iter_detected_chips():
            try:
                adapter = _text(chip.adapter_name)
            except Exception:
                adapter = ""
            yield ChipIdentity(
                family=_text(chip.prefix),
                handle=chip,
                path=_text(getattr(chip, "path", "")),
                adapter=adapter,
            )

    def enumerate_features(self, chip: ChipIdentity) -> Iterator[FeatureHandle]:
        for feature in chip.handle:
            yield FeatureHandle(
                chip=chip,
                name=_text(feature.name),
                kind=feature.type,
                handle=feature,
            )

    def enumerate_readable_subfeatures(
        self, chip: ChipIdentity, feature: FeatureHandle
    ) -> Iterator[SubfeatureHandle]:
        for sub in feature.handle:
            if not sub.flags & MODE_R:
                continue
            yield SubfeatureHandle(
                chip=chip,
                feature=feature,
                name=_text(sub.name),
                kind=sub.type,
                readable=True,
                writable=bool(sub.flags & MODE_W),
                handle=sub,
            )

    def read_value(self, chip: ChipIdentity, subfeature: SubfeatureHandle) -> float:
        try:
            value = float(subfeature.handle.get_value())
        except Exception as e:
            raise BackendError(
                f"can't get value of subfeature {subfeature.name}",
                detail=str(e),
                exit_code=EXIT_FAIL_READ_SENSOR,
            ) from e
        return require_finite(subfeature, value)

    def label(self, chip: ChipIdentity, feature: FeatureHandle) -> Optional[str]:
        try:
            label = feature.handle.label
        except Exception as e:
            raise BackendError(
                f"can't get label of feature {feature.name}",
                detail=str(e),
                exit_code=EXIT_FAIL_READ_SENSOR,
            ) from e
        if label is None:
            return None
        return _text(label)

    def shutdown(self) -> None:
        """Release libsensors resources."""
        if not self._initialized:
            return
        try:
            sensors.cleanup()
        except Exception as e:
            logger.debug(f"sensors_cleanup failed: {e}")
        self._initialized = False
