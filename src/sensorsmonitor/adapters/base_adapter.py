"""
Base Sensor Backend Interface

All sensor backends must inherit from BaseSensorBackend and implement the
required methods. The discovery pass only ever talks to this interface, so a
backend can be swapped without touching classification.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from ..errors import BackendError, EXIT_FAIL_READ_SENSOR


class SubfeatureKind:
    """
    Physical quantity reported by a subfeature.

    Values match libsensors' ``sensors_subfeature_type`` so that kinds coming
    from the C library can be compared without translation.
    """
    IN_INPUT = 0x000
    FAN_INPUT = 0x100
    TEMP_INPUT = 0x200
    TEMP_MAX = 0x201
    TEMP_CRIT = 0x204
    POWER_AVERAGE = 0x300
    POWER_AVERAGE_HIGHEST = 0x301
    POWER_AVERAGE_LOWEST = 0x302
    POWER_INPUT = 0x303
    POWER_CAP = 0x306
    ENERGY_INPUT = 0x400
    CURR_INPUT = 0x500
    UNKNOWN = 0x7FFFFFFF


class FeatureKind:
    """Feature types, matching libsensors' ``sensors_feature_type``."""
    IN = 0x00
    FAN = 0x01
    TEMP = 0x02
    POWER = 0x03
    ENERGY = 0x04
    CURR = 0x05
    UNKNOWN = 0x7FFFFFFF


# libsensors subfeature mode flags
MODE_R = 1
MODE_W = 2


@dataclass(frozen=True)
class ChipIdentity:
    """A detected chip. ``family`` is the prefix used for classification."""
    family: str
    handle: Any = field(default=None, compare=False, repr=False)
    path: str = ""
    adapter: str = ""


@dataclass(frozen=True)
class FeatureHandle:
    """A measurable attribute of a chip, e.g. one temperature sensor site."""
    chip: ChipIdentity
    name: str
    kind: int = 0
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class SubfeatureHandle:
    """One numeric channel under a feature."""
    chip: ChipIdentity
    feature: FeatureHandle
    name: str
    kind: int
    readable: bool = True
    writable: bool = False
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Reading:
    """One instantaneous sample, valid for a single collection cycle."""
    kind: int
    value: float
    label: str


def require_finite(subfeature: "SubfeatureHandle", value: float) -> float:
    """
    Reject NaN and infinite readings.

    Raises:
        BackendError: exit 6, the same as a failed read
    """
    if not math.isfinite(value):
        raise BackendError(
            f"can't get value of subfeature {subfeature.name}",
            detail=f"non-finite reading {value!r}",
            exit_code=EXIT_FAIL_READ_SENSOR,
        )
    return value


class BaseSensorBackend(ABC):
    """
    Abstract base class for all sensor backends.

    Example:
        class MyBackend(BaseSensorBackend):
            def initialize(self) -> None: ...
            def enumerate_chips(self): ...
            def enumerate_features(self, chip): ...
            def enumerate_readable_subfeatures(self, chip, feature): ...
            def read_value(self, chip, subfeature) -> float: ...
            def label(self, chip, feature): ...
            def shutdown(self) -> None: ...
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the backend with optional configuration.

        Args:
            config: Optional dictionary containing backend-specific settings
        """
        self.config = config or {}
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if the backend has been successfully initialized."""
        return self._initialized

    @property
    def backend_name(self) -> str:
        """Return the name of this backend."""
        return self.__class__.__name__

    @abstractmethod
    def initialize(self) -> None:
        """
        Initialize the sensor library.

        Raises:
            BackendError: if the library cannot be loaded or initialized
        """

    @abstractmethod
    def enumerate_chips(self) -> Iterator[ChipIdentity]:
        """
        Yield every detected chip.

        The sequence is finite and a fresh iteration starts over each call.
        """

    @abstractmethod
    def enumerate_features(self, chip: ChipIdentity) -> Iterator[FeatureHandle]:
        """Yield the features of ``chip``."""

    @abstractmethod
    def enumerate_readable_subfeatures(
        self, chip: ChipIdentity, feature: FeatureHandle
    ) -> Iterator[SubfeatureHandle]:
        """Yield the read-capable subfeatures of ``feature``."""

    @abstractmethod
    def read_value(self, chip: ChipIdentity, subfeature: SubfeatureHandle) -> float:
        """
        Read the current value of a subfeature.

        Raises:
            BackendError: if the value cannot be read
        """

    @abstractmethod
    def label(self, chip: ChipIdentity, feature: FeatureHandle) -> Optional[str]:
        """
        Resolve the human label of a feature.

        Returns:
            The label, or None if the feature has none

        Raises:
            BackendError: if the backend fails while resolving the label
        """

    @abstractmethod
    def shutdown(self) -> None:
        """Release library resources. Must never raise."""

    def __enter__(self):
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown()
        return False
