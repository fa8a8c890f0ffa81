"""
Sensor Backend Adapters

This module contains the backends the discovery pass reads hardware sensors
through. New backends implement the BaseSensorBackend interface.

Available Backends:
    - libsensors_adapter: lm-sensors' libsensors via PySensors (default)
    - psutil_adapter: temperatures only, via psutil
"""

from typing import Any, Dict, Optional

from ..errors import ConfigurationError, EXIT_INVALID_CONFIG
from .base_adapter import (
    BaseSensorBackend,
    ChipIdentity,
    FeatureHandle,
    FeatureKind,
    SubfeatureHandle,
    SubfeatureKind,
    Reading,
)
from .libsensors_adapter import LibsensorsAdapter
from .psutil_adapter import PsutilAdapter

BACKENDS = {
    "libsensors": LibsensorsAdapter,
    "psutil": PsutilAdapter,
}


def create_backend(config: Optional[Dict[str, Any]] = None) -> BaseSensorBackend:
    """
    Build the backend named by ``general.backend``.

    Raises:
        ConfigurationError: if the name is not a known backend
    """
    config = config or {}
    name = config.get("general", {}).get("backend", "libsensors")
    try:
        backend_cls = BACKENDS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown sensor backend '{name}'",
            detail=f"expected one of {', '.join(sorted(BACKENDS))}",
            exit_code=EXIT_INVALID_CONFIG,
        ) from None
    return backend_cls(config)


__all__ = [
    "BaseSensorBackend",
    "ChipIdentity",
    "FeatureHandle",
    "FeatureKind",
    "SubfeatureHandle",
    "SubfeatureKind",
    "Reading",
    "LibsensorsAdapter",
    "PsutilAdapter",
    "BACKENDS",
    "create_backend",
]
