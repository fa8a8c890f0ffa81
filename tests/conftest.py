"""
Pytest Configuration and Fixtures

Provides shared fixtures and configuration for all tests, including an
in-memory sensor backend.
"""

import pytest
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sensorsmonitor.adapters.base_adapter import (
    BaseSensorBackend,
    ChipIdentity,
    FeatureHandle,
    SubfeatureHandle,
    SubfeatureKind,
)
from sensorsmonitor.errors import BackendError, EXIT_FAIL_READ_SENSOR
from sensorsmonitor.utils import get_default_config


@dataclass
class FakeSubfeature:
    name: str
    kind: int
    value: float
    readable: bool = True
    fails: bool = False


@dataclass
class FakeFeature:
    name: str
    label: Optional[str]
    subfeatures: List[FakeSubfeature] = field(default_factory=list)
    label_fails: bool = False


@dataclass
class FakeChip:
    family: str
    features: List[FakeFeature] = field(default_factory=list)
    path: str = ""


class FakeBackend(BaseSensorBackend):
    """Backend serving a fixed list of chips."""

    def __init__(self, chips, config=None):
        super().__init__(config)
        self.chips = list(chips)
        self.shutdown_calls = 0

    def initialize(self) -> None:
        self._initialized = True

    def enumerate_chips(self):
        for chip in self.chips:
            yield ChipIdentity(
                family=chip.family, handle=chip, path=chip.path, adapter="Fake adapter"
            )

    def enumerate_features(self, chip):
        for feature in chip.handle.features:
            yield FeatureHandle(chip=chip, name=feature.name, handle=feature)

    def enumerate_readable_subfeatures(self, chip, feature):
        for sub in feature.handle.subfeatures:
            if sub.readable:
                yield SubfeatureHandle(
                    chip=chip, feature=feature, name=sub.name, kind=sub.kind, handle=sub
                )

    def read_value(self, chip, subfeature):
        if subfeature.handle.fails:
            raise BackendError(
                f"can't get value of subfeature {subfeature.name}",
                exit_code=EXIT_FAIL_READ_SENSOR,
            )
        return subfeature.handle.value

    def label(self, chip, feature):
        if feature.handle.label_fails:
            raise BackendError(
                f"can't get label of feature {feature.name}",
                exit_code=EXIT_FAIL_READ_SENSOR,
            )
        return feature.handle.label

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self._initialized = False


def build_amdgpu_chip(temp: float, power: float, path: str = "") -> FakeChip:
    return FakeChip(
        family="amdgpu",
        path=path,
        features=[
            FakeFeature("temp1", "edge", [
                FakeSubfeature("temp1_input", SubfeatureKind.TEMP_INPUT, temp),
                FakeSubfeature("temp1_crit", SubfeatureKind.TEMP_CRIT, 100.0),
            ]),
            FakeFeature("power1", "PPT", [
                FakeSubfeature("power1_average", SubfeatureKind.POWER_AVERAGE, power),
                FakeSubfeature("power1_cap", SubfeatureKind.POWER_CAP, 250.0),
            ]),
        ],
    )


def build_k10temp_chip(tdie: float, tctl: Optional[float] = None, path: str = "") -> FakeChip:
    features = []
    if tctl is not None:
        features.append(FakeFeature("temp1", "Tctl", [
            FakeSubfeature("temp1_input", SubfeatureKind.TEMP_INPUT, tctl),
        ]))
    features.append(FakeFeature("temp2", "Tdie", [
        FakeSubfeature("temp2_input", SubfeatureKind.TEMP_INPUT, tdie),
    ]))
    return FakeChip(family="k10temp", path=path, features=features)


@pytest.fixture
def default_config():
    """Provide default configuration."""
    return get_default_config()


@pytest.fixture
def make_backend():
    """Provide a factory for in-memory backends."""
    def factory(*chips):
        backend = FakeBackend(chips)
        backend.initialize()
        return backend
    return factory


@pytest.fixture
def amdgpu_chip():
    """Provide a builder for amdgpu chips."""
    return build_amdgpu_chip


@pytest.fixture
def k10temp_chip():
    """Provide a builder for k10temp chips."""
    return build_k10temp_chip


@pytest.fixture
def runtime_dir(tmp_path, monkeypatch):
    """Point XDG_RUNTIME_DIR at a temporary directory."""
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path))
    return tmp_path
