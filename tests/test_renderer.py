"""
Tests for Line Rendering

Covers:
    - Segment presence and order
    - Separator width
    - Worst-case length bound
"""

import re

import pytest

from sensorsmonitor.aggregator import Aggregate, AmdgpuAggregate, K10TempAggregate
from sensorsmonitor.classifiers import AmdgpuRecord, K10TempRecord, Snapshot
from sensorsmonitor.renderer import (
    MAX_DISPLAY_VALUE,
    MAX_LINE_BYTES,
    MAX_LINE_LENGTH,
    MIN_DISPLAY_VALUE,
    encode_line,
    render,
    render_snapshot,
)

AMDGPU = AmdgpuAggregate(temp_input=52, power_average=31)
K10TEMP = K10TempAggregate(tdie=48)


class TestRender:
    """Tests for render()."""

    def test_empty(self):
        assert render(Aggregate()) == "\n"

    def test_amdgpu_only(self):
        line = render(Aggregate(amdgpu=AMDGPU))
        assert line == "amdgpu 52°C 31W\n"
        assert re.fullmatch(r"amdgpu -?\d+°C -?\d+W\n", line)

    def test_k10temp_only(self):
        assert render(Aggregate(k10temp=K10TEMP)) == "Tdie 48°C\n"

    def test_both(self):
        assert render(Aggregate(amdgpu=AMDGPU, k10temp=K10TEMP)) == (
            "amdgpu 52°C 31W   Tdie 48°C\n"
        )

    def test_separator_is_exactly_three_spaces(self):
        line = render(Aggregate(amdgpu=AMDGPU, k10temp=K10TEMP))
        match = re.fullmatch(r"amdgpu \d+°C \d+W( +)Tdie \d+°C\n", line)
        assert match is not None
        assert match.group(1) == "   "

    def test_single_newline_terminator(self):
        line = render(Aggregate(amdgpu=AMDGPU, k10temp=K10TEMP))
        assert line.endswith("\n")
        assert line.count("\n") == 1

    def test_deterministic(self):
        agg = Aggregate(amdgpu=AMDGPU, k10temp=K10TEMP)
        assert render(agg) == render(agg)

    def test_values_are_clamped(self):
        line = render(Aggregate(k10temp=K10TempAggregate(tdie=10 ** 9)))
        assert line == f"Tdie {MAX_DISPLAY_VALUE}°C\n"

    def test_negative_values_are_clamped(self):
        line = render(Aggregate(k10temp=K10TempAggregate(tdie=-(10 ** 9))))
        assert line == f"Tdie {MIN_DISPLAY_VALUE}°C\n"


class TestRenderSnapshot:
    """Tests for aggregate-and-render."""

    def test_empty_snapshot(self):
        assert render_snapshot(Snapshot()) == "\n"

    def test_rounding_reaches_output(self):
        snapshot = Snapshot()
        snapshot.k10temp_records.append(K10TempRecord(41.5))
        snapshot.amdgpu_records.append(AmdgpuRecord(temp_input=41.49999, power_average=0.5))
        assert render_snapshot(snapshot) == "amdgpu 41°C 1W   Tdie 42°C\n"


class TestLineBound:
    """Tests for the worst-case line length."""

    def test_worst_case_fits(self):
        widest = Aggregate(
            amdgpu=AmdgpuAggregate(temp_input=MIN_DISPLAY_VALUE, power_average=MAX_DISPLAY_VALUE),
            k10temp=K10TempAggregate(tdie=MIN_DISPLAY_VALUE),
        )
        line = render(widest)
        assert len(line) <= MAX_LINE_LENGTH
        assert len(line.encode("utf-8")) <= MAX_LINE_BYTES

    def test_any_aggregate_fits(self):
        huge = Aggregate(
            amdgpu=AmdgpuAggregate(temp_input=10 ** 12, power_average=-(10 ** 12)),
            k10temp=K10TempAggregate(tdie=10 ** 12),
        )
        assert len(encode_line(render(huge))) <= MAX_LINE_BYTES

    def test_encode_line(self):
        assert encode_line("Tdie 48°C\n") == "Tdie 48°C\n".encode("utf-8")

    def test_encode_line_rejects_oversized(self):
        with pytest.raises(ValueError):
            encode_line("x" * (MAX_LINE_BYTES + 1))
