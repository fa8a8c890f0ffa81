"""
Line Renderer

Formats an Aggregate into the single line published each cycle:

    amdgpu 52°C 31W   Tdie 48°C

Segments appear in family order (amdgpu, then k10temp) only when the family
had records; the three-space separator only when both do. The line is always
newline-terminated and carries no locale formatting.
"""

from .aggregator import Aggregate, AmdgpuAggregate, K10TempAggregate, aggregate
from .classifiers.families import Snapshot

ENCODING = "utf-8"

AMDGPU_FORMAT = "amdgpu {temp}°C {power}W"
K10TEMP_FORMAT = "Tdie {tdie}°C"
SEPARATOR = "   "
TERMINATOR = "\n"

# Display values are clamped to this range so the worst-case line is known
MIN_DISPLAY_VALUE = -9999
MAX_DISPLAY_VALUE = 99999


def clamp(value: int) -> int:
    return max(MIN_DISPLAY_VALUE, min(MAX_DISPLAY_VALUE, value))


def format_amdgpu(agg: AmdgpuAggregate) -> str:
    return AMDGPU_FORMAT.format(
        temp=clamp(agg.temp_input), power=clamp(agg.power_average)
    )


def format_k10temp(agg: K10TempAggregate) -> str:
    return K10TEMP_FORMAT.format(tdie=clamp(agg.tdie))


def render(agg: Aggregate) -> str:
    """
    Render ``agg`` to one newline-terminated line.

    Returns:
        The line; just "\\n" when no family has records
    """
    segments = []
    if agg.amdgpu is not None:
        segments.append(format_amdgpu(agg.amdgpu))
    if agg.k10temp is not None:
        segments.append(format_k10temp(agg.k10temp))
    return SEPARATOR.join(segments) + TERMINATOR


def render_snapshot(snapshot: Snapshot) -> str:
    """Aggregate and render ``snapshot`` in one step."""
    return render(aggregate(snapshot))


def _widest_value() -> int:
    return max(MIN_DISPLAY_VALUE, MAX_DISPLAY_VALUE, key=lambda v: len(str(v)))


def _worst_case_line() -> str:
    widest = _widest_value()
    return render(Aggregate(
        amdgpu=AmdgpuAggregate(temp_input=widest, power_average=widest),
        k10temp=K10TempAggregate(tdie=widest),
    ))


MAX_LINE_LENGTH = len(_worst_case_line())
MAX_LINE_BYTES = len(_worst_case_line().encode(ENCODING))


def encode_line(line: str) -> bytes:
    """
    Encode a rendered line for the pipe.

    Raises:
        ValueError: if the encoded line exceeds MAX_LINE_BYTES
    """
    data = line.encode(ENCODING)
    if len(data) > MAX_LINE_BYTES:
        raise ValueError(
            f"rendered line is {len(data)} bytes, limit is {MAX_LINE_BYTES}"
        )
    return data
