"""
sensorsmonitor Main Loop

Polls the hardware sensors at a fixed interval, renders one summary line per
cycle and publishes it through a named pipe in $XDG_RUNTIME_DIR.

Each cycle:
    - discover and classify chips into a fresh Snapshot
    - aggregate and render the line
    - open the pipe for writing (blocks until a reader attaches)
    - write the line, close the pipe, sleep

Any failure is fatal: the error is logged to stderr and the process exits
with the error's exit code.

Usage:
    sensorsmonitor [--config path/to/config.yaml] [--verbose] [--dump | --once]
"""

import argparse
import logging
import signal
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, TextIO

from .adapters import BaseSensorBackend, create_backend
from .channel import PublicationChannel
from .classifiers import FAMILIES, collect_snapshot
from .classifiers.families import DEFAULT_MAX_PER_FAMILY
from .errors import SensorsMonitorError
from .renderer import render_snapshot
from .utils import load_config, setup_logging, validate_config

DEFAULT_POLLING_INTERVAL = 5

# Module logger
logger = logging.getLogger("sensorsmonitor.monitor")


@dataclass(frozen=True)
class MonitorContext:
    """Everything that survives from one cycle to the next."""
    channel: PublicationChannel
    interval: float = DEFAULT_POLLING_INTERVAL
    max_per_family: int = DEFAULT_MAX_PER_FAMILY


def build_context(
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> MonitorContext:
    """
    Resolve the pipe path and loop settings from configuration.

    Raises:
        ConfigurationError: if the runtime directory is not set or a setting
            has the wrong type
    """
    validate_config(config)
    general_config = config.get("general", {})
    return MonitorContext(
        channel=PublicationChannel.from_config(config, environ),
        interval=general_config.get("polling_interval", DEFAULT_POLLING_INTERVAL),
        max_per_family=general_config.get("max_per_family", DEFAULT_MAX_PER_FAMILY),
    )


class SensorsMonitor:
    """
    The discover, render and publish loop.

    Single-threaded. The only places execution suspends are the blocking
    pipe open and the sleep between cycles.
    """

    def __init__(
        self,
        context: MonitorContext,
        backend: BaseSensorBackend,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.context = context
        self.backend = backend
        self._sleep = sleep
        self._cycles = 0

    @property
    def cycles(self) -> int:
        """Number of lines published so far."""
        return self._cycles

    def collect_line(self) -> str:
        """Run discovery and return the rendered line."""
        snapshot = collect_snapshot(self.backend, self.context.max_per_family)
        logger.debug(f"Snapshot counts: {snapshot.counts()}")
        return render_snapshot(snapshot)

    def run_cycle(self) -> str:
        """Collect, render and publish one line."""
        line = self.collect_line()
        self.context.channel.publish(line)
        self._cycles += 1
        logger.debug(f"Published: {line.rstrip()}")
        return line

    def start(self) -> None:
        """Establish the pipe. Called once, before the first cycle."""
        self.context.channel.establish()
        logger.info(
            f"Publishing to {self.context.channel.path} "
            f"every {self.context.interval}s"
        )

    def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """
        Loop until the process is killed.

        Args:
            max_cycles: Stop after this many cycles (tests only)
        """
        self.start()
        while max_cycles is None or self._cycles < max_cycles:
            self.run_cycle()
            self._sleep(self.context.interval)


def dump_inventory(backend: BaseSensorBackend, stream: TextIO = sys.stdout) -> int:
    """
    Print every detected chip, feature label and readable subfeature value.

    Args:
        backend: Initialized sensor backend
        stream: Output stream

    Returns:
        Number of chips listed
    """
    count = 0
    for index, chip in enumerate(backend.enumerate_chips()):
        tracked = " [tracked]" if chip.family in FAMILIES else ""
        stream.write(f"{index} {chip.family} {chip.path}{tracked}\n")
        if chip.adapter:
            stream.write(f"  adapter={chip.adapter}\n")

        for feature in backend.enumerate_features(chip):
            label = backend.label(chip, feature)
            stream.write(f"    label={label if label is not None else '?'}\n")
            for sub in backend.enumerate_readable_subfeatures(chip, feature):
                value = backend.read_value(chip, sub)
                stream.write(f"        {sub.name}={value:f}\n")
        count += 1

    stream.write("\n")
    return count


def _install_signal_handlers(
    backend: BaseSensorBackend,
    channel: Optional[PublicationChannel],
    remove_on_exit: bool,
) -> None:
    def signal_handler(signum, frame):
        logger.info(f"Signal {signum} received, shutting down")
        backend.shutdown()
        if channel is not None and remove_on_exit:
            channel.remove()
        sys.exit(128 + signum)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sensorsmonitor",
        description="Publish amdgpu/k10temp sensor summaries through a named pipe"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dump",
        action="store_true",
        help="List detected chips, labels and values, then exit"
    )
    mode.add_argument(
        "--once",
        action="store_true",
        help="Print one rendered line to stdout instead of the pipe, then exit"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the sensors monitor."""
    args = _build_parser().parse_args(argv)

    backend: Optional[BaseSensorBackend] = None
    try:
        config = load_config(args.config)
        if args.verbose:
            config.setdefault("debug", {})["verbose"] = True
        setup_logging(config)

        backend = create_backend(config)

        if args.dump:
            backend.initialize()
            dump_inventory(backend, sys.stdout)
            return

        if args.once:
            backend.initialize()
            max_per_family = config.get("general", {}).get(
                "max_per_family", DEFAULT_MAX_PER_FAMILY
            )
            sys.stdout.write(render_snapshot(collect_snapshot(backend, max_per_family)))
            sys.stdout.flush()
            return

        context = build_context(config)
        remove_on_exit = config.get("channel", {}).get("remove_on_exit", False)
        _install_signal_handlers(backend, context.channel, remove_on_exit)

        backend.initialize()
        SensorsMonitor(context, backend).run_forever()

    except SensorsMonitorError as e:
        if not logging.getLogger("sensorsmonitor").handlers:
            setup_logging()
        logger.error(f"{e}, exiting {e.exit_code}")
        sys.exit(e.exit_code)
    finally:
        if backend is not None:
            backend.shutdown()


if __name__ == "__main__":
    main()
