"""Console logging for emulator runs.

A small levelled console logger plus an emulator-specific subclass that turns
the per-step ``StepSignals`` coming out of ``run_frame`` into readable reports.
"""

import sys
import time
from collections import Counter
from typing import Any, Dict, Optional, TextIO

import numpy as np

from chipjax.decode import describe
from chipjax.signals import Status, StepSignals
from chipjax.state import Quirks


class ConsoleLogger:
    """Levelled console logger with optional colours and elapsed-time stamps."""

    LEVELS = {"DEBUG": 0, "INFO": 1, "WARNING": 2, "ERROR": 3, "CRITICAL": 4}

    def __init__(
        self,
        name: str = "chipjax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream: Optional[TextIO] = None,
    ):
        if log_level.upper() not in self.LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(self.LEVELS)}")
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream
        out = stream if stream is not None else sys.stdout
        self.use_colors = use_colors and hasattr(out, "isatty") and out.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {k: "" for k in [*self.LEVELS, "RESET"]}
        )

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.LEVELS.get(level.upper(), 1) >= self.LEVELS[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            level_str = f"{color}{level_str}{self.colors['RESET']}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            print(self._format_message(level, message), file=self.stream or sys.stdout, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger that reports interpreter anomalies and optional instruction traces.

    Each distinct (status, opcode) anomaly is reported once at WARNING/ERROR;
    repeats drop to DEBUG so a ROM spinning on a bad instruction does not
    flood the console. All occurrences are counted for the end-of-run summary.
    """

    _SEVERITY = {
        Status.UNKNOWN_OPCODE: "WARNING",
        Status.STACK_OVERFLOW: "ERROR",
        Status.STACK_UNDERFLOW: "ERROR",
    }

    def __init__(self, name: str = "chipjax", quirks: Quirks = Quirks(), **kwargs):
        super().__init__(name, **kwargs)
        self.quirks = quirks
        self.anomaly_counts = Counter()
        self.steps = 0
        self._reported = set()
        self._halted = False

    def log_run_start(self, config: Dict[str, Any]):
        """Log run configuration."""
        self.info("=" * 60)
        self.info("Starting emulator with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_signals(self, signals: StepSignals) -> int:
        """Report anomalies in a single step or in signals stacked by ``run_frame``.

        Returns the number of anomalous steps seen (HALTED excluded).
        """
        statuses = np.ravel(np.asarray(signals.status))
        opcodes = np.ravel(np.asarray(signals.opcode))
        self.steps += int(np.sum(statuses != Status.HALTED))
        anomalies = 0

        for status, opcode in zip(statuses, opcodes):
            status = Status(int(status))
            if status == Status.OK:
                continue
            if status == Status.HALTED:
                if not self._halted:
                    self._halted = True
                    self.info("Program counter left memory; machine halted")
                continue

            anomalies += 1
            self.anomaly_counts[status.name] += 1
            key = (status, int(opcode))
            message = f"{status.name}: 0x{int(opcode):04X} ({describe(opcode, self.quirks.jump_uses_vx)})"
            if key in self._reported:
                self.debug(message)
            else:
                self._reported.add(key)
                self.log(self._SEVERITY[status], message)

        return anomalies

    def log_trace(self, signals: StepSignals):
        """Log the mnemonic of every executed step at DEBUG."""
        if not self._should_log("DEBUG"):
            return
        statuses = np.ravel(np.asarray(signals.status))
        opcodes = np.ravel(np.asarray(signals.opcode))
        for status, opcode in zip(statuses, opcodes):
            if int(status) != Status.HALTED:
                self.debug(f"0x{int(opcode):04X}  {describe(opcode, self.quirks.jump_uses_vx)}")

    def log_run_end(self, frames: int):
        """Log end-of-run summary."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Ran {frames} frames, {self.steps} instructions in {elapsed:.1f}s")
        if self.anomaly_counts:
            self.info("Anomalies:")
            for name, count in sorted(self.anomaly_counts.items()):
                self.info(f"  {name}: {count}")
        self.info("=" * 60)
