"""Console logging utilities for CHIP-8 hosts.

The jitted core never logs; hosts and the command line report ROM loads,
faults and run summaries through these loggers. Long headless runs get a
tqdm progress bar through :func:`progress`.
"""

import sys
import time
from typing import Iterable, Optional

from tqdm import tqdm

from chip8core.errors import Fault, describe_fault


class ConsoleLogger:
    """Levelled console logger with optional colours and elapsed-time prefix."""

    def __init__(
        self,
        name: str = "chip8core",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
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
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }
        if self.log_level not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order.keys())}"
            )

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

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
    """Logger with helpers for emulator lifecycle events."""

    def __init__(self, name: str = "chip8core", **kwargs):
        super().__init__(name, **kwargs)
        self.fault_counts = {fault: 0 for fault in Fault if fault != Fault.NONE}

    def log_rom_loaded(self, source: str, size: int):
        self.info(f"Loaded ROM {source} ({size} bytes)")

    def log_reset(self, seed: int):
        self.info(f"Machine reset (seed={seed})")

    def log_fault(self, fault: int, pc: int, instruction: int, policy: str):
        """Log a program fault and the action the host takes."""
        fault = Fault(fault)
        self.fault_counts[fault] += 1
        message = f"{describe_fault(fault, pc, instruction)} -> {policy}"
        if policy == "halt":
            self.error(message)
        else:
            self.warning(message)

    def log_run_summary(self, instructions: int, frames: int, elapsed: Optional[float] = None):
        """Log totals for a finished run."""
        if elapsed is None:
            elapsed = time.time() - self.start_time
        rate = instructions / elapsed if elapsed > 0 else 0.0
        self.info("=" * 60)
        self.info(f"Executed {instructions} instructions over {frames} frames in {elapsed:.2f}s ({rate:.0f} Hz)")
        faults = {fault.name: count for fault, count in self.fault_counts.items() if count}
        if faults:
            self.info(f"Faults: {faults}")
        self.info("=" * 60)


def progress(iterable: Iterable, desc: str = "Running", enabled: bool = True, **kwargs) -> Iterable:
    """Wrap ``iterable`` in a tqdm progress bar when enabled."""
    if not enabled:
        return iterable
    return tqdm(iterable, desc=desc, unit="frame", **kwargs)
