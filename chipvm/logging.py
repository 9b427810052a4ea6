"""Console logging utilities for chipvm sessions.

Provides a levelled session logger for emulation runs and real-time tqdm
progress bars for JAX scans using io_callback.
"""

import time
import sys
from typing import Any, Dict, Optional, Callable, Tuple

import jax
from jax.experimental import io_callback

from tqdm import tqdm

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


class SessionLogger:
    """Console logger for a headless emulation session.

    Each line is ``[elapsed][LEVEL] message``. Messages below ``log_level`` are
    dropped. Colours are only used when ``stream`` is a terminal.
    """

    def __init__(
        self,
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        level = log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {log_level!r}, expected one of {LOG_LEVELS}")
        self.threshold = LOG_LEVELS.index(level)
        self.stream = sys.stdout if stream is None else stream
        self.use_colors = use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def _emit(self, level: str, message: str):
        if LOG_LEVELS.index(level) < self.threshold:
            return
        tag = f"[{level:>7s}]"
        if self.use_colors:
            tag = f"{_LEVEL_COLORS[level]}{tag}{_RESET}"
        stamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{stamp}{tag} {message}", file=self.stream, flush=True)

    def debug(self, message: str):
        self._emit("DEBUG", message)

    def info(self, message: str):
        self._emit("INFO", message)

    def error(self, message: str):
        self._emit("ERROR", message)

    def log_session_start(self, config: Dict[str, Any]):
        """Log session configuration."""
        self.info("=" * 60)
        self.info("Starting emulation with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_fault(self, error: Exception):
        """Log a fault that stopped the session."""
        self.error(f"{type(error).__name__}: {error}")

    def log_session_end(self, summary: Dict[str, Any]):
        """Log the final machine summary."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Emulation finished in {elapsed:.1f}s")
        for key, value in summary.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build real-time tqdm progress bar for JAX computations."""
    if desc is None:
        desc = f"Emulating ({n:,} steps)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    remainder = n % print_rate

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="step", **kwargs)

    def _update_tqdm(steps):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(steps))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda: io_callback(_define_tqdm, None, ordered=True),
            lambda: None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            (iter_num + 1) % print_rate == 0,
            lambda: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda: None,
        )

        if remainder:
            _ = jax.lax.cond(
                iter_num == n - 1,
                lambda: io_callback(_update_tqdm, None, remainder, ordered=True),
                lambda: None,
            )

        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda: io_callback(_close_tqdm, None, ordered=True),
            lambda: None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator to add real-time progress bar to JAX scan operations."""
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            if isinstance(x, tuple):
                iter_num = x[0]
            else:
                iter_num = x

            _update_progress_bar(iter_num)

            result = func(carry, x)

            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
