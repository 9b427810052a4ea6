"""Tests for console logging and progress bars."""

import io

import jax
import jax.numpy as jnp
import pytest
from chipvm.logging import SessionLogger, scan_with_progress


def test_session_logger_filters_by_level():
    stream = io.StringIO()
    logger = SessionLogger(log_level="error", show_timestamps=False, stream=stream)

    logger.debug("hidden debug")
    logger.info("hidden info")
    logger.error("shown")

    out = stream.getvalue()
    assert "hidden" not in out
    assert out == "[  ERROR] shown\n"


def test_session_logger_debug_level_shows_everything():
    stream = io.StringIO()
    logger = SessionLogger(log_level="DEBUG", show_timestamps=False, stream=stream)

    logger.debug("a")
    logger.info("b")

    assert stream.getvalue() == "[  DEBUG] a\n[   INFO] b\n"


def test_session_logger_no_colors_off_terminal():
    stream = io.StringIO()
    logger = SessionLogger(use_colors=True, stream=stream)

    logger.info("plain")

    assert logger.use_colors is False
    assert "\033[" not in stream.getvalue()


def test_session_logger_rejects_unknown_level():
    with pytest.raises(ValueError):
        SessionLogger(log_level="LOUD")


def test_session_logger(capsys):
    logger = SessionLogger(use_colors=False, show_timestamps=False)

    logger.log_session_start({"frames": 10})
    logger.log_fault(ValueError("boom"))
    logger.log_session_end({"pc": "0x200"})

    out = capsys.readouterr().out
    assert "frames: 10" in out
    assert "ValueError: boom" in out
    assert "pc: 0x200" in out


def test_scan_with_progress_keeps_result():
    @scan_with_progress(7, print_rate=3, disable=True)
    def body(carry, x):
        return carry + x, None

    total, _ = jax.lax.scan(body, jnp.zeros((), dtype=jnp.int32), jnp.arange(7))

    assert total == 21
