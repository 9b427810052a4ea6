"""Headless command line runner."""

import argparse
import sys

import jax
import jax.numpy as jnp

from chipvm.state import QUIRK_PRESETS, create_state, get_quirks
from chipvm.emulator import load_rom, run_frames
from chipvm.errors import EmulatorFault, LoadFault, raise_for_fault
from chipvm.logging import LOG_LEVELS, SessionLogger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chipvm",
        description="Run a CHIP-8 program image without a display and report the final machine state.",
    )
    parser.add_argument("rom", help="Path to the raw program image")
    parser.add_argument("--frames", type=int, default=60, help="Number of 60 Hz frames to run")
    parser.add_argument(
        "--instructions-per-frame", type=int, default=700 // 60,
        help="Instructions executed between timer ticks (700 Hz CPU by default)",
    )
    parser.add_argument("--quirks", choices=sorted(QUIRK_PRESETS), default="default")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (time based if omitted)")
    parser.add_argument("--log-level", default="INFO", choices=LOG_LEVELS)
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    return parser


def summarize(state) -> dict:
    """Host-side summary of the machine state."""
    return {
        "pc": f"0x{int(state.pc):03X}",
        "I": f"0x{int(state.I):03X}",
        "V": " ".join(f"{int(v):02X}" for v in state.V),
        "stack_depth": int(state.stack.pointer),
        "delay_timer": int(state.delay_timer),
        "sound_timer": int(state.sound_timer),
        "lit_pixels": int(jnp.sum(state.display)),
    }


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = SessionLogger(log_level=args.log_level)

    rng = jax.random.PRNGKey(args.seed) if args.seed is not None else None
    state = create_state(rng, quirks=get_quirks(args.quirks))

    try:
        state = load_rom(state, args.rom)
    except LoadFault as error:
        logger.log_fault(error)
        return 2
    logger.debug(f"Quirks: {state.quirks}")

    logger.log_session_start({
        "rom": args.rom,
        "frames": args.frames,
        "instructions_per_frame": args.instructions_per_frame,
        "quirks": args.quirks,
    })

    state = run_frames(state, args.frames, args.instructions_per_frame, args.progress)
    logger.log_session_end(summarize(state))

    try:
        raise_for_fault(state)
    except EmulatorFault as error:
        logger.log_fault(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
