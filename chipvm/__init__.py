"""CHIP-8 virtual CPU package."""

from chipvm.state import EmulatorState, Quirks, QUIRK_PRESETS, create_state, get_quirks, reset
from chipvm.emulator import (
    execute, fetch, step, run, run_frame, run_frames, load_program, load_rom,
    tick_timers, sound_active, set_key, set_keypad,
)
from chipvm.decode import DecodedInstruction, decode
from chipvm.errors import (
    EmulatorFault, LoadFault, DecodeFault, StackFault, StackOverflowFault,
    StackUnderflowFault, MemoryFault, raise_for_fault, clear_fault,
)
from chipvm.constants import *

__all__ = [
    "EmulatorState",
    "Quirks",
    "QUIRK_PRESETS",
    "create_state",
    "get_quirks",
    "reset",
    "fetch",
    "execute",
    "step",
    "run",
    "run_frame",
    "run_frames",
    "load_program",
    "load_rom",
    "tick_timers",
    "sound_active",
    "set_key",
    "set_keypad",
    "DecodedInstruction",
    "decode",
    "EmulatorFault",
    "LoadFault",
    "DecodeFault",
    "StackFault",
    "StackOverflowFault",
    "StackUnderflowFault",
    "MemoryFault",
    "raise_for_fault",
    "clear_fault",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
