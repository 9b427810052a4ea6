"""CHIP-8 architecture constants."""

import jax.numpy as jnp

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START
ADDRESS_MASK = 0xFFF

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
NUM_KEYS = 16
STACK_SIZE = 16

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8
MAX_SPRITE_HEIGHT = 15

FONT_START = 0x50
FONT_GLYPH_SIZE = 5
FONT_DATA = jnp.array([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
], dtype=jnp.uint8)

# Fault codes carried in EmulatorState.fault
FAULT_NONE = 0
FAULT_DECODE = 1
FAULT_STACK_OVERFLOW = 2
FAULT_STACK_UNDERFLOW = 3
FAULT_MEMORY = 4

__all__ = [
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "ADDRESS_MASK",
    "NUM_REGISTERS",
    "FLAG_REGISTER",
    "NUM_KEYS",
    "STACK_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "SPRITE_WIDTH",
    "MAX_SPRITE_HEIGHT",
    "FONT_START",
    "FONT_GLYPH_SIZE",
    "FONT_DATA",
    "FAULT_NONE",
    "FAULT_DECODE",
    "FAULT_STACK_OVERFLOW",
    "FAULT_STACK_UNDERFLOW",
    "FAULT_MEMORY",
]
