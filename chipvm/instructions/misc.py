"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction, build_dispatch_table
from chipvm.constants import (
    FONT_START, FONT_GLYPH_SIZE, ADDRESS_MASK, MEMORY_SIZE, NUM_REGISTERS, FAULT_MEMORY,
)
from chipvm.instructions.system import raise_fault, execute_decode_fault

register_indices = jnp.arange(NUM_REGISTERS)


def _index_base(state: EmulatorState) -> jnp.ndarray:
    """Address held in I, masked to the 12-bit address space."""
    return jnp.astype(state.I & ADDRESS_MASK, jnp.int32)


def _span_out_of_bounds(base: jnp.ndarray, length) -> jnp.ndarray:
    return base + length > MEMORY_SIZE


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register. No 12-bit masking and no flag."""
    new_i = state.I + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Only a key that went down since the previous step counts. While none has,
    the program counter is rewound so this instruction runs again.
    """
    newly_pressed = state.keypad & ~state.previous_keypad

    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(newly_pressed), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(newly_pressed), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]
    base = _index_base(state)

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + base
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    state = state.replace(memory=new_memory)
    return raise_fault(state, _span_out_of_bounds(base, 3), FAULT_MEMORY)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    base = _index_base(state)
    register_mask = register_indices <= instruction.x
    base_indices = base + register_indices
    current_memory_values = state.memory.at[base_indices].get(mode="clip")
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values, mode="drop")

    if state.quirks.load_store_increments_index:
        state = state.replace(memory=new_memory, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))
    else:
        state = state.replace(memory=new_memory)
    return raise_fault(state, _span_out_of_bounds(base, instruction.x + 1), FAULT_MEMORY)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    base = _index_base(state)
    register_mask = register_indices <= instruction.x
    memory_values = state.memory.at[base + register_indices].get(mode="clip")
    new_V = jnp.where(register_mask, memory_values, state.V)

    if state.quirks.load_store_increments_index:
        state = state.replace(V=new_V, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))
    else:
        state = state.replace(V=new_V)
    return raise_fault(state, _span_out_of_bounds(base, instruction.x + 1), FAULT_MEMORY)


MISC_OPERATIONS = {
    0x07: execute_get_delay_timer,
    0x0A: execute_wait_for_key,
    0x15: execute_set_delay_timer,
    0x18: execute_set_sound_timer,
    0x1E: execute_add_to_index,
    0x29: execute_font_character,
    0x33: execute_bcd_conversion,
    0x55: execute_store_registers,
    0x65: execute_load_registers,
}
_MISC_TABLE = build_dispatch_table(256, MISC_OPERATIONS)


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions through the FXNN lookup table."""
    return jax.lax.switch(
        _MISC_TABLE[instruction.nn],
        [
            *MISC_OPERATIONS.values(),
            execute_decode_fault,
        ],
        state, instruction
    )
