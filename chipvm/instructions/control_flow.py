"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction, build_dispatch_table
from chipvm.constants import FAULT_STACK_OVERFLOW
from chipvm.stack import push
from chipvm.instructions.system import raise_fault, execute_decode_fault


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    stack, overflow = push(state.stack, state.pc)
    state = execute_jump(state.replace(stack=stack), instruction)
    return raise_fault(state, overflow, FAULT_STACK_OVERFLOW)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions.

    The program counter already points past the skip instruction, so a taken
    skip only has to step over one more instruction.
    """
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


def require_zero_low_nibble(handler):
    """5XY0 and 9XY0 are only defined with a zero low nibble."""
    def checked_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        return jax.lax.cond(
            instruction.n == 0,
            handler,
            execute_decode_fault,
            state, instruction
        )
    return checked_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = require_zero_low_nibble(make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
))

execute_skip_if_not_equal_register = require_zero_low_nibble(make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
))


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0.

    The target is not masked to 12 bits; a target past the end of memory
    faults on the next fetch.
    """
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[0], jnp.uint16)
    return state.replace(pc=jump_address)


def execute_jump_with_register_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BXNN - Jump to address XNN + VX (SUPER-CHIP behavior)."""
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(pc=jump_address)


def _key_pressed(state: EmulatorState, instruction: DecodedInstruction):
    return state.keypad[state.V[instruction.x] & 0xF]


execute_skip_if_key = make_skip_instruction(_key_pressed)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~_key_pressed(state, inst)
)


KEY_OPERATIONS = {
    0x9E: execute_skip_if_key,
    0xA1: execute_skip_if_not_key,
}
_KEY_TABLE = build_dispatch_table(256, KEY_OPERATIONS)


def execute_key_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    return jax.lax.switch(
        _KEY_TABLE[instruction.nn],
        [*KEY_OPERATIONS.values(), execute_decode_fault],
        state, instruction
    )
