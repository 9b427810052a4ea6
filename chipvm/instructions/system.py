"""CHIP-8 system instructions (0x0xxx) and fault signalling."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction, build_dispatch_table
from chipvm.constants import FAULT_DECODE, FAULT_STACK_UNDERFLOW
from chipvm.stack import pop


def raise_fault(state: EmulatorState, condition, code: int) -> EmulatorState:
    """Record fault ``code`` when ``condition`` holds.

    The interpreter discards every other change a faulting handler made, so
    handlers may compute their result unconditionally and flag it afterwards.
    """
    return state.replace(fault=jnp.where(condition, jnp.uint8(code), state.fault))


def execute_decode_fault(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unassigned opcode."""
    return raise_fault(state, True, FAULT_DECODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    state = state.replace(stack=stack, pc=address)
    return raise_fault(state, underflow, FAULT_STACK_UNDERFLOW)


SYSTEM_OPERATIONS = {
    0xE0: execute_clear_screen,
    0xEE: execute_return,
}
_SYSTEM_TABLE = build_dispatch_table(256, SYSTEM_OPERATIONS)
_DECODE_FAULT_INDEX = len(SYSTEM_OPERATIONS)


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions.

    Only 00E0 and 00EE exist; machine-code calls (0NNN) are not supported.
    """
    index = jnp.where(instruction.x == 0, _SYSTEM_TABLE[instruction.nn], _DECODE_FAULT_INDEX)
    return jax.lax.switch(
        index,
        [*SYSTEM_OPERATIONS.values(), execute_decode_fault],
        state, instruction
    )
