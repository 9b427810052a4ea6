"""CHIP-8 ALU operations (8xxx).

Every operation receives both operands before anything is written and
returns ``(result, flag, writes_flag)``. The result goes to VX first and the
flag to VF last, so ``8FY4`` and friends leave the flag in VF.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction, build_dispatch_table
from chipvm.constants import FLAG_REGISTER
from chipvm.instructions.system import execute_decode_fault

_NO_FLAG = jnp.zeros((), dtype=jnp.uint8)


def _flag(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint8)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, _NO_FLAG, False


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, _NO_FLAG, False


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, _NO_FLAG, False


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, _NO_FLAG, False


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = _flag(result > 255)
    return jnp.astype(result & 0xFF, jnp.uint8), carry, True


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    no_borrow = _flag(vx >= vy)
    result = (vx - vy) & 0xFF
    return result, no_borrow, True


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = shifted-out bit."""
    shifted_bit = vx & 1
    result = vx >> 1
    return result, shifted_bit, True


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    no_borrow = _flag(vy >= vx)
    result = (vy - vx) & 0xFF
    return result, no_borrow, True


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = shifted-out bit."""
    shifted_bit = (vx & 0x80) >> 7
    result = (vx << 1) & 0xFF
    return result, shifted_bit, True


ALU_OPERATIONS = {
    0x0: alu_set,
    0x1: alu_or,
    0x2: alu_and,
    0x3: alu_xor,
    0x4: alu_add,
    0x5: alu_sub_xy,
    0x6: alu_shift_right,
    0x7: alu_sub_yx,
    0xE: alu_shift_left,
}
_ALU_TABLE = build_dispatch_table(16, ALU_OPERATIONS)
_LOGIC_OPERATIONS = (0x1, 0x2, 0x3)


def _make_alu_handler(code: int, operation):
    def handler(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if state.quirks.shift_uses_vy and operation in (alu_shift_right, alu_shift_left):
            vx = vy

        result, vf, writes_flag = operation(vx, vy)
        if state.quirks.logic_resets_vf and code in _LOGIC_OPERATIONS:
            vf, writes_flag = _NO_FLAG, True

        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if writes_flag:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
        return state.replace(V=new_V)

    handler.__doc__ = operation.__doc__
    return handler


_ALU_HANDLERS = [_make_alu_handler(code, op) for code, op in ALU_OPERATIONS.items()]


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    return jax.lax.switch(
        _ALU_TABLE[instruction.n],
        [*_ALU_HANDLERS, execute_decode_fault],
        state, instruction
    )
