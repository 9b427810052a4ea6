"""CHIP-8 fault reporting.

Handlers run under ``jax.jit`` and cannot raise, so a fault travels inside the
state as a ``FAULT_*`` code. :func:`raise_for_fault` converts it into one of
the exceptions below once control is back on the host.
"""

import jax.numpy as jnp

from chipvm.constants import (
    FAULT_NONE, FAULT_DECODE, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW, FAULT_MEMORY,
)


class EmulatorFault(Exception):
    """Base class for every emulator fault."""

    def __init__(self, message: str, pc: int = None, opcode: int = None):
        super().__init__(message)
        self.pc = pc
        self.opcode = opcode


class LoadFault(EmulatorFault):
    """Program image does not fit in memory."""


class DecodeFault(EmulatorFault):
    """Opcode word does not name any instruction."""


class StackFault(EmulatorFault):
    """Call stack misuse."""


class StackOverflowFault(StackFault):
    """Call with a full stack."""


class StackUnderflowFault(StackFault):
    """Return with an empty stack."""


class MemoryFault(EmulatorFault):
    """Instruction fetch or index-relative access outside memory."""


FAULT_EXCEPTIONS = {
    FAULT_DECODE: (DecodeFault, "unknown opcode"),
    FAULT_STACK_OVERFLOW: (StackOverflowFault, "call with full stack"),
    FAULT_STACK_UNDERFLOW: (StackUnderflowFault, "return with empty stack"),
    FAULT_MEMORY: (MemoryFault, "memory access out of bounds"),
}


def raise_for_fault(state) -> None:
    """Raise the exception matching ``state.fault``, if any."""
    code = int(state.fault)
    if code == FAULT_NONE:
        return

    pc = int(state.pc)
    opcode = int(state.fault_opcode)
    exception_class, description = FAULT_EXCEPTIONS.get(code, (EmulatorFault, f"fault code {code}"))
    raise exception_class(
        f"{description} (opcode 0x{opcode:04X} at pc 0x{pc:03X})", pc=pc, opcode=opcode
    )


def clear_fault(state):
    """Clear the fault so the machine can be stepped again."""
    return state.replace(
        fault=jnp.asarray(FAULT_NONE, dtype=jnp.uint8),
        fault_opcode=jnp.zeros((), dtype=jnp.uint16),
    )
