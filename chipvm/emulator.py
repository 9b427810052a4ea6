"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Iterable, Union

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chipvm.state import EmulatorState
from chipvm.decode import decode
from chipvm.constants import (
    PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, NUM_KEYS, FAULT_NONE, FAULT_MEMORY,
)
from chipvm.errors import LoadFault
from chipvm.instructions.system import execute_system_instruction
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_jump_with_register_offset, execute_key_instruction
)
from chipvm.instructions.alu import execute_alu_operation
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import execute_misc_instruction
from chipvm.logging import scan_with_progress


def _commit(state: EmulatorState, result: EmulatorState, instruction) -> EmulatorState:
    """Keep ``result`` unless it carries a fault; a fault leaves ``state`` untouched."""
    already_faulted = state.fault != FAULT_NONE
    fault = jnp.where(already_faulted, state.fault, result.fault)
    fault_opcode = jnp.where(already_faulted, state.fault_opcode, jnp.astype(instruction, jnp.uint16))
    return jax.lax.cond(
        result.fault != FAULT_NONE,
        lambda: state.replace(fault=fault, fault_opcode=fault_opcode),
        lambda: result,
    )


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``state.pc`` is expected to already point past the instruction, as left by
    :func:`fetch`. A state that already carries a fault is returned unchanged,
    since the earlier fault code and opcode are kept over any new result.
    """
    decoded_instruction = decode(instruction)

    result = jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_register_offset if state.quirks.jump_uses_vx else execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_key_instruction,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )
    return _commit(state, result, instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def _halted(state: EmulatorState) -> EmulatorState:
    return state


def _fetch_out_of_bounds(state: EmulatorState) -> EmulatorState:
    return state.replace(fault=jnp.uint8(FAULT_MEMORY), fault_opcode=jnp.zeros((), dtype=jnp.uint16))


def _cycle(state: EmulatorState) -> EmulatorState:
    fetched, instruction = fetch(state)
    executed = execute(fetched, instruction)
    return jax.lax.cond(
        executed.fault != FAULT_NONE,
        lambda: state.replace(fault=executed.fault, fault_opcode=executed.fault_opcode),
        lambda: executed.replace(previous_keypad=executed.keypad),
    )


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle.

    A faulted state is returned as is until the fault is cleared. When the
    cycle faults, the returned state is the input state with the fault fields
    set, so ``pc`` still addresses the offending instruction.
    """
    pc_in_range = state.pc <= MEMORY_SIZE - 2
    branch = jnp.where(state.fault != FAULT_NONE, 0, jnp.where(pc_in_range, 2, 1))
    return jax.lax.switch(branch, [_halted, _fetch_out_of_bounds, _cycle], state)


def _run_instruction(state, _):
    state = step(state)
    return state, None


@partial(jax.jit, static_argnames=("num_instructions",))
def run(state: EmulatorState, num_instructions: int) -> EmulatorState:
    """Execute ``num_instructions`` steps; a fault halts the machine early."""
    state, _ = jax.lax.scan(_run_instruction, state, length=num_instructions)
    return state


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers toward zero (one 60 Hz tick)."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether the buzzer should currently sound."""
    return state.sound_timer > 0


def run_frame(state: EmulatorState, instructions_per_frame: int) -> EmulatorState:
    """Run one display frame: a batch of instructions followed by a timer tick."""
    state = run(state, instructions_per_frame)
    return tick_timers(state)


@partial(jax.jit, static_argnames=("num_frames", "instructions_per_frame", "progress"))
def run_frames(
    state: EmulatorState,
    num_frames: int,
    instructions_per_frame: int,
    progress: bool = False,
) -> EmulatorState:
    """Run ``num_frames`` frames inside a single scan."""
    def frame(state, _):
        return run_frame(state, instructions_per_frame), None

    if progress:
        frame = scan_with_progress(num_frames, desc=f"Emulating ({num_frames:,} frames)")(frame)

    state, _ = jax.lax.scan(frame, state, jnp.arange(num_frames))
    return state


def set_key(state: EmulatorState, key: int, pressed: bool) -> EmulatorState:
    """Latch a single keypad key."""
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be in [0, {NUM_KEYS}), got {key}")
    return state.replace(keypad=state.keypad.at[key].set(pressed))


def set_keypad(state: EmulatorState, keys: Union[Iterable[bool], jnp.ndarray]) -> EmulatorState:
    """Replace the whole keypad latch."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Keypad must have shape ({NUM_KEYS},), got {keypad.shape}")
    return state.replace(keypad=keypad)


def load_program(state: EmulatorState, data: bytes) -> EmulatorState:
    """Copy a raw program image into memory starting at 0x200."""
    if len(data) > MAX_PROGRAM_SIZE:
        raise LoadFault(
            f"Program image is {len(data)} bytes; at most {MAX_PROGRAM_SIZE} bytes fit "
            f"between 0x{PROGRAM_START:03X} and the end of memory"
        )
    rom_array = jnp.asarray(np.frombuffer(bytes(data), dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
