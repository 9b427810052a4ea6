"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX. Wraps modulo 256 and leaves VF alone."""
    total = jnp.astype(state.V[instruction.x], jnp.uint16) + instruction.nn
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(total & 0xFF, jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.bits(subkey, shape=(), dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(random_value & jnp.astype(instruction.nn, jnp.uint8)), rng=key)
