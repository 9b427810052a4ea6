"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax
import jax.numpy as jnp
from chipvm import create_state, get_quirks, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state(jax.random.PRNGKey(0))


@pytest.fixture
def cosmac_state():
    """Provide a fresh state with COSMAC VIP quirks."""
    return create_state(jax.random.PRNGKey(0), quirks=get_quirks("cosmac"))


@pytest.fixture
def schip_state():
    """Provide a fresh state with SUPER-CHIP quirks."""
    return create_state(jax.random.PRNGKey(0), quirks=get_quirks("schip"))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def with_program(state, instructions):
    """Helper to load a list of 16-bit opcode words at 0x200."""
    data = b"".join(word.to_bytes(2, "big") for word in instructions)
    return load_program(state, data)
