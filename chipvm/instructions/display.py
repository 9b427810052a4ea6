"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT, ADDRESS_MASK,
    MEMORY_SIZE, FLAG_REGISTER, FAULT_MEMORY,
)
from chipvm.instructions.system import raise_fault

# Pre-computed sprite cell offsets, rows along axis 0 and columns along axis 1
rows = jnp.arange(MAX_SPRITE_HEIGHT)[:, None]
cols = jnp.arange(SPRITE_WIDTH)[None, :]


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Each sprite row wraps around the right edge on its own row and rows wrap
    around the bottom edge, unless the ``clip_sprites`` quirk is set. VF is
    set when any lit pixel gets switched off.
    """
    sprite_x = jnp.astype(state.V[instruction.x] % SCREEN_WIDTH, jnp.int32)
    sprite_y = jnp.astype(state.V[instruction.y] % SCREEN_HEIGHT, jnp.int32)
    base = jnp.astype(state.I & ADDRESS_MASK, jnp.int32)

    sprite_bytes = state.memory.at[base + rows[:, 0]].get(mode="clip")
    bits = (jnp.astype(sprite_bytes[:, None], jnp.int32) >> (7 - cols)) & 1

    px = sprite_x + cols
    py = sprite_y + rows
    visible = rows < instruction.n
    if state.quirks.clip_sprites:
        visible = visible & (px < SCREEN_WIDTH) & (py < SCREEN_HEIGHT)

    sprite = jnp.zeros_like(state.display).at[px % SCREEN_WIDTH, py % SCREEN_HEIGHT].set(
        (bits == 1) & visible
    )
    collision = jnp.any(state.display & sprite)

    state = state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
    return raise_fault(state, base + instruction.n > MEMORY_SIZE, FAULT_MEMORY)
