"""CHIP-8 emulator state structures."""

import time
from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipvm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
    MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS, FAULT_NONE,
)


@dataclass(frozen=True)
class Quirks:
    """Behaviour switches for instructions that differ between historical interpreters.

    The defaults follow the classic instruction table: shifts operate on VX,
    FX55/FX65 leave I untouched, BNNN jumps relative to V0, logic operations
    keep VF and sprites wrap around both screen edges.
    """
    shift_uses_vy: bool = False
    load_store_increments_index: bool = False
    jump_uses_vx: bool = False
    logic_resets_vf: bool = False
    clip_sprites: bool = False


QUIRK_PRESETS = {
    "default": Quirks(),
    "cosmac": Quirks(
        shift_uses_vy=True,
        load_store_increments_index=True,
        logic_resets_vf=True,
        clip_sprites=True,
    ),
    "schip": Quirks(jump_uses_vx=True, clip_sprites=True),
}


def get_quirks(name: str) -> Quirks:
    """Look up a named quirk preset."""
    try:
        return QUIRK_PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown quirk preset '{name}'. Available presets: {sorted(QUIRK_PRESETS)}"
        ) from None


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``display`` is indexed ``[x, y]``. ``previous_keypad`` is the keypad as it
    was at the end of the last completed step and is what FX0A compares
    against to detect a fresh key press. ``fault`` holds one of the
    ``FAULT_*`` codes and ``fault_opcode`` the opcode word that raised it.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    previous_keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.asarray(FAULT_NONE, dtype=jnp.uint8))
    fault_opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    quirks: Quirks = field(pytree_node=False, default=Quirks())


def time_seeded_key() -> jax.Array:
    """PRNG key seeded from the wall clock."""
    return jax.random.PRNGKey(time.time_ns() % (2 ** 31))


def create_state(rng: Optional[jax.Array] = None, quirks: Optional[Quirks] = None) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = time_seeded_key()
    state = EmulatorState(rng, quirks=quirks if quirks is not None else Quirks())
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def reset(state: EmulatorState, rng: Optional[jax.Array] = None) -> EmulatorState:
    """Return a power-on state with the same quirks and a reseeded random source.

    Memory is cleared too, so the program image has to be loaded again.
    """
    return create_state(rng, quirks=state.quirks)
