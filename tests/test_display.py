"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
import pytest
from chipvm import execute, FAULT_MEMORY
from conftest import setup_sprite_in_memory


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        sprite = [0xC0, 0xC0]  # 2x2 box
        state = setup_sprite_in_memory(fresh_state, 0x300, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6105)  # V1 = 5
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xD012)

        assert state.display[10, 5] == 1
        assert state.display[11, 5] == 1
        assert state.display[10, 6] == 1
        assert state.display[11, 6] == 1
        assert state.display[12, 5] == 0
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 0

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])

        state = execute(state, 0x6014)  # V0 = 20
        state = execute(state, 0x610A)  # V1 = 10
        state = execute(state, 0xA400)

        state = execute(state, 0xD011)
        assert state.display[20, 10] == 1
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert state.display[20, 10] == 0
        assert state.V[15] == 1

    def test_xor_behavior(self, fresh_state):
        """Drawing the same sprite twice erases it."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xF0, 0x99])

        state = execute(state, 0x6008)  # V0 = 8
        state = execute(state, 0x610F)  # V1 = 15
        state = execute(state, 0xA500)

        state = execute(state, 0xD012)
        assert jnp.sum(state.display) == 8
        assert state.V[15] == 0

        state = execute(state, 0xD012)
        assert jnp.sum(state.display) == 0
        assert state.V[15] == 1

    def test_partial_overlap(self, fresh_state):
        """Only overlapping pixels are cleared."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xC0])
        state = execute(state, 0xA500)
        state = execute(state, 0xD011)  # pixels (0,0) (1,0)

        state = execute(state, 0x6001)  # V0 = 1
        state = execute(state, 0xD011)  # pixels (1,0) (2,0)

        assert state.display[0, 0] == 1
        assert state.display[1, 0] == 0
        assert state.display[2, 0] == 1
        assert state.V[15] == 1


class TestScreenBoundaries:
    """Test sprite wrapping and clipping."""

    def test_row_wraps_horizontally(self, fresh_state):
        """Pixels past the right edge wrap to the left of the same row."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])

        state = execute(state, 0x603C)  # V0 = 60
        state = execute(state, 0x6103)  # V1 = 3
        state = execute(state, 0xA600)
        state = execute(state, 0xD011)

        for x in (60, 61, 62, 63, 0, 1, 2, 3):
            assert state.display[x, 3] == 1, f"pixel {x} not drawn"
        assert jnp.sum(state.display[:, 4]) == 0
        assert jnp.sum(state.display) == 8

    def test_rows_wrap_vertically(self, fresh_state):
        """Rows past the bottom edge wrap to the top."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])

        state = execute(state, 0x6000)  # V0 = 0
        state = execute(state, 0x611E)  # V1 = 30
        state = execute(state, 0xA700)
        state = execute(state, 0xD013)

        assert state.display[0, 30] == 1
        assert state.display[0, 31] == 1
        assert state.display[0, 0] == 1

    def test_clipping_quirk(self, cosmac_state):
        """With clip_sprites, off-screen pixels are dropped."""
        state = setup_sprite_in_memory(cosmac_state, 0x600, [0xFF, 0xFF])

        state = execute(state, 0x603C)  # V0 = 60
        state = execute(state, 0x611F)  # V1 = 31
        state = execute(state, 0xA600)
        state = execute(state, 0xD012)

        assert jnp.sum(state.display) == 4
        assert state.display[63, 31] == 1
        assert state.display[0, 31] == 0
        assert state.display[60, 0] == 0

    def test_coordinate_wrapping(self, fresh_state):
        """Start coordinates are taken modulo the screen size."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0x80])

        state = execute(state, 0x6046)  # V0 = 70 (70 % 64 = 6)
        state = execute(state, 0x6125)  # V1 = 37 (37 % 32 = 5)
        state = execute(state, 0xA800)
        state = execute(state, 0xD011)

        assert state.display[6, 5] == 1


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are drawn."""
        sprite = [0x80, 0x40, 0x20, 0x10, 0x08]
        state = setup_sprite_in_memory(fresh_state, 0x900, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6108)  # V1 = 8
        state = execute(state, 0xA900)
        state = execute(state, 0xD013)

        assert state.display[10, 8] == 1
        assert state.display[11, 9] == 1
        assert state.display[12, 10] == 1
        assert state.display[13, 11] == 0

    def test_font_glyph(self, fresh_state):
        """The built-in 0 glyph draws a 4x5 outline."""
        state = execute(fresh_state, 0xF029)  # I = glyph for V0 = 0
        state = execute(state, 0xD005)

        assert jnp.sum(state.display) == 14
        assert state.display[1, 1] == 0

    def test_vf_cleared_without_collision(self, fresh_state):
        """VF is cleared when nothing collides."""
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])

        state = execute(state, 0x6F01)  # VF = 1
        state = execute(state, 0x6005)
        state = execute(state, 0x6105)
        state = execute(state, 0xAB00)
        state = execute(state, 0xD011)

        assert state.V[15] == 0


class TestSpriteBounds:
    """Sprite reads outside memory fault."""

    def test_sprite_read_past_memory_faults(self, fresh_state):
        state = execute(fresh_state, 0xAFFE)  # I = 0xFFE
        before = state

        state = execute(state, 0xD013)  # needs 0xFFE..0x1000

        assert state.fault == FAULT_MEMORY
        assert state.fault_opcode == 0xD013
        assert (state.display == before.display).all()
        assert (state.V == before.V).all()

    def test_sprite_read_at_end_of_memory(self, fresh_state):
        state = execute(fresh_state, 0xAFFE)
        state = execute(state, 0xD012)  # 0xFFE..0xFFF fits
        assert state.fault == 0

    def test_sprite_base_masked_to_12_bits(self, fresh_state):
        """I is masked before the sprite is read."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])
        state = state.replace(I=jnp.asarray(0x1300, dtype=jnp.uint16))

        state = execute(state, 0xD011)

        assert state.fault == 0
        assert state.display[0, 0] == 1


def test_execute_clear_screen(fresh_state):
    """00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(True).at[63, 31].set(True))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
