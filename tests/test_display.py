"""Tests for the Display and Keypad modules."""

import pytest
from chip8.display import Display, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8.keypad import Keypad, key_for, KEYMAP
from chip8.errors import InvalidKey


class TestDisplay:
    """Framebuffer tests."""

    def test_starts_blank(self):
        display = Display()
        assert len(display.pixels()) == SCREEN_WIDTH * SCREEN_HEIGHT
        assert display.lit_count() == 0

    def test_draw_sets_pixels(self):
        display = Display()
        collision = display.draw_sprite(0, 0, [0b10100000])
        assert collision is False
        assert display.get(0, 0) is True
        assert display.get(1, 0) is False
        assert display.get(2, 0) is True

    def test_draw_twice_restores_and_collides(self):
        """XOR is self-inverse; the second draw reports a collision."""
        display = Display()
        display.draw_sprite(10, 5, [0xFF, 0x81])
        assert display.draw_sprite(10, 5, [0xFF, 0x81]) is True
        assert display.lit_count() == 0

    def test_wraps_horizontally(self):
        display = Display()
        display.draw_sprite(60, 0, [0xFF])
        lit = [x for x in range(SCREEN_WIDTH) if display.get(x, 0)]
        assert lit == [0, 1, 2, 3, 60, 61, 62, 63]

    def test_wraps_vertically(self):
        display = Display()
        display.draw_sprite(0, 31, [0x80, 0x80])
        assert display.get(0, 31) is True
        assert display.get(0, 0) is True

    def test_clear(self):
        display = Display()
        display.draw_sprite(3, 3, [0xFF] * 5)
        display.clear()
        assert display.lit_count() == 0

    def test_rows_are_row_major(self):
        display = Display()
        display.draw_sprite(5, 2, [0x80])
        rows = display.rows()
        assert len(rows) == SCREEN_HEIGHT
        assert len(rows[0]) == SCREEN_WIDTH
        assert rows[2][5] is True
        assert display.pixels()[2 * SCREEN_WIDTH + 5] is True

    def test_render_text(self):
        display = Display()
        display.draw_sprite(0, 0, [0xC0])
        text = display.render_text()
        assert len(text) == SCREEN_HEIGHT
        assert text[0].startswith("##.")
        assert text[1] == "." * SCREEN_WIDTH


class TestKeypad:
    """Keypad tests."""

    def test_press_release(self):
        keypad = Keypad()
        keypad.set(0xA, True)
        assert keypad.is_pressed(0xA)
        keypad.set(0xA, False)
        assert not keypad.is_pressed(0xA)

    def test_first_pressed_is_lowest(self):
        keypad = Keypad()
        assert keypad.first_pressed() is None
        keypad.set(9, True)
        keypad.set(4, True)
        assert keypad.first_pressed() == 4
        assert keypad.pressed_keys() == [4, 9]

    def test_invalid_index(self):
        keypad = Keypad()
        with pytest.raises(InvalidKey):
            keypad.set(16, True)
        with pytest.raises(InvalidKey):
            keypad.is_pressed(-1)

    def test_keymap(self):
        assert key_for("x") == 0x0
        assert key_for("V") == 0xF
        assert key_for("4") == 0xC
        assert key_for("p") is None
        assert sorted(KEYMAP.values()) == list(range(16))
