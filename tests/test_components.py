"""Memory, register file, call stack, timers, display buffer and keypad."""

import numpy as np
import pytest

from meowchip8.constants import FONT_ADDRESS, FONTSET, MEMORY_SIZE, STACK_SIZE
from meowchip8.display import DisplayBuffer
from meowchip8.errors import MemoryFault, StackOverflow, StackUnderflow
from meowchip8.keypad import Keypad
from meowchip8.memory import Memory
from meowchip8.registers import CallStack, RegisterFile
from meowchip8.rng import RandomByteSource, ScriptedByteSource
from meowchip8.timers import Timers


class TestMemory:
    def test_font_loaded(self):
        mem = Memory()
        assert mem.read_block(FONT_ADDRESS, len(FONTSET)) == FONTSET

    def test_read_word_is_big_endian(self):
        mem = Memory()
        mem.load(0x200, b"\x12\x34")
        assert mem.read_word(0x200) == 0x1234

    @pytest.mark.parametrize("addr", [-1, MEMORY_SIZE, 0x1FFF])
    def test_out_of_bounds_read(self, addr):
        with pytest.raises(MemoryFault) as exc:
            Memory().read(addr)
        assert exc.value.address == addr

    def test_block_running_off_the_end(self):
        with pytest.raises(MemoryFault) as exc:
            Memory().read_block(0xFFD, 4)
        assert exc.value.address == 0x1000

    def test_reserved_area_is_read_only_to_programs(self):
        mem = Memory()
        with pytest.raises(MemoryFault):
            mem.write(0x1FF, 1)
        mem.write(0x200, 0x1FF)
        assert mem.read(0x200) == 0xFF

    def test_clear_keeps_font(self):
        mem = Memory()
        mem.write(0x300, 7)
        mem.clear()
        assert mem.read(0x300) == 0
        assert mem.read(FONT_ADDRESS) == FONTSET[0]


class TestRegistersAndStack:
    def test_reset(self):
        regs = RegisterFile()
        regs.V[3] = 9
        regs.I = 0x123
        regs.PC = 0x400
        regs.reset()
        assert regs.V == [0] * 16
        assert (regs.I, regs.PC) == (0, 0x200)

    def test_stack_is_lifo(self):
        stack = CallStack()
        stack.push(0x202)
        stack.push(0x304)
        assert stack.peek() == 0x304
        assert stack.pop() == 0x304
        assert stack.pop() == 0x202

    def test_stack_bounds(self):
        stack = CallStack()
        for i in range(STACK_SIZE):
            stack.push(i)
        assert stack.full
        with pytest.raises(StackOverflow):
            stack.push(99)
        stack.clear()
        with pytest.raises(StackUnderflow):
            stack.pop()


class TestTimers:
    @pytest.mark.parametrize("start, ticks", [(10, 3), (3, 10), (0, 5), (255, 255)])
    def test_decrement_floors_at_zero(self, start, ticks):
        timers = Timers()
        timers.delay = start
        timers.sound = start
        for _ in range(ticks):
            timers.tick()
        assert timers.delay == max(0, start - ticks)
        assert timers.sound == max(0, start - ticks)

    def test_sound_active(self):
        timers = Timers()
        assert not timers.sound_active
        timers.sound = 1
        assert timers.sound_active
        timers.tick()
        assert not timers.sound_active


class TestDisplayBuffer:
    def test_collision_reported_once_per_sprite(self):
        d = DisplayBuffer()
        assert d.draw_sprite(0, 0, [0xFF]) is False
        assert d.draw_sprite(0, 0, [0xFF]) is True
        assert not d.pixels.any()

    def test_partial_overlap(self):
        d = DisplayBuffer()
        d.draw_sprite(0, 0, [0xF0])
        assert d.draw_sprite(2, 0, [0xF0]) is True
        assert list(d.pixels[0, :6]) == [True, True, False, False, True, True]

    def test_vertical_wrap_and_clip(self):
        d = DisplayBuffer()
        d.draw_sprite(0, 31, [0x80, 0x80])
        assert d.pixels[31, 0] and d.pixels[0, 0]

        d = DisplayBuffer()
        d.draw_sprite(0, 31, [0x80, 0x80], clip=True)
        assert d.pixels[31, 0] and not d.pixels[0, 0]

    def test_pixels_view_is_read_only(self):
        d = DisplayBuffer()
        with pytest.raises(ValueError):
            d.pixels[0, 0] = True

    def test_redraw_signal(self):
        d = DisplayBuffer()
        assert d.consume_redraw()
        assert not d.consume_redraw()
        d.draw_sprite(1, 1, [0x80])
        assert d.consume_redraw()
        d.clear()
        assert d.consume_redraw()

    def test_snapshot_is_a_copy(self):
        d = DisplayBuffer()
        snap = d.snapshot()
        d.draw_sprite(0, 0, [0x80])
        assert not snap.any()
        assert snap.shape == (32, 64)
        assert snap.dtype == np.bool_


class TestKeypad:
    def test_press_and_release(self):
        keys = Keypad()
        keys.press(0xA)
        assert keys.is_pressed(0xA)
        keys.release(0xA)
        assert not keys.is_pressed(0xA)

    def test_out_of_range_codes_ignored(self):
        keys = Keypad()
        keys.press(16)
        keys.release(-3)
        assert not any(keys.keys)

    def test_out_of_range_values_never_pressed(self):
        keys = Keypad()
        keys.press(5)
        assert keys.is_pressed(5)
        assert not keys.is_pressed(0x15)
        assert not keys.is_pressed(-1)

    def test_press_only_recorded_while_waiting(self):
        keys = Keypad()
        keys.press(1)
        keys.release(1)
        keys.begin_wait()
        assert keys.take_pressed() is None
        keys.press(4)
        assert keys.take_pressed() == 4
        assert keys.take_pressed() is None


class TestByteSources:
    def test_seeded_source_is_repeatable(self):
        a = RandomByteSource(seed=8)
        b = RandomByteSource(seed=8)
        values = [a.next_byte() for _ in range(32)]
        assert values == [b.next_byte() for _ in range(32)]
        assert all(0 <= v <= 255 for v in values)

    def test_scripted_source_cycles(self):
        src = ScriptedByteSource([1, 2, 0x1FF])
        assert [src.next_byte() for _ in range(4)] == [1, 2, 0xFF, 1]

    def test_scripted_source_needs_values(self):
        with pytest.raises(ValueError):
            ScriptedByteSource([])
