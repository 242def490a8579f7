"""ROM loading, reset and the timer driver."""

import pytest

from meowchip8 import Machine, ProgramTooLarge, RunState, load, step, tick_timers
from meowchip8.constants import MAX_PROGRAM_SIZE

from tests.helpers import machine_with, rom, run


class TestLoad:
    def test_program_copied_to_0x200(self):
        m = Machine()
        load(m, b"\xA2\x2A\x12\x00")
        assert m.memory.read_block(0x200, 4) == b"\xA2\x2A\x12\x00"
        assert m.registers.PC == 0x200
        assert m.program_length == 4

    def test_load_resets_everything(self):
        m = machine_with(0x6A42, 0xA300, 0x2208, 0x0000, 0xF029, 0xD015, 0xFA15)
        m.press_key(3)
        run(m, 5)
        m.timers.sound = 9

        m.load(rom(0x1200))
        assert m.registers.V == [0] * 16
        assert m.registers.I == 0
        assert m.registers.PC == 0x200
        assert m.stack.depth == 0
        assert (m.timers.delay, m.timers.sound) == (0, 0)
        assert not m.display.pixels.any()
        assert not any(m.keypad.keys)
        assert m.cycles == 0

    def test_load_clears_old_program_bytes(self):
        m = Machine()
        m.load(rom(0x1234, 0x5678))
        m.load(rom(0x1200))
        assert m.memory.read_block(0x202, 2) == b"\x00\x00"

    def test_largest_program_fits(self):
        m = Machine()
        m.load(bytes(MAX_PROGRAM_SIZE))
        assert m.program_length == MAX_PROGRAM_SIZE

    def test_too_large_leaves_machine_untouched(self):
        m = machine_with(0x6A42)
        step(m)
        with pytest.raises(ProgramTooLarge) as exc:
            m.load(bytes(MAX_PROGRAM_SIZE + 1))
        assert exc.value.size == MAX_PROGRAM_SIZE + 1
        assert m.registers.V[0xA] == 0x42
        assert m.registers.PC == 0x202
        assert m.program == rom(0x6A42)

    def test_reset_reloads_program(self):
        m = machine_with(0x6A42, 0x1202)
        run(m, 3)
        m.reset()
        assert m.registers.V[0xA] == 0
        assert m.registers.PC == 0x200
        assert m.memory.read_block(0x200, 4) == rom(0x6A42, 0x1202)

    def test_reset_clears_key_wait(self):
        m = machine_with(0xF00A)
        step(m)
        assert m.awaiting_key
        m.reset()
        assert m.state is RunState.RUNNING


class TestTickTimers:
    @pytest.mark.parametrize("delay, ticks", [(60, 10), (5, 60), (0, 1)])
    def test_delay_after_ticks(self, delay, ticks):
        m = Machine()
        m.timers.delay = delay
        for _ in range(ticks):
            tick_timers(m)
        assert m.timers.delay == max(0, delay - ticks)

    def test_ticks_independent_of_steps(self):
        m = machine_with(0x6010, 0xF015, 0x1204)
        run(m, 50)
        assert m.timers.delay == 0x10
        m.tick_timers()
        assert m.timers.delay == 0x0F

    def test_sound_active_follows_sound_timer(self):
        m = machine_with(0x6002, 0xF018)
        run(m, 2)
        assert m.sound_active
        m.tick_timers()
        m.tick_timers()
        assert not m.sound_active
