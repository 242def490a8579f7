"""State dumps and the headless command line."""

import pytest

from meowchip8 import InvalidOpcode, Quirks
from meowchip8.cli import build_parser, main, quirks_from_args
from meowchip8.debug import format_machine, format_memory, register_lines

from tests.helpers import machine_with, rom, run


class TestDumps:
    def test_zero_rows_collapse(self):
        assert format_memory(bytes(64)) == "$0000 - $003F : ..."

    def test_data_row(self):
        data = bytes([0x12, 0x34]) + bytes(14) + bytes(32)
        lines = format_memory(data).splitlines()
        assert lines[0] == "$0000 - $000F : 1234 0000 0000 0000 0000 0000 0000 0000"
        assert lines[1] == "$0010 - $002F : ..."

    def test_register_lines(self):
        m = machine_with(0x6A42, 0xA22A)
        run(m, 2)
        lines = register_lines(m)
        assert lines[0] == "PC: $204  I: $22A"
        assert lines[3].startswith("V8-VF: 00 00 42")
        assert lines[-1] == "OP: $0000 ??? $0000"

    def test_jump_offset_follows_quirk(self):
        m = machine_with(0xB123, quirks=Quirks(jump_uses_vx=True))
        assert register_lines(m)[-1] == "OP: $B123 JP V1, $123"

    def test_format_machine_reports_fault(self):
        m = machine_with(0x0000)
        with pytest.raises(InvalidOpcode):
            run(m, 1)
        text = format_machine(m, include_memory=False)
        assert "State: faulted" in text
        assert "Fault: Unsupported opcode $0000 at PC=$200" in text


class TestCli:
    def test_quirk_flags(self):
        args = build_parser().parse_args(["x.ch8", "--shift-vy", "--clip"])
        quirks = quirks_from_args(args)
        assert quirks.shift_uses_vy and quirks.clip_sprites
        assert not quirks.jump_uses_vx

    def test_headless_run(self, tmp_path, capsys):
        path = tmp_path / "loop.ch8"
        path.write_bytes(rom(0x6005, 0x1202))
        assert main([str(path), "--headless-cycles", "5"]) == 0
        out = capsys.readouterr().out
        assert "V0-V7: 05" in out
        assert "Cycles: 5" in out

    def test_headless_run_ticks_timers(self, tmp_path, capsys):
        # Set DT to 60, then spin until it reaches zero and park at $20A
        path = tmp_path / "delay.ch8"
        path.write_bytes(rom(0x603C, 0xF015, 0xF107, 0x3100, 0x1204, 0x120A))
        assert main([str(path), "--headless-cycles", "5000"]) == 0
        out = capsys.readouterr().out
        assert "PC: $20A" in out
        assert "DT: 00" in out

    @pytest.mark.parametrize("hz", ["0", "-5", "fast"])
    def test_hz_must_be_positive(self, hz):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["x.ch8", "--hz", hz])

    def test_headless_fault_exit_code(self, tmp_path, capsys):
        path = tmp_path / "bad.ch8"
        path.write_bytes(rom(0x0123))
        assert main([str(path), "--headless-cycles", "5"]) == 1
        assert "State: faulted" in capsys.readouterr().out

    def test_missing_rom(self, tmp_path):
        assert main([str(tmp_path / "nope.ch8"), "--headless-cycles", "1"]) == 1
