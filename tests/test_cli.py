"""Tests for the headless runner."""

from chipvm.cli import main


def test_cli_runs_program(tmp_path, capsys):
    rom = tmp_path / "loop.ch8"
    rom.write_bytes(bytes([0x60, 0x05, 0x12, 0x02]))  # V0 = 5; spin

    status = main([str(rom), "--frames", "2", "--instructions-per-frame", "4", "--seed", "0"])

    out = capsys.readouterr().out
    assert status == 0
    assert "pc: 0x202" in out


def test_cli_reports_execution_fault(tmp_path, capsys):
    rom = tmp_path / "bad.ch8"
    rom.write_bytes(bytes([0x00, 0xEE]))

    status = main([str(rom), "--frames", "1", "--seed", "0"])

    out = capsys.readouterr().out
    assert status == 1
    assert "StackUnderflowFault" in out


def test_cli_reports_load_fault(tmp_path, capsys):
    rom = tmp_path / "huge.ch8"
    rom.write_bytes(bytes(4000))

    status = main([str(rom), "--seed", "0"])

    assert status == 2
    assert "LoadFault" in capsys.readouterr().out
