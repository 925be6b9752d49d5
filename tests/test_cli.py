"""Tests for the command line driver."""

import pytest
from PIL import Image
from chip8vm.cli import main, build_parser


@pytest.fixture
def rom(tmp_path):
    """Write a ROM file and return its path."""
    def _write(data, name="test.ch8"):
        path = tmp_path / name
        path.write_bytes(bytes(data))
        return str(path)
    return _write


def test_disasm(rom, capsys):
    path = rom([0x00, 0xE0, 0x12, 0x00])

    assert main(["disasm", path]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ["0x200: 00E0  CLS", "0x202: 1200  JP 0x200"]


def test_run_headless(rom, capsys):
    path = rom([0x70, 0x01, 0x12, 0x00])

    assert main(["run", path, "--headless", "--frames", "2", "--no-progress"]) == 0

    out = capsys.readouterr().out
    assert "Ran 2 frames" in out
    assert "V0: 0x0A" in out


def test_run_headless_screenshot(rom, tmp_path):
    path = rom([0x60, 0x00, 0xD0, 0x05, 0x12, 0x04])
    screenshot = tmp_path / "out.png"

    exit_code = main([
        "run", path, "--headless", "--frames", "1", "--no-progress",
        "--screenshot", str(screenshot), "--scale", "2",
    ])

    assert exit_code == 0
    with Image.open(screenshot) as image:
        assert image.size == (128, 64)
        assert image.getpixel((0, 0)) == (0, 255, 0)


def test_run_headless_fault(rom, capsys):
    path = rom([0x01, 0x23])

    assert main(["run", path, "--headless", "--frames", "1", "--no-progress"]) == 1

    out = capsys.readouterr().out
    assert "Unknown instruction: 0x0123 at 0x200" in out
    assert "Mode: halted" in out


def test_run_oversized_rom(rom, capsys):
    path = rom(bytes(4000))

    assert main(["run", path, "--headless", "--no-progress"]) == 2
    assert "Program too big" in capsys.readouterr().out


def test_run_missing_rom(tmp_path):
    assert main(["disasm", str(tmp_path / "missing.ch8")]) == 2


def test_run_rejects_bad_ipf(rom):
    assert main(["run", rom([0x12, 0x00]), "--headless", "--ipf", "0"]) == 2


def test_parser_defaults():
    args = build_parser().parse_args(["run", "game.ch8"])

    assert args.ipf == 10
    assert args.frames == 600
    assert args.colors == "classic"
    assert not args.headless
    assert not args.clip_sprites
