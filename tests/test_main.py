"""Tests for the headless command line host."""

from PIL import Image
import main
from conftest import assemble


def write_rom(tmp_path, *words):
    rom_file = tmp_path / "program.ch8"
    rom_file.write_bytes(assemble(*words))
    return str(rom_file)


def test_parse_args_defaults():
    args = main.parse_args(["game.ch8"])

    assert args.rom == "game.ch8"
    assert not args.window
    assert args.fault_policy == "halt"
    assert args.log_level == "INFO"


def test_headless_run_saves_frame(tmp_path):
    rom = write_rom(tmp_path, 0x6000, 0xD005, 0x1204)
    frame_file = tmp_path / "final.png"

    exit_code = main.main([rom, "--frames", "3", "--no-progress", "--log-level", "critical",
                           "--save-frame", str(frame_file), "--scale", "1"])

    assert exit_code == 0
    with Image.open(frame_file) as image:
        assert image.size == (64, 32)
        assert image.getpixel((0, 0)) == (255, 255, 255)


def test_headless_run_reports_halt(tmp_path):
    rom = write_rom(tmp_path, 0x00EE)

    assert main.main([rom, "--frames", "2", "--no-progress", "--log-level", "CRITICAL"]) == 1


def test_missing_rom(tmp_path):
    assert main.main([str(tmp_path / "nope.ch8"), "--log-level", "CRITICAL"]) == 1


def test_key_map_covers_keypad():
    assert sorted(main.KEY_MAP.values()) == list(range(16))


class FakeSound:
    def __init__(self):
        self.calls = []

    def play(self, loops=0):
        self.calls.append(("play", loops))

    def stop(self):
        self.calls.append(("stop",))


def test_beeper_follows_sound_timer_edges():
    sound = FakeSound()
    beeper = main.Beeper(sound)

    for active in [False, True, True, True, False, False, True, False]:
        beeper.update(active)

    assert sound.calls == [("play", -1), ("stop",), ("play", -1), ("stop",)]
    assert not beeper.playing


def test_beeper_without_sound_device():
    beeper = main.Beeper()
    beeper.update(True)

    assert beeper.playing
