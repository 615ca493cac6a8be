"""
CHIP-8 command line host: headless runs with frame export, or an interactive window.
"""

import argparse
import sys
import time

import numpy as np
import pygame

from chip8core.constants import INSTRUCTION_FREQUENCY, SCREEN_HEIGHT, SCREEN_WIDTH
from chip8core.errors import RomTooLarge
from chip8core.host import FAULT_POLICIES, Chip8Host, HostConfig
from chip8core.keypad import pressed_keys
from chip8core.logging import EmulatorLogger, progress
from chip8core.rendering import create_color_scheme, create_video, save_frame

# COSMAC VIP keypad laid over the left side of a QWERTY keyboard:
#   1 2 3 C      1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

SOUND_FREQUENCY = 44100
SOUND_BUFFER = 4096
TONE_HZ = 550


def make_tone(tone_hz: float = TONE_HZ, sample_rate: int = SOUND_FREQUENCY):
    """One second of a sine tone, looped while the sound timer runs."""
    length = sample_rate / tone_hz
    omega = np.pi * 2 / length
    one_cycle = SOUND_BUFFER * np.sin(np.arange(int(length)) * omega)
    sound_wave = np.resize(one_cycle, (sample_rate,)).astype(np.int16)
    return pygame.sndarray.make_sound(sound_wave)


class Beeper:
    """Starts a looping tone when the sound timer becomes active and stops it when it runs out."""

    def __init__(self, sound=None):
        self.sound = sound
        self.playing = False

    def update(self, active: bool):
        if active == self.playing:
            return
        self.playing = active
        if self.sound is None:
            return
        if active:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM")
    parser.add_argument("rom", help="Path to the ROM file")
    parser.add_argument("--window", action="store_true", help="Open an interactive pygame window")
    parser.add_argument("--frames", type=int, default=600, help="Frames to run headless (60 per second)")
    parser.add_argument("--frequency", type=int, default=INSTRUCTION_FREQUENCY, help="Instructions per second")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the CXKK random generator")
    parser.add_argument("--fault-policy", choices=FAULT_POLICIES, default="halt")
    parser.add_argument("--scale", type=int, default=8, help="Pixel upscaling factor")
    parser.add_argument("--color-scheme", default="classic")
    parser.add_argument("--save-frame", help="Write the final display to this image file")
    parser.add_argument("--save-video", help="Write every frame to this MP4 file")
    parser.add_argument("--log-level", type=str.upper, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    return parser.parse_args(argv)


def run_headless(host: Chip8Host, args, logger: EmulatorLogger):
    """Run a fixed number of frames without input and export the results."""
    frames = []
    start_time = time.time()

    for _ in progress(range(args.frames), desc="Emulating", enabled=not args.no_progress):
        host.run_frame()
        if args.save_video:
            frames.append(host.display)
        if host.halted:
            break

    logger.log_run_summary(host.instruction_count, host.frame_count, time.time() - start_time)

    if args.save_frame:
        save_frame(host.state.display, args.save_frame, args.scale, args.color_scheme)
        logger.info(f"Saved final frame to {args.save_frame}")
    if args.save_video and frames:
        create_video(np.stack(frames), args.save_video, scale=args.scale, color_scheme=args.color_scheme)
        logger.info(f"Saved {len(frames)} frames to {args.save_video}")


def draw_overlay_text(surface, text_lines, position, font, text_color=(255, 255, 0), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay = pygame.Surface((max_width + 16, len(text_lines) * line_height + 8))
    overlay.set_alpha(alpha)
    overlay.fill((0, 0, 0))
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        surface.blit(font.render(line, True, text_color), (x + 8, y + 4 + i * line_height))


def run_window(host: Chip8Host, args, logger: EmulatorLogger):
    """Interactive loop: ESC quits, P pauses, Backspace resets, Tab toggles debug."""
    try:
        pygame.mixer.init(SOUND_FREQUENCY, -16, 1, SOUND_BUFFER)
        beeper = Beeper(make_tone())
    except pygame.error as e:
        logger.warning(f"Sound disabled: {e}")
        beeper = Beeper()
    pygame.init()
    scale = args.scale
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"CHIP-8 - {args.rom}")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 18)
    on_color, off_color = create_color_scheme(args.color_scheme)

    keys = [False] * 16
    running = True
    paused = False
    show_debug = False
    start_time = time.time()

    while running:
        elapsed = clock.tick(60) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_TAB:
                    show_debug = not show_debug
                elif event.key == pygame.K_BACKSPACE:
                    host.reset()
                elif event.key in KEY_MAP:
                    keys[KEY_MAP[event.key]] = True
            elif event.type == pygame.KEYUP and event.key in KEY_MAP:
                keys[KEY_MAP[event.key]] = False

        if not paused and not host.halted:
            host.set_keys(keys)
            host.advance(elapsed)

        screen.fill(off_color)
        pixels = host.display
        for y in range(SCREEN_HEIGHT):
            for x in range(SCREEN_WIDTH):
                if pixels[y, x]:
                    pygame.draw.rect(screen, on_color, pygame.Rect(x * scale, y * scale, scale, scale))
        host.acknowledge_frame()

        if show_debug:
            state = host.state
            lines = [
                f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}",
                f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}",
                " ".join(f"V{i:X}:{int(state.V[i]):02X}" for i in range(8)),
                " ".join(f"V{i:X}:{int(state.V[i]):02X}" for i in range(8, 16)),
                "Keys: " + " ".join(f"{k:X}" for k in pressed_keys(state)),
            ]
            draw_overlay_text(screen, lines, (5, 5), font)
        beeping = host.should_beep and not paused and not host.halted
        beeper.update(beeping)
        if beeping:
            draw_overlay_text(screen, ["BEEP"], (SCREEN_WIDTH * scale - 60, 5), font)
        if paused or host.halted:
            status = "HALTED - Backspace to reset" if host.halted else "PAUSED - P to resume"
            draw_overlay_text(screen, [status], (5, SCREEN_HEIGHT * scale - 30), font)

        pygame.display.flip()

    beeper.update(False)
    pygame.quit()
    logger.log_run_summary(host.instruction_count, host.frame_count, time.time() - start_time)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = EmulatorLogger(log_level=args.log_level)
    config = HostConfig(
        instruction_frequency=args.frequency,
        seed=args.seed,
        fault_policy=args.fault_policy,
    )

    try:
        host = Chip8Host.from_file(args.rom, config=config, logger=logger)
    except (OSError, RomTooLarge) as e:
        logger.error(f"Could not load {args.rom}: {e}")
        return 1

    if args.window:
        run_window(host, args, logger)
    else:
        run_headless(host, args, logger)
    return 1 if host.halted else 0


if __name__ == "__main__":
    sys.exit(main())
