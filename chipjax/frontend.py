"""pygame window, audio and keyboard for interactive runs."""

from typing import Optional

import numpy as np
import pygame

from chipjax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, NUM_KEYS
from chipjax.emulator import run_frame, consume_audio
from chipjax.logging import EmulatorLogger
from chipjax.pacing import Pacer
from chipjax.rendering import create_color_scheme
from chipjax.runner import RunConfig, boot, report_frame

SAMPLE_RATE = 44100
BEEP_HZ = 440
BEEP_SECONDS = 0.1

# Hex keypad     Keyboard
#  1 2 3 C       1 2 3 4
#  4 5 6 D       Q W E R
#  7 8 9 E       A S D F
#  A 0 B F       Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def poll_keypad(pressed) -> np.ndarray:
    """Map a ``pygame.key.get_pressed()`` snapshot onto the 16 hex keys."""
    keypad = np.zeros(NUM_KEYS, dtype=np.bool_)
    for key, index in KEY_MAP.items():
        keypad[index] |= bool(pressed[key])
    return keypad


def square_wave(frequency: int = BEEP_HZ, seconds: float = BEEP_SECONDS, rate: int = SAMPLE_RATE) -> np.ndarray:
    """Mono signed 16-bit square wave used when no sample file is given."""
    t = np.arange(int(rate * seconds))
    period = rate // frequency
    return np.where((t % period) < period // 2, 8000, -8000).astype(np.int16)


class Beeper:
    """Plays the sound sample once per raised play_audio flag."""

    def __init__(self, sample_path: Optional[str], logger: EmulatorLogger):
        self.sound = None
        try:
            pygame.mixer.init(SAMPLE_RATE, -16, 1, 1024)
            if sample_path:
                self.sound = pygame.mixer.Sound(sample_path)
            else:
                self.sound = pygame.sndarray.make_sound(square_wave())
        except (pygame.error, FileNotFoundError) as e:
            logger.warning(f"Audio disabled: {e}")

    def play(self):
        if self.sound is not None:
            self.sound.play()


def draw_display(surface: pygame.Surface, display, scale: int, on_color, off_color):
    """Fill lit cells as scale x scale rectangles over the background."""
    surface.fill(off_color)
    for y, x in np.argwhere(np.asarray(display)):
        pygame.draw.rect(surface, on_color, pygame.Rect(x * scale, y * scale, scale, scale))


def run_emulator(config: RunConfig, logger: Optional[EmulatorLogger] = None) -> int:
    """Interactive main loop. Returns 0 when the window is closed.

    Controls: ESC quits, P pauses, F5 resets the machine.

    Raises:
        RomLoadError, RomTooLarge: the ROM could not be loaded
        UnknownOpcode, StackOverflow, StackUnderflow: in strict mode only
    """
    logger = logger or EmulatorLogger(log_level=config.log_level, quirks=config.quirks)
    state = boot(config)
    logger.log_run_start(config.summary())

    pygame.init()
    try:
        screen = pygame.display.set_mode((SCREEN_WIDTH * config.scale, SCREEN_HEIGHT * config.scale))
        pygame.display.set_caption("CHIP-8")
        clock = pygame.time.Clock()
        beeper = Beeper(config.audio_path, logger)
        on_color, off_color = create_color_scheme(config.color_scheme)
        pacer = Pacer(config.instructions_per_second, config.timer_hz)

        frames = 0
        running = True
        paused = False
        draw_display(screen, state.display, config.scale, on_color, off_color)

        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        paused = not paused
                        logger.info("Paused" if paused else "Resumed")
                    elif event.key == pygame.K_F5:
                        state = boot(config)
                        pacer.reset()
                        draw_display(screen, state.display, config.scale, on_color, off_color)
                        logger.info("Reset")

            if not paused:
                keypad = poll_keypad(pygame.key.get_pressed())
                state, signals = run_frame(state, keypad, pacer.next_frame())
                report_frame(logger, config, signals)
                frames += 1

                state, play = consume_audio(state)
                if play:
                    beeper.play()
                if bool(np.any(signals.display_dirty)):
                    draw_display(screen, state.display, config.scale, on_color, off_color)

            pygame.display.flip()
            clock.tick(config.timer_hz)
    finally:
        pygame.quit()

    logger.log_run_end(frames)
    return 0
