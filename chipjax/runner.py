"""Run configuration and the display-free driver loop."""

import dataclasses
from typing import Any, Dict, Optional

import jax
import numpy as np
from tqdm import tqdm

from chipjax.constants import DEFAULT_SCALE, INSTRUCTIONS_PER_SECOND, TIMER_HZ, NUM_KEYS
from chipjax.emulator import run_frame, consume_audio, load_rom_file
from chipjax.logging import EmulatorLogger
from chipjax.pacing import Pacer
from chipjax.rendering import create_color_scheme, save_screenshot
from chipjax.signals import StepSignals, raise_for_status
from chipjax.state import EmulatorState, Quirks, create_state


@dataclasses.dataclass(frozen=True)
class RunConfig:
    """Settings for one emulator run.

    Attributes:
        rom_path: ROM file to load at 0x200
        audio_path: Sound sample played when the sound timer fires (None for a generated beep)
        scale: Window pixels per CHIP-8 pixel
        instructions_per_second: Target instruction rate
        timer_hz: Timer tick and redraw rate
        color_scheme: Name understood by ``create_color_scheme``
        seed: Seed for the CXNN random source
        quirks: Compatibility switches for the interpreter
        strict: Abort the run on the first reported anomaly
        trace: Log every executed instruction at DEBUG
        log_level: Console log level
    """
    rom_path: str
    audio_path: Optional[str] = None
    scale: int = DEFAULT_SCALE
    instructions_per_second: int = INSTRUCTIONS_PER_SECOND
    timer_hz: int = TIMER_HZ
    color_scheme: str = "white"
    seed: int = 0
    quirks: Quirks = Quirks()
    strict: bool = False
    trace: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.scale < 1:
            raise ValueError(f"scale must be at least 1, got {self.scale}")
        if self.instructions_per_second <= 0 or self.timer_hz <= 0:
            raise ValueError("instruction rate and timer rate must be positive")
        create_color_scheme(self.color_scheme)

    def summary(self) -> Dict[str, Any]:
        return {
            field.name: getattr(self, field.name)
            for field in dataclasses.fields(self)
            if field.name != "quirks"
        } | dataclasses.asdict(self.quirks)


def boot(config: RunConfig) -> EmulatorState:
    """Create a fresh machine for ``config`` and load its ROM."""
    state = create_state(jax.random.PRNGKey(config.seed), config.quirks)
    return load_rom_file(state, config.rom_path)


def report_frame(logger: EmulatorLogger, config: RunConfig, signals: StepSignals) -> None:
    """Log one frame's worth of signals; raises in strict mode."""
    logger.log_signals(signals)
    if config.trace:
        logger.log_trace(signals)
    if config.strict:
        raise_for_status(signals)


def run_headless(
    config: RunConfig,
    frames: int,
    logger: Optional[EmulatorLogger] = None,
    screenshot: Optional[str] = None,
    progress: bool = True,
) -> EmulatorState:
    """Run ``frames`` driver iterations with no keys pressed and no window.

    Raises:
        RomLoadError, RomTooLarge: the ROM could not be loaded
        UnknownOpcode, StackOverflow, StackUnderflow: in strict mode only
    """
    logger = logger or EmulatorLogger(log_level=config.log_level, quirks=config.quirks)
    state = boot(config)
    logger.log_run_start(config.summary())

    pacer = Pacer(config.instructions_per_second, config.timer_hz)
    keypad = np.zeros(NUM_KEYS, dtype=np.bool_)
    for _ in tqdm(range(frames), desc="Emulating", unit="frame", disable=not progress):
        state, signals = run_frame(state, keypad, pacer.next_frame())
        report_frame(logger, config, signals)
        state, _ = consume_audio(state)

    logger.log_run_end(frames)
    if screenshot:
        save_screenshot(state.display, screenshot, config.scale, config.color_scheme)
        logger.info(f"Screenshot saved: {screenshot}")
    return state
