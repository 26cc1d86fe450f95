"""CHIP-8 interpreter package."""

from chipjax.state import EmulatorState, StackState, Quirks, create_state
from chipjax.emulator import (
    execute, fetch, step, tick_timers, set_keypad, consume_audio,
    run_steps, run_frame, load_rom, load_rom_file,
)
from chipjax.decode import DecodedInstruction, InstructionFamily, decode, describe
from chipjax.signals import (
    Status, StepSignals, Chip8Error, RomLoadError, RomTooLarge,
    UnknownOpcode, StackOverflow, StackUnderflow, raise_for_status,
)
from chipjax.constants import *
from chipjax.rendering import display_to_rgb, display_to_ascii, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "Quirks",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "set_keypad",
    "consume_audio",
    "run_steps",
    "run_frame",
    "load_rom",
    "load_rom_file",
    "DecodedInstruction",
    "InstructionFamily",
    "decode",
    "describe",
    "Status",
    "StepSignals",
    "Chip8Error",
    "RomLoadError",
    "RomTooLarge",
    "UnknownOpcode",
    "StackOverflow",
    "StackUnderflow",
    "raise_for_status",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgb",
    "display_to_ascii",
    "create_color_scheme",
]
