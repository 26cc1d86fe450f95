"""Command line entry point."""

import argparse
import sys
from typing import Optional, Sequence

from chipjax.constants import DEFAULT_SCALE, INSTRUCTIONS_PER_SECOND
from chipjax.logging import EmulatorLogger
from chipjax.rendering import display_to_ascii
from chipjax.runner import RunConfig, run_headless
from chipjax.signals import Chip8Error
from chipjax.state import Quirks


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chipjax",
        description="Run a CHIP-8 ROM",
    )
    parser.add_argument("rom", help="Path to the CHIP-8 ROM file")
    parser.add_argument(
        "audio",
        nargs="?",
        default=None,
        help="Sound sample played while the sound timer runs (default: generated beep)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=DEFAULT_SCALE,
        help=f"Window pixels per CHIP-8 pixel (default: {DEFAULT_SCALE})",
    )
    parser.add_argument(
        "--ips",
        type=int,
        default=INSTRUCTIONS_PER_SECOND,
        help=f"Instructions per second (default: {INSTRUCTIONS_PER_SECOND})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random number instruction (default: 0)",
    )
    parser.add_argument(
        "--color-scheme",
        default="white",
        help="Display colours: white, classic, amber, blue, retro (default: white)",
    )
    parser.add_argument(
        "--shift-vx",
        action="store_true",
        help="8XY6/8XYE shift VX in place instead of shifting VY into VX",
    )
    parser.add_argument(
        "--jump-vx",
        action="store_true",
        help="Treat BNNN as BXNN (jump to XNN + VX)",
    )
    parser.add_argument(
        "--increment-index",
        action="store_true",
        help="FX55/FX65 advance I past the last register",
    )
    parser.add_argument(
        "--clip-sprites",
        action="store_true",
        help="Clip sprites at the screen edge instead of wrapping them",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop on the first unknown opcode or stack error",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every executed instruction (use with --log-level DEBUG)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level (default: INFO)",
    )
    parser.add_argument(
        "--headless",
        type=int,
        metavar="FRAMES",
        default=None,
        help="Run FRAMES 60Hz frames without a window and print the final screen",
    )
    parser.add_argument(
        "--screenshot",
        default=None,
        help="With --headless, save the final screen to this image file",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    quirks = Quirks(
        shift_uses_vy=not args.shift_vx,
        jump_uses_vx=args.jump_vx,
        memory_increments_index=args.increment_index,
        clip_sprites=args.clip_sprites,
    )
    return RunConfig(
        rom_path=args.rom,
        audio_path=args.audio,
        scale=args.scale,
        instructions_per_second=args.ips,
        color_scheme=args.color_scheme,
        seed=args.seed,
        quirks=quirks,
        strict=args.strict,
        trace=args.trace,
        log_level=args.log_level,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    logger = EmulatorLogger(log_level=config.log_level, quirks=config.quirks)
    try:
        if args.headless is not None:
            state = run_headless(config, args.headless, logger, screenshot=args.screenshot)
            print(display_to_ascii(state.display))
            return 0

        from chipjax.frontend import run_emulator
        return run_emulator(config, logger)
    except Chip8Error as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
