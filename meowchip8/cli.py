"""Command line entry point."""

import argparse
import logging
import sys
from pathlib import Path

from .constants import DEFAULT_CLOCK_HZ, SCALE
from .debug import format_machine
from .errors import Chip8Error
from .machine import Machine, Quirks
from .rng import RandomByteSource
from .runner import Emulator

logger = logging.getLogger(__name__)


def positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meowchip8", description="🐱 Meow CHIP-8 - a CHIP-8 interpreter")
    parser.add_argument("rom", nargs="?", help="CHIP-8 program image (.ch8)")
    parser.add_argument("--hz", type=positive_int, default=DEFAULT_CLOCK_HZ,
                        help="Instructions per second (default: %(default)s)")
    parser.add_argument("--scale", type=int, default=SCALE,
                        help="Window pixels per CHIP-8 pixel (default: %(default)s)")
    parser.add_argument("--color", type=int, default=0,
                        help="Color scheme: 0 green, 1 amber, 2 white, 3 blue")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for CXNN random numbers")
    parser.add_argument("--debug", action="store_true",
                        help="Enable verbose debug logging (traces every instruction)")
    parser.add_argument("--headless-cycles", type=int, metavar="N",
                        help="Run N instructions without a window (timers paced by --hz) "
                             "and dump the machine state")

    quirks = parser.add_argument_group("quirks")
    quirks.add_argument("--shift-vy", action="store_true",
                        help="8XY6/8XYE shift VY into VX")
    quirks.add_argument("--vf-reset", action="store_true",
                        help="8XY1/8XY2/8XY3 clear VF")
    quirks.add_argument("--jump-vx", action="store_true",
                        help="BNNN jumps to NNN + VX")
    quirks.add_argument("--increment-i", action="store_true",
                        help="FX55/FX65 advance I past the last register")
    quirks.add_argument("--clip", action="store_true",
                        help="Clip sprites at the screen edge instead of wrapping")
    return parser


def quirks_from_args(args: argparse.Namespace) -> Quirks:
    return Quirks(
        shift_uses_vy=args.shift_vy,
        logic_resets_vf=args.vf_reset,
        jump_uses_vx=args.jump_vx,
        load_store_increments_i=args.increment_i,
        clip_sprites=args.clip,
    )


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    machine = Machine(rng=RandomByteSource(args.seed), quirks=quirks_from_args(args))
    emulator = Emulator(machine, clock_hz=args.hz)

    if args.headless_cycles is not None:
        if not args.rom:
            logger.error("--headless-cycles needs a ROM")
            return 2
        try:
            emulator.load(Path(args.rom).read_bytes())
        except (OSError, Chip8Error) as e:
            logger.error("Failed to load ROM %s: %s", args.rom, e)
            return 1
        emulator.run_timed(args.headless_cycles)
        print(format_machine(machine))
        return 1 if machine.halted else 0

    from .frontend import Chip8Window

    window = Chip8Window(emulator, scale=args.scale, color_scheme=args.color)
    if args.rom:
        window.load_rom(args.rom)
    else:
        logger.info("No ROM loaded - pass a .ch8 file as argument")
    window.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
