import argparse
import logging
import sys

from . import config
from . import log as chip8_log
from .errors import Chip8Error
from .quirks import Mode

logger = logging.getLogger("chip8")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="chip8", description="CHIP-8 / SUPER-CHIP / XO-CHIP interpreter")
    parser.add_argument("rom", help="program image, loaded at 0x200")
    parser.add_argument("-m", "--mode", type=Mode.parse, default=Mode.CHIP8,
                        help="compatibility mode: chip8 (default), schip or xochip")
    parser.add_argument("-s", "--scale", type=int, default=config.scale,
                        help="window pixels per CHIP-8 pixel (default %(default)s)")
    parser.add_argument("-d", "--debug", action="store_true", default=config.DEBUG,
                        help="log every executed instruction")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    chip8_log.setup(args.debug)

    logger.info("Loading ROM: %s", args.rom)
    try:
        with open(args.rom, "rb") as f:
            program = f.read()
    except OSError as e:
        logger.error("Cannot read ROM: %s", e)
        return 1

    # imported late so --help works without a display
    import pyglet
    from .window import Chip8Window

    try:
        Chip8Window(program, mode=args.mode, scale=args.scale)
    except Chip8Error as e:
        logger.error("%s", e)
        return 1
    pyglet.app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
