# Gated debug logging. Instruction traces are far too chatty to leave on,
# so log() is a no-op until debug is switched on (env, --debug, or F1).

import logging

from . import config

logger = logging.getLogger("chip8")

logsOn = config.DEBUG


def set_debug(enabled):
    global logsOn
    logsOn = bool(enabled)
    logger.setLevel(logging.DEBUG if logsOn else logging.INFO)


def debug_enabled():
    return logsOn


def log(*args, logger=logger):
    if logsOn:
        logger.debug(" ".join(str(a) for a in args))


def setup(debug=None):
    """Configure root logging for the command line entry point."""
    if debug is None:
        debug = config.DEBUG
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    set_debug(debug)


set_debug(logsOn)
