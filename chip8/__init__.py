# CHIP-8 Virtual Machine:
# Input - key snapshots (held keys plus the latest new press) handed in by the driver.
# Output - 64x32 display (array of pixels either on or off (0 || 1)) & sound requests.
# CPU - fetch/decode/execute with per-dialect quirks (CHIP-8, SUPER-CHIP, XO-CHIP).
# Memory - 4096 bytes holding the font at 0x000 and the program from 0x200.

from .cpu import Chip8CPU
from .decode import Instruction, Op, decode, fetch
from .errors import Chip8Error, MemoryAccessError, ProgramTooLargeError, StackUnderflowError
from .quirks import Mode, Quirks
from .state import Chip8State
from .timers import InstructionPacer, TimerClock

__version__ = "0.1.0"

__all__ = [
    "Chip8CPU",
    "Chip8Error",
    "Chip8State",
    "Instruction",
    "InstructionPacer",
    "MemoryAccessError",
    "Mode",
    "Op",
    "ProgramTooLargeError",
    "Quirks",
    "StackUnderflowError",
    "TimerClock",
    "decode",
    "fetch",
]
