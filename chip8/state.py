"""Machine state: memory, registers, timers, stack, framebuffer and flags.

A `Chip8State` is created once per run and owned by a single `Chip8CPU`.
Nothing else mutates it except the driver, which installs key snapshots and
consumes the draw/sound request flags.
"""

import numpy as np

from . import config
from .errors import MemoryAccessError, ProgramTooLargeError
from .quirks import Mode, Quirks


class Chip8State:

    def __init__(self, mode=Mode.CHIP8):
        self.mode = mode
        self.quirks = Quirks.for_mode(mode)

        # ---- CPU state ----
        self.memory = bytearray(config.MEMORY_SIZE)
        self.V = [0] * 16           # V0..VF, VF doubles as the flag register
        self.I = 0                  # index register
        self.pc = config.PROGRAM_START
        self.stack = []             # return addresses, grows as needed
        self.delay_timer = 0
        self.sound_timer = 0
        self.framebuffer = bytearray(config.width * config.height)

        # input snapshot supplied by the driver
        self.keys = [0] * 16
        self.key_pressed = None

        # requests for the driver
        self.draw_flag = False
        self.sound_flag = False

        # Load fontset into memory
        self.memory[config.FONT_START:config.FONT_START + len(config.fontset)] = bytes(config.fontset)

    # ---- Load ROM ----
    def load_program(self, data):
        limit = config.MEMORY_SIZE - config.PROGRAM_START
        if len(data) > limit:
            raise ProgramTooLargeError(len(data), limit)
        start = config.PROGRAM_START
        self.memory[start:start + len(data)] = bytes(data)

    # ---- Memory ----
    def check_range(self, address, length=1):
        if address < 0 or address + length > config.MEMORY_SIZE:
            raise MemoryAccessError(address)

    def read_byte(self, address):
        self.check_range(address)
        return self.memory[address]

    def read_block(self, address, length):
        self.check_range(address, length)
        return self.memory[address:address + length]

    def write_byte(self, address, value):
        self.write_block(address, bytes([value & 0xFF]))

    def write_block(self, address, data):
        self.check_range(address, len(data))
        if data and address < config.FONT_END:
            raise MemoryAccessError(address, "into font region")
        self.memory[address:address + len(data)] = data

    # ---- Display ----
    def frame(self):
        """Read-only (height, width) view of the framebuffer, 1 byte per pixel."""
        view = np.frombuffer(bytes(self.framebuffer), dtype=np.uint8)
        return view.reshape(config.height, config.width)

    def pixel(self, x, y):
        return self.framebuffer[x + config.width * y]

    # ---- Input ----
    def set_keys(self, held, pressed=None):
        """Install the driver's snapshot: 16 held flags and at most one new press.

        A press not consumed by Fx0A expires with the next snapshot.
        """
        self.keys = [1 if k else 0 for k in held]
        self.key_pressed = None if pressed is None else pressed & 0xF

    # ---- Requests ----
    def consume_draw(self):
        requested, self.draw_flag = self.draw_flag, False
        return requested

    def consume_sound(self):
        requested, self.sound_flag = self.sound_flag, False
        return requested
