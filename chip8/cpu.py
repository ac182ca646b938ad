"""Dispatch and execute.

Each instruction word is decoded into an `Instruction`, then routed through a
single `Op -> handler` map. Handlers mutate the owned `Chip8State`; the few
that differ between dialects consult `state.quirks`.

Reference: Cowgod's CHIP-8 Technical Reference
http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
"""

import logging
import random

from . import config
from .decode import Op, decode, fetch
from .errors import StackUnderflowError
from .log import log
from .quirks import Mode
from .state import Chip8State

logger = logging.getLogger("chip8.cpu")


class Chip8CPU:

    def __init__(self, mode=Mode.CHIP8, rng=None):
        self.state = Chip8State(mode)
        self.rng = rng if rng is not None else random.Random()
        self.cycle_count = 0

        # Prepare opcode function map
        self.setup_funcmap()

    @property
    def mode(self):
        return self.state.mode

    @property
    def quirks(self):
        return self.state.quirks

    def load_program(self, data):
        log("Loading program:", len(data), "bytes", logger=logger)
        self.state.load_program(data)

    # ---- Cycle ----
    def step(self):
        word = fetch(self.state)
        instruction = decode(word)
        log("%03X" % (self.state.pc - 2), instruction, logger=logger)
        self.execute(instruction)
        self.cycle_count += 1
        return instruction

    def run(self, cycles):
        for _ in range(cycles):
            self.step()

    def execute(self, instruction):
        self.funcmap[instruction.op](instruction)

    # ---- timers ----
    def tick_timers(self):
        """One 60 Hz tick: count both timers down and request a beep while sound runs."""
        s = self.state
        if s.delay_timer > 0:
            s.delay_timer -= 1
        if s.sound_timer > 0:
            s.sound_flag = True
            s.sound_timer -= 1

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            Op.SYS: self._0nnn,         # 0nnn - machine code routine, ignored
            Op.CLS: self._00E0,         # 00E0 - Clear the display
            Op.RET: self._00EE,         # 00EE - Return from a subroutine
            Op.JP: self._1nnn,          # 1nnn - Jump to address
            Op.CALL: self._2nnn,        # 2nnn - Call subroutine
            Op.SE_VX_NN: self._3xnn,    # 3xnn - Skip if Vx == nn
            Op.SNE_VX_NN: self._4xnn,   # 4xnn - Skip if Vx != nn
            Op.SE_VX_VY: self._5xy0,    # 5xy0 - Skip if Vx == Vy
            Op.LD_VX_NN: self._6xnn,    # 6xnn - Vx = nn
            Op.ADD_VX_NN: self._7xnn,   # 7xnn - Vx += nn, no carry
            Op.LD_VX_VY: self._8xy0,    # 8xy0 - Vx = Vy
            Op.OR: self._8xy1,          # 8xy1 - Vx |= Vy
            Op.AND: self._8xy2,         # 8xy2 - Vx &= Vy
            Op.XOR: self._8xy3,         # 8xy3 - Vx ^= Vy
            Op.ADD: self._8xy4,         # 8xy4 - Vx += Vy, VF = carry
            Op.SUB: self._8xy5,         # 8xy5 - Vx -= Vy, VF = NOT borrow
            Op.SHR: self._8xy6,         # 8xy6 - Vx >>= 1, VF = bit shifted out
            Op.SUBN: self._8xy7,        # 8xy7 - Vx = Vy - Vx, VF = NOT borrow
            Op.SHL: self._8xyE,         # 8xyE - Vx <<= 1, VF = bit shifted out
            Op.SNE_VX_VY: self._9xy0,   # 9xy0 - Skip if Vx != Vy
            Op.LD_I: self._Annn,        # Annn - I = nnn
            Op.JP_V0: self._Bnnn,       # Bnnn - Jump to nnn + V0 (or Vx)
            Op.RND: self._Cxnn,         # Cxnn - Vx = random byte & nn
            Op.DRW: self._Dxyn,         # Dxyn - Draw sprite, VF = collision
            Op.SKP: self._Ex9E,         # Ex9E - Skip if key Vx held
            Op.SKNP: self._ExA1,        # ExA1 - Skip if key Vx not held
            Op.LD_VX_DT: self._Fx07,    # Fx07 - Vx = delay timer
            Op.WAITKEY: self._Fx0A,     # Fx0A - Wait for a key press
            Op.LD_DT_VX: self._Fx15,    # Fx15 - delay timer = Vx
            Op.LD_ST_VX: self._Fx18,    # Fx18 - sound timer = Vx
            Op.ADD_I_VX: self._Fx1E,    # Fx1E - I += Vx
            Op.FONT: self._Fx29,        # Fx29 - I = glyph address for digit Vx
            Op.BCD: self._Fx33,         # Fx33 - BCD of Vx at I, I+1, I+2
            Op.STORE: self._Fx55,       # Fx55 - store V0..Vx at I
            Op.LOAD: self._Fx65,        # Fx65 - load V0..Vx from I
            Op.UNKNOWN: self._unknown,
        }

    # ---- Opcode Handlers ----

    def _unknown(self, ins):
        logger.warning("Unknown opcode: %04X at 0x%03X", ins.word, self.state.pc - 2)

    def _0nnn(self, ins):
        logger.warning("SYS call ignored: %04X at 0x%03X", ins.word, self.state.pc - 2)

    def _00E0(self, ins):
        s = self.state
        s.framebuffer[:] = bytes(len(s.framebuffer))
        s.draw_flag = True

    def _00EE(self, ins):
        s = self.state
        if not s.stack:
            raise StackUnderflowError(s.pc - 2)
        s.pc = s.stack.pop()

    def _1nnn(self, ins):
        self.state.pc = ins.nnn

    def _2nnn(self, ins):
        s = self.state
        s.stack.append(s.pc)
        s.pc = ins.nnn

    def _3xnn(self, ins):
        s = self.state
        if s.V[ins.x] == ins.nn:
            s.pc += 2

    def _4xnn(self, ins):
        s = self.state
        if s.V[ins.x] != ins.nn:
            s.pc += 2

    def _5xy0(self, ins):
        s = self.state
        if s.V[ins.x] == s.V[ins.y]:
            s.pc += 2

    def _6xnn(self, ins):
        self.state.V[ins.x] = ins.nn

    def _7xnn(self, ins):
        V = self.state.V
        V[ins.x] = (V[ins.x] + ins.nn) & 0xFF

    def _8xy0(self, ins):
        V = self.state.V
        V[ins.x] = V[ins.y]

    def _8xy1(self, ins):
        V = self.state.V
        V[ins.x] |= V[ins.y]
        self._vf_reset()

    def _8xy2(self, ins):
        V = self.state.V
        V[ins.x] &= V[ins.y]
        self._vf_reset()

    def _8xy3(self, ins):
        V = self.state.V
        V[ins.x] ^= V[ins.y]
        self._vf_reset()

    def _vf_reset(self):
        if self.quirks.vf_reset:
            self.state.V[0xF] = 0

    # the flag is written last so it wins when x is F

    def _8xy4(self, ins):
        V = self.state.V
        total = V[ins.x] + V[ins.y]
        V[ins.x] = total & 0xFF
        V[0xF] = 1 if total > 0xFF else 0

    def _8xy5(self, ins):
        V = self.state.V
        vx, vy = V[ins.x], V[ins.y]
        V[ins.x] = (vx - vy) & 0xFF
        V[0xF] = 1 if vx >= vy else 0

    def _8xy7(self, ins):
        V = self.state.V
        vx, vy = V[ins.x], V[ins.y]
        V[ins.x] = (vy - vx) & 0xFF
        V[0xF] = 1 if vy >= vx else 0

    def _shift_source(self, ins):
        V = self.state.V
        return V[ins.y] if self.quirks.shift_uses_vy else V[ins.x]

    def _8xy6(self, ins):
        V = self.state.V
        value = self._shift_source(ins)
        V[ins.x] = value >> 1
        V[0xF] = value & 1

    def _8xyE(self, ins):
        V = self.state.V
        value = self._shift_source(ins)
        V[ins.x] = (value << 1) & 0xFF
        V[0xF] = (value >> 7) & 1

    def _9xy0(self, ins):
        s = self.state
        if s.V[ins.x] != s.V[ins.y]:
            s.pc += 2

    def _Annn(self, ins):
        self.state.I = ins.nnn

    def _Bnnn(self, ins):
        s = self.state
        offset = s.V[ins.x] if self.quirks.jump_uses_vx else s.V[0]
        s.pc = ins.nnn + offset

    def _Cxnn(self, ins):
        self.state.V[ins.x] = self.rng.getrandbits(8) & ins.nn

    def _Dxyn(self, ins):
        s = self.state
        width, height = config.width, config.height
        wrap = self.quirks.wrap_sprites
        buf = s.framebuffer
        px = s.V[ins.x] % width
        py = s.V[ins.y] % height
        s.V[0xF] = 0
        collision = 0
        rows = s.read_block(s.I, ins.n)
        for row, sprite in enumerate(rows):
            y = py + row
            if y >= height:
                if not wrap:
                    break
                y %= height
            base = y * width
            for bit in range(8):
                if not sprite & (0x80 >> bit):
                    continue
                x = px + bit
                if x >= width:
                    if not wrap:
                        break
                    x %= width
                index = base + x
                collision |= buf[index]
                buf[index] ^= 1
        s.V[0xF] = collision
        s.draw_flag = True
        log("Drew sprite, collision=%d" % collision, logger=logger)

    def _Ex9E(self, ins):
        s = self.state
        if s.keys[s.V[ins.x] & 0xF]:
            s.pc += 2

    def _ExA1(self, ins):
        s = self.state
        if not s.keys[s.V[ins.x] & 0xF]:
            s.pc += 2

    def _Fx07(self, ins):
        s = self.state
        s.V[ins.x] = s.delay_timer

    def _Fx0A(self, ins):
        s = self.state
        if s.key_pressed is None:
            s.pc -= 2  # stall, the same instruction is fetched again next step
            return
        s.V[ins.x] = s.key_pressed
        s.key_pressed = None

    def _Fx15(self, ins):
        s = self.state
        s.delay_timer = s.V[ins.x]

    def _Fx18(self, ins):
        s = self.state
        s.sound_timer = s.V[ins.x]

    def _Fx1E(self, ins):
        s = self.state
        s.I = (s.I + s.V[ins.x]) & 0xFFFF

    def _Fx29(self, ins):
        s = self.state
        s.I = config.FONT_START + (s.V[ins.x] & 0xF) * config.GLYPH_SIZE

    def _Fx33(self, ins):
        s = self.state
        v = s.V[ins.x]
        s.write_block(s.I, bytes([v // 100, (v // 10) % 10, v % 10]))

    def _Fx55(self, ins):
        s = self.state
        s.write_block(s.I, bytes(s.V[:ins.x + 1]))
        if self.quirks.memory_increment:
            s.I += 1

    def _Fx65(self, ins):
        s = self.state
        s.V[:ins.x + 1] = list(s.read_block(s.I, ins.x + 1))
        if self.quirks.memory_increment:
            s.I += 1
