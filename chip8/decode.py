"""Fetch and decode.

`fetch` pulls the big-endian instruction word at PC and advances PC by 2.
`decode` splits the word into its operand fields and tags it with an `Op`
by walking the (mask, pattern) table, so every word decodes to something,
at worst `Op.UNKNOWN`.
"""

from collections import namedtuple
from enum import Enum

from . import config
from .errors import MemoryAccessError


class Op(Enum):
    SYS = "SYS"
    CLS = "CLS"
    RET = "RET"
    JP = "JP"
    CALL = "CALL"
    SE_VX_NN = "SE_VX_NN"
    SNE_VX_NN = "SNE_VX_NN"
    SE_VX_VY = "SE_VX_VY"
    LD_VX_NN = "LD_VX_NN"
    ADD_VX_NN = "ADD_VX_NN"
    LD_VX_VY = "LD_VX_VY"
    OR = "OR"
    AND = "AND"
    XOR = "XOR"
    ADD = "ADD"
    SUB = "SUB"
    SHR = "SHR"
    SUBN = "SUBN"
    SHL = "SHL"
    SNE_VX_VY = "SNE_VX_VY"
    LD_I = "LD_I"
    JP_V0 = "JP_V0"
    RND = "RND"
    DRW = "DRW"
    SKP = "SKP"
    SKNP = "SKNP"
    LD_VX_DT = "LD_VX_DT"
    WAITKEY = "WAITKEY"
    LD_DT_VX = "LD_DT_VX"
    LD_ST_VX = "LD_ST_VX"
    ADD_I_VX = "ADD_I_VX"
    FONT = "FONT"
    BCD = "BCD"
    STORE = "STORE"
    LOAD = "LOAD"
    UNKNOWN = "UNKNOWN"


# dispatch table, first match wins
OPCODE_TABLE = [
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF000, 0x0000, Op.SYS),

    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_VX_NN),
    (0xF000, 0x4000, Op.SNE_VX_NN),
    (0xF00F, 0x5000, Op.SE_VX_VY),
    (0xF000, 0x6000, Op.LD_VX_NN),
    (0xF000, 0x7000, Op.ADD_VX_NN),

    (0xF00F, 0x8000, Op.LD_VX_VY),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),

    (0xF00F, 0x9000, Op.SNE_VX_VY),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),

    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),

    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.WAITKEY),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I_VX),
    (0xF0FF, 0xF029, Op.FONT),
    (0xF0FF, 0xF033, Op.BCD),
    (0xF0FF, 0xF055, Op.STORE),
    (0xF0FF, 0xF065, Op.LOAD),
]


_MNEMONICS = {
    Op.SYS: "SYS {nnn:03X}",
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP {nnn:03X}",
    Op.CALL: "CALL {nnn:03X}",
    Op.SE_VX_NN: "SE V{x:X}, 0x{nn:02X}",
    Op.SNE_VX_NN: "SNE V{x:X}, 0x{nn:02X}",
    Op.SE_VX_VY: "SE V{x:X}, V{y:X}",
    Op.LD_VX_NN: "LD V{x:X}, 0x{nn:02X}",
    Op.ADD_VX_NN: "ADD V{x:X}, 0x{nn:02X}",
    Op.LD_VX_VY: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}, V{y:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}, V{y:X}",
    Op.SNE_VX_VY: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, {nnn:03X}",
    Op.JP_V0: "JP V0, {nnn:03X}",
    Op.RND: "RND V{x:X}, 0x{nn:02X}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.WAITKEY: "LD V{x:X}, K",
    Op.LD_DT_VX: "LD DT, V{x:X}",
    Op.LD_ST_VX: "LD ST, V{x:X}",
    Op.ADD_I_VX: "ADD I, V{x:X}",
    Op.FONT: "LD F, V{x:X}",
    Op.BCD: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
    Op.UNKNOWN: "??? {word:04X}",
}


class Instruction(namedtuple("Instruction", "op word x y n nn nnn")):
    __slots__ = ()

    def mnemonic(self):
        return _MNEMONICS[self.op].format(**self._asdict())

    def __str__(self):
        return "%04X  %s" % (self.word, self.mnemonic())


def decode(word):
    x = (word & 0x0F00) >> 8
    y = (word & 0x00F0) >> 4
    n = word & 0x000F
    nn = word & 0x00FF
    nnn = word & 0x0FFF
    for mask, pattern, op in OPCODE_TABLE:
        if (word & mask) == pattern:
            break
    else:
        op = Op.UNKNOWN
    return Instruction(op, word, x, y, n, nn, nnn)


def fetch(state):
    # guard pc bounds
    pc = state.pc
    if pc < 0 or pc + 1 >= config.MEMORY_SIZE:
        raise MemoryAccessError(pc, "PC out of bounds")
    word = (state.memory[pc] << 8) | state.memory[pc + 1]
    state.pc = pc + 2
    return word
