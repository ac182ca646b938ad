"""Compatibility modes and the quirk flags each one selects.

The three dialects only disagree on a handful of instructions, so instead of
keeping an opcode table per dialect the CPU carries one `Quirks` value and
checks the relevant flag inside those few handlers.
"""

from dataclasses import dataclass
from enum import Enum

from . import config


class Mode(Enum):
    CHIP8 = "chip8"     # legacy COSMAC VIP interpreter
    SCHIP = "schip"     # SUPER-CHIP 1.1 (HP48)
    XOCHIP = "xochip"

    @classmethod
    def parse(cls, name):
        try:
            return cls(name.strip().lower().replace("-", ""))
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"unknown mode {name!r} (choose from {choices})") from None

    @property
    def cpu_hz(self):
        """Instructions per second, or None when the driver should not throttle."""
        if self is Mode.CHIP8:
            return config.LEGACY_CPU_HZ
        return None


@dataclass(frozen=True)
class Quirks:
    vf_reset: bool          # 8xy1/8xy2/8xy3 clear VF
    shift_uses_vy: bool     # 8xy6/8xyE load Vy into Vx before shifting
    jump_uses_vx: bool      # Bnnn adds V[x] instead of V0
    wrap_sprites: bool      # Dxyn wraps at the screen edge instead of clipping
    memory_increment: bool  # Fx55/Fx65 bump I by one after the copy

    @classmethod
    def for_mode(cls, mode):
        return _PRESETS[mode]


_PRESETS = {
    Mode.CHIP8: Quirks(
        vf_reset=True,
        shift_uses_vy=True,
        jump_uses_vx=False,
        wrap_sprites=False,
        memory_increment=False,
    ),
    Mode.SCHIP: Quirks(
        vf_reset=False,
        shift_uses_vy=False,
        jump_uses_vx=True,
        wrap_sprites=False,
        memory_increment=False,
    ),
    Mode.XOCHIP: Quirks(
        vf_reset=True,
        shift_uses_vy=True,
        jump_uses_vx=True,
        wrap_sprites=True,
        memory_increment=True,
    ),
}
