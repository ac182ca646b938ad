# ---- Configuration ----
# Sizes, rates and switches shared by the core and the pyglet driver.
# Everything here is read once at startup.

import os

# display
scale = 10
width, height = 64, 32
window_width, window_height = width * scale, height * scale

# memory layout
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
FONT_START = 0x000
FONT_END = 0x050   # first byte after the 80-byte font
GLYPH_SIZE = 5

# timing
timer_HZ = 60
TIMER_INTERVAL = 1.0 / timer_HZ
LEGACY_CPU_HZ = 700
UNTHROTTLED_BATCH = 1000   # steps per clock callback when a mode has no rate limit

# make it true if you want the logs (or export CHIP8_DEBUG=1)
DEBUG = int(os.getenv("CHIP8_DEBUG", 0)) >= 1

# Standard CHIP-8 fontset (80 bytes)
fontset = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
]  # notice 80 bytes
