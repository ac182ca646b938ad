# The driver. We subclass pyglet's Window (graphics, sound output and
# keyboard handling) and override what we need from there. The window owns
# a Chip8CPU and feeds it three things on the pyglet clock: instruction
# steps, 60 Hz timer ticks and key snapshots. After each batch it renders if
# the core asked for a redraw and beeps if it asked for sound.

import logging

import pyglet
from pyglet.window import key

from . import config
from .audio import Beeper
from .cpu import Chip8CPU
from .display import framebuffer_to_rgba
from .errors import Chip8Error
from .log import debug_enabled, set_debug
from .quirks import Mode
from .timers import InstructionPacer, TimerClock

logger = logging.getLogger("chip8.window")

# Key mapping - maps physical keyboard keys to CHIP-8 keypad
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):

    def __init__(self, program, mode=Mode.CHIP8, scale=config.scale, caption="CHIP-8 Emulator"):
        self.scale = scale
        self.window_w = config.width * scale
        self.window_h = config.height * scale
        super().__init__(self.window_w, self.window_h, caption=caption, resizable=False, vsync=False)

        self.cpu = Chip8CPU(mode)
        self.cpu.load_program(program)
        self.has_exit = False

        # input snapshot handed to the core every cpu tick
        self.keys = [0] * 16
        self._pending_key = None

        self.pacer = InstructionPacer(mode.cpu_hz)
        self.timer_clock = TimerClock()
        self.beeper = Beeper()

        self.image = pyglet.image.ImageData(
            self.window_w,
            self.window_h,
            'RGBA',
            framebuffer_to_rgba(self.cpu.state.frame(), scale).tobytes(),
        )

        # ---- Performance Counters ----
        self._fps_counter = 0
        self._last_cycles = 0
        self.fps_label = self._hud_label("FPS: 0", self.window_h - 15)
        self.cps_label = self._hud_label("Cycles/s: 0", self.window_h - 30)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

        # Schedule CPU and timer ticks
        pyglet.clock.schedule(self._cpu_tick)
        pyglet.clock.schedule_interval(self._timer_tick, config.TIMER_INTERVAL)

        logger.info("Running %d byte program in %s mode", len(program), mode.value)

    def _hud_label(self, text, y):
        return pyglet.text.Label(
            text,
            font_size=12,
            x=5,
            y=y,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 255, 255),
        )

    def _update_bench(self, dt):
        cycles = self.cpu.cycle_count
        self.fps_label.text = f"FPS: {self._fps_counter / dt:.1f}"
        self.cps_label.text = f"Cycles/s: {int((cycles - self._last_cycles) / dt)}"
        self._fps_counter = 0
        self._last_cycles = cycles

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.stop()
        elif symbol == key.F1:
            set_debug(not debug_enabled())
            logger.info("debug logging %s", "on" if debug_enabled() else "off")
        elif symbol in keymap:
            self.keys[keymap[symbol]] = 1
            self._pending_key = keymap[symbol]

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.keys[keymap[symbol]] = 0

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        if self.has_exit:
            return
        state = self.cpu.state
        state.set_keys(self.keys, self._pending_key)
        self._pending_key = None
        try:
            self.cpu.run(self.pacer.due(dt))
        except Chip8Error as e:
            logger.error("Emulation error: %s", e)
            self.stop()
            return
        if state.consume_draw():
            self._render()

    # ---- timers ----
    def _timer_tick(self, dt):
        if self.has_exit:
            return
        self.timer_clock.run(self.cpu, dt)
        if self.cpu.state.consume_sound():
            self.beeper.beep()
        elif self.cpu.state.sound_timer == 0:
            self.beeper.stop()

    # ---- Drawing ----
    def _render(self):
        scaled = framebuffer_to_rgba(self.cpu.state.frame(), self.scale)
        self.image.set_data('RGBA', self.window_w * 4, scaled.tobytes())

    def on_draw(self):
        self.clear()
        self.image.blit(0, 0)
        self.fps_label.draw()
        self.cps_label.draw()
        self._fps_counter += 1

    def stop(self):
        self.has_exit = True
        pyglet.clock.unschedule(self._cpu_tick)
        pyglet.clock.unschedule(self._timer_tick)
        pyglet.clock.unschedule(self._update_bench)
        self.beeper.stop()
        self.close()
