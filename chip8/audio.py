# Beep output. The core only raises sound requests; this plays a short sine
# tone for them through pyglet.media, one at a time.

import pyglet
from pyglet.media import synthesis


def generate_beep(duration=0.1, frequency=440, sample_rate=44100):
    # Use a Sine waveform from pyglet.media.synthesis
    wave = synthesis.Sine(duration=duration, frequency=frequency, sample_rate=sample_rate)
    return pyglet.media.StaticSource(wave)


class Beeper:

    def __init__(self, frequency=440, duration=0.2):
        self.source = generate_beep(duration=duration, frequency=frequency)
        self.player = None
        self.sound_playing = False

    def beep(self):
        # Play beep only if it hasn't started yet
        if self.sound_playing:
            return
        player = pyglet.media.Player()
        player.queue(self.source)
        player.play()
        self.player = player
        self.sound_playing = True

        def on_eos():
            self.sound_playing = False
            player.delete()

        player.on_eos = on_eos

    def stop(self):
        if self.player is not None and self.sound_playing:
            self.player.pause()
            self.player.delete()
        self.player = None
        self.sound_playing = False
