# Wall-clock pacing for the two rates the machine runs at: the 60 Hz
# delay/sound timers and the instruction rate. Both accumulate elapsed time
# from the pyglet clock callbacks and report how many whole periods are due,
# so a late callback catches up instead of losing ticks.

from . import config


class TimerClock:

    def __init__(self, interval=config.TIMER_INTERVAL):
        self.interval = interval
        self.elapsed = 0.0

    def advance(self, dt):
        """Add dt seconds and return the number of whole intervals now due."""
        self.elapsed += dt
        due = int(self.elapsed // self.interval)
        self.elapsed -= due * self.interval
        return due

    def run(self, cpu, dt):
        """Tick the cpu timers once per due interval. Returns the tick count."""
        due = self.advance(dt)
        for _ in range(due):
            cpu.tick_timers()
        return due


class InstructionPacer:
    """How many instructions to execute for an elapsed dt.

    A rate of None means unthrottled: every call gets a fixed batch.
    """

    def __init__(self, rate, batch=config.UNTHROTTLED_BATCH):
        self.rate = rate
        self.batch = batch
        self._clock = TimerClock(1.0 / rate) if rate else None

    def due(self, dt):
        if self._clock is None:
            return self.batch
        return self._clock.advance(dt)
