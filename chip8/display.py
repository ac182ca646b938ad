# Turns the 1-bit framebuffer into the RGBA bytes pyglet's ImageData wants.
# Upscaling happens on the CPU with numpy.repeat, one pass per axis.

import numpy as np

from . import config

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def framebuffer_to_rgba(frame, scale=config.scale, on=WHITE, off=BLACK):
    """Return a (height*scale, width*scale, 4) uint8 array.

    Rows are flipped so row 0 of the result is the bottom of the screen,
    matching pyglet's bottom-left origin.
    """
    pixels = np.asarray(frame, dtype=np.uint8).reshape(config.height, config.width)
    small = np.empty((config.height, config.width, 4), dtype=np.uint8)
    small[..., :3] = np.where(pixels[..., None] != 0, np.array(on, np.uint8), np.array(off, np.uint8))
    small[..., 3] = 255
    small = small[::-1]

    if scale != 1:
        return np.repeat(np.repeat(small, scale, axis=0), scale, axis=1)
    return np.ascontiguousarray(small)
