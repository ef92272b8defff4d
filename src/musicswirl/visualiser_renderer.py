import colorsys
import math
from typing import NamedTuple

from musicswirl.constants import (
    AMPLITUDE_REACH,
    MAX_RADIUS,
    PARTICLE_ALPHA,
    TRAIL_ALPHA,
    TUNING_VALUE,
)
from musicswirl.range_mapper import map_range


def hsl_to_rgb(hue, saturation, lightness):
    """Convert CSS style hsl (degrees, 0-1, 0-1) to an 8-bit RGB tuple."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360, lightness, saturation)
    return (round(r * 255), round(g * 255), round(b * 255))


class ParticleSprite(NamedTuple):
    hue: float
    x: float
    radius: float
    angle: float  # degrees
    color: tuple


class VisualiserRenderer:
    """
    Paints the particle swirl for one frame.

    Keeps no state between frames; everything that moves lives in the
    ParticleField and the canvas pixels themselves (the trail).
    """

    def __init__(self, tuning_value=TUNING_VALUE):
        self.tuning_value = tuning_value

    def particle_sprites(self, spectrum, amplitude, field, viewport):
        """Compute the render parameters for every entry of the spectrum."""
        count = len(spectrum)
        vw, vh = viewport
        max_x = (vw if vw > vh else vh) / 8
        reach = max_x + map_range(amplitude, 0, 255, 0, AMPLITUDE_REACH)

        sprites = []
        for i, value in enumerate(spectrum):
            hue = map_range(i, 0, count, 0, 360)
            sprites.append(
                ParticleSprite(
                    hue=hue,
                    x=map_range(i, 0, count, 0, reach),
                    radius=map_range(float(value), 0, 255, 0, MAX_RADIUS) * self.tuning_value,
                    angle=float(field.angle[i]),
                    color=hsl_to_rgb(hue, 1.0, 0.5),
                )
            )
        return sprites

    def draw(self, canvas, spectrum, amplitude, field, viewport=None):
        """
        Fade the previous frame and draw one rotated disc per spectrum entry.

        `viewport` sizes the orbit and defaults to the canvas size.
        """
        cw, ch = canvas.width, canvas.height
        if viewport is None:
            viewport = (cw, ch)

        # Translucent fill instead of a clear leaves motion trails
        canvas.fill_style = (0, 0, 0, TRAIL_ALPHA)
        canvas.fill_rect(0, 0, cw, ch)

        canvas.save()
        canvas.global_alpha = PARTICLE_ALPHA

        for sprite in self.particle_sprites(spectrum, amplitude, field, viewport):
            canvas.save()
            canvas.translate(cw / 2, ch / 2)
            canvas.rotate(math.radians(sprite.angle))
            canvas.fill_style = sprite.color
            canvas.begin_path()
            canvas.arc(sprite.x, 0, sprite.radius)
            canvas.fill()
            canvas.restore()

        canvas.restore()
