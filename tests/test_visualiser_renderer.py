"""Tests for the particle renderer."""

import numpy as np
import pytest

from musicswirl.canvas import Canvas
from musicswirl.particle import ParticleField
from musicswirl.visualiser_renderer import VisualiserRenderer, hsl_to_rgb


class TestHslToRgb:
    @pytest.mark.parametrize(
        "hue, expected",
        [
            (0, (255, 0, 0)),
            (120, (0, 255, 0)),
            (240, (0, 0, 255)),
            (360, (255, 0, 0)),
        ],
    )
    def test_primary_hues(self, hue, expected):
        assert hsl_to_rgb(hue, 1.0, 0.5) == expected


class TestParticleSprites:
    @pytest.fixture
    def renderer(self):
        return VisualiserRenderer()

    def test_hue_orbit_and_radius(self, renderer):
        field = ParticleField(capacity=4)
        sprites = renderer.particle_sprites([255, 127.5], 0, field, (800, 600))

        assert len(sprites) == 2
        assert sprites[0].hue == 0
        assert sprites[0].x == 0
        assert sprites[0].radius == pytest.approx(25 * 1.1**3)
        assert sprites[1].hue == 180
        assert sprites[1].x == pytest.approx(50)
        assert sprites[1].radius == pytest.approx(12.5 * 1.1**3)
        assert sprites[1].color == (0, 255, 255)

    def test_amplitude_extends_orbit(self, renderer):
        field = ParticleField(capacity=4)
        sprites = renderer.particle_sprites([10, 10], 255, field, (800, 600))
        # (100 + 200) / 2
        assert sprites[1].x == pytest.approx(150)

    def test_orbit_uses_longer_viewport_side(self, renderer):
        field = ParticleField(capacity=4)
        landscape = renderer.particle_sprites([10, 10], 0, field, (800, 600))
        portrait = renderer.particle_sprites([10, 10], 0, field, (600, 800))
        assert landscape[1].x == portrait[1].x == pytest.approx(50)

    def test_angle_comes_from_field(self, renderer):
        field = ParticleField(capacity=4)
        field.angle[:3] = [10, 20, 30]
        sprites = renderer.particle_sprites([5, 5, 5], 0, field, (100, 100))
        assert [s.angle for s in sprites] == [10, 20, 30]

    def test_empty_spectrum(self, renderer):
        assert renderer.particle_sprites([], 0, None, (100, 100)) == []


class TestDraw:
    def test_empty_spectrum_only_fades(self):
        canvas = Canvas(40, 40)
        canvas.pixels[:] = 255
        VisualiserRenderer().draw(canvas, [], 0, ParticleField(capacity=4))

        assert (canvas.pixels >= 25).all()
        assert (canvas.pixels <= 26).all()

    def test_first_particle_sits_at_centre(self):
        canvas = Canvas(200, 200)
        VisualiserRenderer().draw(canvas, [255], 0, ParticleField(capacity=4))

        b, g, r = canvas.pixels[100, 100]
        assert (b, g) == (0, 0)
        assert 203 <= r <= 205
        assert not canvas.pixels[0, 0].any()

    def test_particles_rotate_by_field_angle(self):
        canvas = Canvas(400, 400)
        field = ParticleField(capacity=4)
        field.angle[1] = 90

        VisualiserRenderer().draw(canvas, [50, 50], 0, field)

        # Orbit reach is 400 / 8 = 50, so particle 1 sits 25px out, turned to point down
        assert canvas.pixels[225, 200].any()
        assert not canvas.pixels[200, 225].any()

    def test_leaves_canvas_state_clean(self):
        canvas = Canvas(50, 50)
        VisualiserRenderer().draw(canvas, [100, 200, 50], 30, ParticleField(capacity=4))
        assert canvas.global_alpha == 1.0
        np.testing.assert_array_equal(canvas._matrix, np.eye(3))

    def test_viewport_overrides_canvas_size(self):
        canvas = Canvas(100, 100)
        field = ParticleField(capacity=4)
        VisualiserRenderer().draw(canvas, [5, 100], 0, field, viewport=(800, 100))
        # Orbit of 100px puts particle 1 at x = 50 + 50, on the right edge
        assert canvas.pixels[50, 98].any()
