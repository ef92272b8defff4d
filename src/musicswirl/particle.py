import numpy as np

from musicswirl.constants import BUFFER_SIZE, VELOCITY_LIMIT, VELOCITY_STEP
from musicswirl.range_mapper import map_range


class ParticleField:
    """Rotation state for every particle slot, indexed by spectrum rank."""

    def __init__(self, capacity=BUFFER_SIZE):
        self.capacity = capacity
        self.reset()

    def reset(self):
        """Zero all angles (degrees) and angular velocities."""
        self.angle = np.zeros(self.capacity)
        self.angular_velocity = np.zeros(self.capacity)

    def update(self, spectrum):
        """
        Accelerate, wrap and rotate the first len(spectrum) particles.

        Slots past the end of the spectrum keep their previous state.
        """
        n = len(spectrum)
        if n > self.capacity:
            raise ValueError(f"spectrum has {n} entries but the field only holds {self.capacity}")

        velocity = self.angular_velocity[:n] + map_range(
            np.asarray(spectrum, dtype=np.float64), 0, 255, 0, VELOCITY_STEP
        )
        velocity[velocity > VELOCITY_LIMIT] = 0

        self.angular_velocity[:n] = velocity
        self.angle[:n] += velocity
