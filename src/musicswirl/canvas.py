import math

import cv2
import numpy as np

# Sub-pixel precision for cv2 drawing calls
SHIFT = 4
SCALE = 1 << SHIFT


class Canvas:
    """
    A 2D drawing surface with an HTML canvas style API, backed by OpenCV.

    Colours are given as RGB or RGBA tuples (alpha in [0, 1]); pixels are
    stored in BGR order so the array can be handed straight to cv2.imshow.
    """

    def __init__(self, width, height):
        self.resize(width, height)

    def resize(self, width, height):
        """Reallocate the surface. Clears pixels and drawing state."""
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 3), dtype=np.uint8)

        self.fill_style = (0, 0, 0)
        self.global_alpha = 1.0
        self._matrix = np.eye(3)
        self._stack = []
        self._path = []

    # --- State ---

    def save(self):
        self._stack.append((self._matrix.copy(), self.fill_style, self.global_alpha))

    def restore(self):
        if not self._stack:
            return
        self._matrix, self.fill_style, self.global_alpha = self._stack.pop()

    def translate(self, tx, ty):
        self._matrix = self._matrix @ np.array([[1, 0, tx], [0, 1, ty], [0, 0, 1]], dtype=np.float64)

    def rotate(self, radians):
        """Rotate the coordinate frame clockwise (y points down)."""
        c, s = math.cos(radians), math.sin(radians)
        self._matrix = self._matrix @ np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=np.float64)

    def _to_device(self, x, y):
        px, py, _ = self._matrix @ (x, y, 1)
        return px, py

    def _paint_alpha_and_color(self):
        r, g, b, *rest = self.fill_style
        alpha = (rest[0] if rest else 1.0) * self.global_alpha
        return alpha, (int(b), int(g), int(r))

    def _blend(self, overlay, region, alpha):
        y0, y1, x0, x1 = region
        target = self.pixels[y0:y1, x0:x1]
        self.pixels[y0:y1, x0:x1] = cv2.addWeighted(overlay, alpha, target, 1 - alpha, 0)

    # --- Drawing ---

    def fill_rect(self, x, y, w, h):
        alpha, color = self._paint_alpha_and_color()
        if alpha <= 0:
            return

        corners = [self._to_device(cx, cy) for cx, cy in ((x, y), (x + w, y), (x + w, y + h), (x, y + h))]
        points = np.array([[round(px * SCALE), round(py * SCALE)] for px, py in corners], dtype=np.int32)

        overlay = self.pixels.copy()
        cv2.fillConvexPoly(overlay, points, color, cv2.LINE_AA, SHIFT)
        self._blend(overlay, (0, self.height, 0, self.width), alpha)

    def begin_path(self):
        self._path = []

    def arc(self, x, y, radius):
        """Add a full circle to the current path."""
        if radius < 0:
            raise ValueError(f"negative radius: {radius}")
        self._path.append((x, y, radius))

    def fill(self):
        alpha, color = self._paint_alpha_and_color()
        if alpha <= 0:
            return

        # Rotation and translation keep lengths; scale by sqrt(det) for the rest
        scale = math.sqrt(abs(np.linalg.det(self._matrix[:2, :2])))

        for x, y, radius in self._path:
            cx, cy = self._to_device(x, y)
            r = radius * scale
            if r <= 0:
                continue

            x0 = max(0, math.floor(cx - r) - 1)
            y0 = max(0, math.floor(cy - r) - 1)
            x1 = min(self.width, math.ceil(cx + r) + 2)
            y1 = min(self.height, math.ceil(cy + r) + 2)
            if x0 >= x1 or y0 >= y1:
                continue

            overlay = self.pixels[y0:y1, x0:x1].copy()
            center = (round((cx - x0) * SCALE), round((cy - y0) * SCALE))
            cv2.circle(overlay, center, round(r * SCALE), color, -1, cv2.LINE_AA, SHIFT)
            self._blend(overlay, (y0, y1, x0, x1), alpha)

    def to_rgb(self):
        return cv2.cvtColor(self.pixels, cv2.COLOR_BGR2RGB)
