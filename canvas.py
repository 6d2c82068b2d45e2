import logging
import math

import numpy as np

from color import Pixel

logger = logging.getLogger(__name__)

CIRCLE_SEGMENTS = 1000

# Luminance weights for the grayscale effect (NTSC coefficients).
GRAY_WEIGHTS = (0.298912, 0.586611, 0.114478)

NEIGHBOURS = ((0, 1), (-1, 0), (0, -1), (1, 0))


def _trunc_div(a, n):
    """Integer division rounding toward zero, for a positive divisor."""
    q = abs(a) // n
    return q if a >= 0 else -q


def normalize_degree(degree):
    """Maps any integer angle onto 0..359."""
    if degree < 0:
        degree = 360 - (-degree % 360)
    return degree % 360


class Canvas:
    """
    Pixel store made of two equally sized RGBA grids.

    ``buffer`` holds the committed picture. ``overlay`` is scratch space that
    drawing operations write into; ``commit`` alpha-blends it over ``buffer``
    and zeroes it again, so between commands the overlay is always empty.
    Both grids are indexed ``[y, x]``.
    """
    def __init__(self, width, height, circle_segments=CIRCLE_SEGMENTS):
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.circle_segments = circle_segments
        self.buffer = np.zeros((height, width, 4), dtype=np.uint8)
        self.overlay = np.zeros((height, width, 4), dtype=np.uint8)

    def contains(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x, y):
        """Returns the committed pixel at (x, y)."""
        return Pixel(*(int(c) for c in self.buffer[y, x]))

    def clear(self):
        """Erases the committed picture to transparent black."""
        self.buffer.fill(0)

    def reset(self):
        """Erases both the committed picture and any pending overlay."""
        self.buffer.fill(0)
        self.overlay.fill(0)

    # --- Rasterizer (overlay only) ---

    def draw_point(self, x, y, color):
        """Writes one pixel into the overlay; points off the canvas are ignored."""
        if self.contains(x, y):
            self.overlay[y, x] = color

    def draw_line(self, x0, y0, x1, y1, color):
        """Steps along the longer axis with truncating integer interpolation."""
        n = max(abs(x1 - x0), abs(y1 - y0))
        if n == 0:
            self.draw_point(x0, y0, color)
            return
        for i in range(n + 1):
            x = x0 + _trunc_div(i * (x1 - x0), n)
            y = y0 + _trunc_div(i * (y1 - y0), n)
            self.draw_point(x, y, color)

    def draw_rect(self, x0, y0, x1, y1, color):
        """Draws a rectangle outline counter-clockwise from (x0, y0)."""
        self.draw_line(x0, y0, x0, y1, color)
        self.draw_line(x0, y1, x1, y1, color)
        self.draw_line(x1, y1, x1, y0, color)
        self.draw_line(x1, y0, x0, y0, color)

    def draw_circle(self, cx, cy, radius, color):
        """Approximates a circle outline with ``circle_segments`` straight lines."""
        n = self.circle_segments
        theta = 2 * math.pi / n
        for i in range(n):
            # int() truncates toward zero, not floor
            x0 = cx + int(radius * math.cos(i * theta))
            y0 = cy + int(radius * math.sin(i * theta))
            x1 = cx + int(radius * math.cos((i + 1) * theta))
            y1 = cy + int(radius * math.sin((i + 1) * theta))
            self.draw_line(x0, y0, x1, y1, color)

    # --- Compositor ---

    def is_wall(self, x, y):
        """True if either the committed or the pending pixel has any opacity."""
        return self.buffer[y, x, 3] != 0 or self.overlay[y, x, 3] != 0

    def commit(self):
        """Blends the overlay over the committed picture, then clears the overlay."""
        src = self.overlay.astype(np.int64)
        dst = self.buffer.astype(np.int64)
        sa = src[..., 3:4]
        da = dst[..., 3:4]

        alpha = np.minimum((255 * sa + (256 - sa) * da) // 255, 255)
        numerator = src[..., :3] * sa * 255 + dst[..., :3] * (255 - sa) * da
        divisor = np.where(alpha == 0, 1, alpha)
        channels = np.where(alpha == 0, 0, numerator // divisor // 255)

        self.buffer[..., :3] = np.clip(channels, 0, 255)
        self.buffer[..., 3:4] = alpha
        self.overlay.fill(0)

    # --- Flood fill ---

    def fill(self, x, y, color):
        """
        Paints the 4-connected region of non-wall pixels around (x, y).

        Walls are checked against both the canvas and the overlay, so pixels
        drawn earlier in the same command already act as boundaries.
        """
        if not self.contains(x, y) or self.is_wall(x, y):
            return
        stack = [(x, y)]
        visited = {(x, y)}
        while stack:
            px, py = stack.pop()
            self.draw_point(px, py, color)
            for dx, dy in NEIGHBOURS:
                nx, ny = px + dx, py + dy
                if (nx, ny) in visited:
                    continue
                if not self.contains(nx, ny) or self.is_wall(nx, ny):
                    continue
                visited.add((nx, ny))
                stack.append((nx, ny))
        logger.debug("fill from (%d, %d) painted %d pixels", x, y, len(visited))

    # --- Effects ---

    def grayscale(self):
        """Replaces each committed pixel's colour with its luminance; alpha is kept."""
        rgb = self.buffer[..., :3].astype(np.float64)
        wr, wg, wb = GRAY_WEIGHTS
        luminance = (wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]).astype(np.uint8)
        self.buffer[..., 0] = luminance
        self.buffer[..., 1] = luminance
        self.buffer[..., 2] = luminance

    def _gradient_corners(self, quadrant):
        right, bottom = self.width - 1, self.height - 1
        starts = ((0, bottom), (right, bottom), (right, 0), (0, 0))
        ends = ((right, 0), (0, 0), (0, bottom), (right, bottom))
        return starts[quadrant], ends[quadrant]

    def gradient(self, degree, color_a, color_b):
        """
        Fills the overlay with a two-colour gradient running along ``degree``.

        The angle picks one of four quadrants; the sweep starts at the canvas
        corner opposite that direction and ends at the far corner. Each
        pixel's position is projected onto the direction vector (y grows
        downward, so the y term is negated) and the colour is interpolated by
        the square root of that projection, normalized by the end corner's.
        Projections that come out negative through floating-point error are
        treated as zero.
        """
        degree = normalize_degree(degree)
        theta = degree * 2 * math.pi / 360
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        (sx, sy), (ex, ey) = self._gradient_corners(degree // 90)

        ys, xs = np.mgrid[0:self.height, 0:self.width]
        projection = (xs - sx) * cos_t - (ys - sy) * sin_t
        distance = np.sqrt(np.maximum(projection, 0.0))
        span = math.sqrt(max((ex - sx) * cos_t - (ey - sy) * sin_t, 0.0))
        if span == 0:
            fraction = np.zeros_like(distance)
        else:
            fraction = distance / span

        for channel in range(4):
            start = float(color_a[channel])
            end = float(color_b[channel])
            values = start + (end - start) * fraction
            self.overlay[..., channel] = np.trunc(np.clip(values, 0, 255)).astype(np.uint8)
