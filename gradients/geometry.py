"""Surface sampling and gradient arrow geometry for the renderer."""
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .families import FunctionInstance, Point

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class SurfaceGrid:
    xs: np.ndarray
    ys: np.ndarray
    zs: np.ndarray     # rows follow ys, columns follow xs


@dataclass(frozen=True)
class GradientSegment:
    start: Vec3
    end: Vec3

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end

    def trace(self) -> Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]:
        """([x0, x1], [y0, y1], [z0, z1]) as line plots want them."""
        return tuple(zip(self.start, self.end))


def axis_samples(center: float, half_range: float, step: float) -> np.ndarray:
    # last sample is the final step that still lands inside the window
    n = int(math.floor(2 * half_range / step + 1e-9)) + 1
    return center - half_range + step * np.arange(n)


def sample_surface(instance: FunctionInstance, center: Point,
                   half_range: float = 5.0, step: float = 0.3) -> SurfaceGrid:
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if half_range < 0:
        raise ValueError(f"half_range must not be negative, got {half_range}")
    xs = axis_samples(center.x, half_range, step)
    ys = axis_samples(center.y, half_range, step)
    X, Y = np.meshgrid(xs, ys)
    zs = np.broadcast_to(np.asarray(instance.evaluate(X, Y), dtype=float), X.shape).copy()
    return SurfaceGrid(xs, ys, zs)


def compute_arrow(instance: FunctionInstance, point: Point, visual_length: float = 0.3) -> GradientSegment:
    """Fixed-length arrow along the gradient direction, flat at f(point).

    A vanishing gradient has no direction, so the arrow collapses onto the point.
    """
    dfdx, dfdy = instance.gradient(point)
    z0 = float(instance.evaluate(point.x, point.y))
    m = math.hypot(dfdx, dfdy)
    if m > 0:
        dx, dy = dfdx / m * visual_length, dfdy / m * visual_length
    else:
        dx = dy = 0.0
    x0, y0 = float(point.x), float(point.y)
    return GradientSegment((x0, y0, z0), (x0 + dx, y0 + dy, z0))
