"""
Matplotlib rendering of the visible star set.

The viewer's core only produces the list of visible points; this module turns
that list into a 3D scatter snapshot. Colour comes from the BP-RP index and
marker size from the stellar radius, each of which can be switched off.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from .constants import (
    BP_RP_DOMAIN,
    FIGURE_DPI,
    FIGURE_SIZE_INCHES,
    STAR_POINT_MAX_SIZE,
    STAR_POINT_MIN_SIZE,
)
from .geometry import Point3D

logger = logging.getLogger(__name__)


def bp_rp_to_rgb(bp_rp, alpha=1.0):
    """Convert Gaia BP-RP colour index to RGBA on the Spectral colormap.

    Values are normalised over BP_RP_DOMAIN (blue stars at the low end, red at
    the high end). NaN values (stars without colour data) come out white.
    """
    bp_rp = np.asarray(bp_rp, dtype=float)
    scalar = bp_rp.ndim == 0
    bp_rp = np.atleast_1d(bp_rp)

    lo, hi = BP_RP_DOMAIN
    normalized = np.clip((bp_rp - lo) / (hi - lo), 0.0, 1.0)
    # Spectral runs red -> blue, so flip it to put blue stars at low BP-RP.
    colors = matplotlib.colormaps["Spectral"](1.0 - np.nan_to_num(normalized))

    colors[~np.isfinite(bp_rp), :3] = 1.0
    colors[:, 3] = np.clip(alpha, 0.0, 1.0)

    if scalar:
        return tuple(colors[0])
    return colors


def point_sizes(radius, radius_enabled: bool = True, min_size=STAR_POINT_MIN_SIZE, max_size=STAR_POINT_MAX_SIZE):
    """Marker area per star from its radius in solar radii.

    With `radius_enabled` off (or a missing radius) every star gets the
    size of a one-solar-radius star.
    """
    radius = np.asarray(radius, dtype=float)
    if not radius_enabled:
        radius = np.ones_like(radius)
    radius = np.where(np.isfinite(radius) & (radius > 0), radius, 1.0)
    return np.clip(min_size * radius, min_size, max_size)


def _payload_attr(point: Point3D, name: str, default: float) -> float:
    value = getattr(point.payload, name, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def render_visible_stars(
    points: Sequence[Point3D],
    camera: Point3D,
    output_path: Path,
    *,
    max_distance: Optional[float] = None,
    color_enabled: bool = True,
    radius_enabled: bool = True,
    show_axes: bool = True,
):
    """Write a PNG scatter of `points` as seen around `camera`."""
    fig = plt.figure(figsize=(FIGURE_SIZE_INCHES, FIGURE_SIZE_INCHES), dpi=FIGURE_DPI)
    ax = fig.add_subplot(projection="3d")
    ax.set_facecolor("black")
    fig.patch.set_facecolor("black")

    if points:
        xyz = np.array([(p.x, p.y, p.z) for p in points], dtype=float)
        bp_rp = np.array([_payload_attr(p, "bp_rp", np.nan) for p in points])
        radius = np.array([_payload_attr(p, "radius", 1.0) for p in points])
        colors = bp_rp_to_rgb(bp_rp) if color_enabled else "white"
        ax.scatter(
            xyz[:, 0],
            xyz[:, 1],
            xyz[:, 2],
            s=point_sizes(radius, radius_enabled),
            c=colors,
            depthshade=False,
            linewidths=0,
        )

    if max_distance is not None:
        for setter, c in zip((ax.set_xlim, ax.set_ylim, ax.set_zlim), camera.as_tuple()):
            setter(c - max_distance, c + max_distance)

    if show_axes:
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_zlabel("z")
    else:
        ax.set_axis_off()

    ax.set_title(f"{len(points):,} visible stars", color="white")
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, facecolor=fig.get_facecolor())
    plt.close(fig)
    logger.info("Saved snapshot with %d stars to %s", len(points), output_path)
    return output_path


class SnapshotRenderer:
    """Renderer hook for a VisibilityManager.

    Each call replaces the held frame with the new visible list (never a
    delta). `save()` writes the held frame to disk.
    """

    def __init__(self, color_enabled: bool = True, radius_enabled: bool = True, show_axes: bool = True):
        self.color_enabled = color_enabled
        self.radius_enabled = radius_enabled
        self.show_axes = show_axes
        self.frame: list[Point3D] = []
        self.updates = 0

    def __call__(self, visible: list[Point3D]) -> None:
        self.frame = list(visible)
        self.updates += 1

    def save(self, output_path: Path, camera: Point3D, max_distance: Optional[float] = None):
        return render_visible_stars(
            self.frame,
            camera,
            output_path,
            max_distance=max_distance,
            color_enabled=self.color_enabled,
            radius_enabled=self.radius_enabled,
            show_axes=self.show_axes,
        )
