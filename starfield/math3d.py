import math

import numpy as np
from astropy import units as u

from .constants import FALLBACK_DISTANCE

_HOURANGLE_TO_RAD = (1.0 * u.hourangle).to_value(u.rad)
_DEG_TO_RAD = (1.0 * u.deg).to_value(u.rad)


def parallax_to_distance(parallax, fallback: float = FALLBACK_DISTANCE) -> float:
    """Distance as 1/parallax, or `fallback` when parallax is not positive.

    Missing and non-finite parallaxes also get the fallback, so the result
    is always a positive finite number.
    """
    if parallax is None:
        return fallback
    parallax = float(parallax)
    if parallax > 0 and math.isfinite(parallax):
        return 1.0 / parallax
    return fallback


def celestial_to_cartesian(
    ra_hours: float,
    dec_deg: float,
    parallax: float,
    scale: float,
    fallback: float = FALLBACK_DISTANCE,
):
    """Convert (RA in hours, Dec in degrees, parallax) to scaled x, y, z.

    The point lies at `distance * scale` along
    (cos(dec)cos(ra), cos(dec)sin(ra), sin(dec)), with RA converted from
    hour angle (15 degrees per hour) before the trigonometry.
    """
    r = parallax_to_distance(parallax, fallback) * scale
    phi = ra_hours * _HOURANGLE_TO_RAD
    theta = dec_deg * _DEG_TO_RAD
    return (
        r * math.cos(theta) * math.cos(phi),
        r * math.cos(theta) * math.sin(phi),
        r * math.sin(theta),
    )


def celestial_to_cartesian_array(
    ra_hours,
    dec_deg,
    parallax,
    scale: float,
    fallback: float = FALLBACK_DISTANCE,
):
    """Vectorised `celestial_to_cartesian`; returns an (N, 3) array.

    Rows with non-finite RA or Dec come out as NaN; callers filter them.
    """
    ra_hours = np.asarray(ra_hours, dtype=float)
    dec_deg = np.asarray(dec_deg, dtype=float)
    parallax = np.asarray(parallax, dtype=float)

    valid_parallax = np.isfinite(parallax) & (parallax > 0)
    safe_parallax = np.where(valid_parallax, parallax, 1.0)
    distance = np.where(valid_parallax, 1.0 / safe_parallax, fallback)

    r = distance * scale
    phi = ra_hours * _HOURANGLE_TO_RAD
    theta = dec_deg * _DEG_TO_RAD
    cos_theta = np.cos(theta)
    return np.column_stack(
        (r * cos_theta * np.cos(phi), r * cos_theta * np.sin(phi), r * np.sin(theta))
    )


def distances_from(origin_xyz, object_xyz):
    """Euclidean distance from `origin_xyz` (3,) to each row of `object_xyz` (N, 3)."""
    origin_xyz = np.asarray(origin_xyz, dtype=float)
    object_xyz = np.asarray(object_xyz, dtype=float).reshape(-1, 3)
    return np.linalg.norm(object_xyz - origin_xyz, axis=-1)
