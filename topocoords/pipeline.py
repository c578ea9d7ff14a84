"""
End-to-end observer-relative positions: geodetic -> ECEF -> ENU -> altitude/azimuth/range
"""

__all__ = ['look_angles', 'observe', 'observe_eci', 'observe_many']

from typing import Iterable, List, Sequence, Union

import numpy as np

from topocoords._const import COINCIDENT_ALTITUDE, DEGENERATE_AZIMUTH
from topocoords.calc import (
    COINCIDENT_WARNING, VERTICAL_WARNING, ecef_to_enu, eci_to_ecef, enu_rotation_matrix,
    enu_to_topocentric, geodetic_to_ecef
)
from topocoords.coordinates import (
    EcefVector, Ellipsoid, GeodeticPoint, TopocentricResult, WGS84
)
from topocoords.exceptions import InvalidInputError
from topocoords.utils.logging import warn_once


def look_angles(
    observer: GeodeticPoint,
    target_ecef: EcefVector,
    ellipsoid: Ellipsoid = WGS84,
) -> TopocentricResult:
    """
    Altitude, azimuth and range of an ECEF position as seen by an observer.

    Args:
        observer:
            The observer's geodetic position

        target_ecef:
            The target's ECEF position, in meters. Typically the output of an
            orbit propagator.

        ellipsoid:
            (Default WGS84) The reference ellipsoid the observer is defined on

    Returns:
        TopocentricResult
    """
    observer_ecef = geodetic_to_ecef(observer, ellipsoid=ellipsoid)
    enu = ecef_to_enu(observer.latitude, observer.longitude, observer_ecef, target_ecef)
    return enu_to_topocentric(enu)


def observe(
    observer: GeodeticPoint,
    target: Union[GeodeticPoint, EcefVector],
    ellipsoid: Ellipsoid = WGS84,
) -> TopocentricResult:
    """
    Altitude, azimuth and range of a target as seen by an observer.

    Args:
        observer:
            The observer's geodetic position

        target:
            The target, as either a geodetic position or an ECEF position in meters

        ellipsoid:
            (Default WGS84) The reference ellipsoid

    Returns:
        TopocentricResult
    """
    if isinstance(target, GeodeticPoint):
        target = geodetic_to_ecef(target, ellipsoid=ellipsoid)

    return look_angles(observer, target, ellipsoid=ellipsoid)


def observe_eci(
    observer: GeodeticPoint,
    position_eci: Sequence[float],
    sidereal_time: float,
    ellipsoid: Ellipsoid = WGS84,
) -> TopocentricResult:
    """
    Altitude, azimuth and range of an inertial (ECI) position.

    Args:
        observer:
            The observer's geodetic position

        position_eci:
            The target's (x, y, z) inertial position, in meters

        sidereal_time:
            Greenwich sidereal angle at the time of the position, in radians

        ellipsoid:
            (Default WGS84) The reference ellipsoid

    Returns:
        TopocentricResult
    """
    return look_angles(observer, eci_to_ecef(position_eci, sidereal_time), ellipsoid=ellipsoid)


def observe_many(
    observer: GeodeticPoint,
    targets_ecef: Iterable[EcefVector],
    ellipsoid: Ellipsoid = WGS84,
) -> List[TopocentricResult]:
    """
    Vectorized look_angles for many ECEF positions at once. Degenerate targets get
    the same fallbacks as enu_to_topocentric.

    Args:
        observer:
            The observer's geodetic position

        targets_ecef:
            ECEF positions, in meters

        ellipsoid:
            (Default WGS84) The reference ellipsoid

    Returns:
        List[TopocentricResult], in the order of targets_ecef
    """
    try:
        targets = np.atleast_2d(np.asarray(list(targets_ecef), dtype=float))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f'ECEF targets must be numeric (x, y, z) triples: {exc}') from exc

    if targets.size == 0:
        return []

    if targets.ndim != 2 or targets.shape[1] != 3:
        raise InvalidInputError(f'ECEF targets must have 3 components, got shape {targets.shape}')

    if not np.isfinite(targets).all():
        raise InvalidInputError('ECEF targets must be finite numbers')

    observer_ecef = np.array(geodetic_to_ecef(observer, ellipsoid=ellipsoid))
    rot = enu_rotation_matrix(observer.latitude, observer.longitude)
    east, north, up = rot @ (targets - observer_ecef).T

    horizontal = np.hypot(east, north)
    ranges = np.hypot(horizontal, up)
    altitudes = np.rad2deg(np.arctan2(up, horizontal))
    azimuths = (np.rad2deg(np.arctan2(east, north)) + 360) % 360
    azimuths = np.where(azimuths >= 360, 0., azimuths)

    degenerate = horizontal == 0
    coincident = degenerate & (up == 0)
    if coincident.any():
        warn_once(COINCIDENT_WARNING)
    if (degenerate & ~coincident).any():
        warn_once(VERTICAL_WARNING)

    azimuths = np.where(degenerate, DEGENERATE_AZIMUTH, azimuths)
    altitudes = np.where(coincident, COINCIDENT_ALTITUDE, altitudes)

    return [
        TopocentricResult(float(alt), float(az), float(rng))
        for alt, az, rng in zip(altitudes, azimuths, ranges)
    ]
