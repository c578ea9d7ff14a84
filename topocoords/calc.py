""" Coordinate frame conversions between geodetic, ECEF, ENU and topocentric coordinates """

__all__ = [
    'ecef_to_eci', 'ecef_to_enu', 'ecef_to_geodetic', 'eci_to_ecef', 'enu_rotation_matrix',
    'enu_to_ecef', 'enu_to_topocentric', 'geodetic_to_ecef', 'greenwich_sidereal_time',
    'julian_date',
]

from datetime import datetime
import math
from typing import Sequence

import numpy as np

from topocoords._const import (
    COINCIDENT_ALTITUDE, DEGENERATE_AZIMUTH, GMST_COEFFICIENTS, JD_J2000,
    JULIAN_CENTURY_DAYS
)
from topocoords.coordinates import (
    EcefVector, Ellipsoid, EnuVector, GeodeticPoint, TopocentricResult, WGS84
)
from topocoords.exceptions import InvalidInputError
from topocoords.utils.functions import default_to_zulu, ensure_finite
from topocoords.utils.logging import warn_once

_JD_UNIX_EPOCH = 2440587.5
_GEODETIC_MAX_ITER = 10
_GEODETIC_TOLERANCE = 1e-12

COINCIDENT_WARNING = (
    f'Target coincides with the observer; reporting azimuth {DEGENERATE_AZIMUTH} and '
    f'altitude {COINCIDENT_ALTITUDE}. (this warning will not repeat)'
)
VERTICAL_WARNING = (
    'Target has no horizontal displacement from the observer; reporting '
    f'azimuth {DEGENERATE_AZIMUTH}. (this warning will not repeat)'
)


def geodetic_to_ecef(point: GeodeticPoint, ellipsoid: Ellipsoid = WGS84) -> EcefVector:
    """
    Convert a geodetic position to Earth-Centered Earth-Fixed cartesian coordinates.

    Args:
        point:
            The geodetic position

        ellipsoid:
            (Default WGS84) The reference ellipsoid

    Returns:
        EcefVector, in meters
    """
    a, e2 = ellipsoid
    lat, lon = point.radians
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)

    # Prime vertical radius of curvature
    n = a / math.sqrt(1 - e2 * sin_lat * sin_lat)

    return EcefVector(
        (n + point.altitude) * cos_lat * cos_lon,
        (n + point.altitude) * cos_lat * sin_lon,
        (n * (1 - e2) + point.altitude) * sin_lat,
    )


def ecef_to_geodetic(ecef: EcefVector, ellipsoid: Ellipsoid = WGS84) -> GeodeticPoint:
    """
    Convert an ECEF position to geodetic latitude, longitude and altitude.

    Latitude is found by fixed-point iteration, starting from the spherical
    estimate. Altitude uses a form that stays well-conditioned at the poles, where
    the textbook p / cos(lat) - N is not.

    Args:
        ecef:
            The ECEF position, in meters

        ellipsoid:
            (Default WGS84) The reference ellipsoid

    Returns:
        GeodeticPoint

    Raises:
        InvalidInputError, for non-finite input or the center of the earth
    """
    x, y, z = ecef
    ensure_finite(x=x, y=y, z=z)
    a, e2 = ellipsoid

    lon = math.atan2(y, x)
    p = math.hypot(x, y)
    if p == 0 and z == 0:
        raise InvalidInputError('The center of the earth has no geodetic position')

    lat = math.atan2(z, p * (1 - e2))

    for _ in range(_GEODETIC_MAX_ITER):
        sin_lat = math.sin(lat)
        n = a / math.sqrt(1 - e2 * sin_lat * sin_lat)
        alt = p * math.cos(lat) + z * sin_lat - a * a / n
        lat_prev = lat
        lat = math.atan2(z, p * (1 - e2 * n / (n + alt)))
        if abs(lat - lat_prev) < _GEODETIC_TOLERANCE:
            break

    sin_lat = math.sin(lat)
    alt = p * math.cos(lat) + z * sin_lat - a * math.sqrt(1 - e2 * sin_lat * sin_lat)

    return GeodeticPoint(math.degrees(lat), math.degrees(lon), alt)


def enu_rotation_matrix(latitude: float, longitude: float) -> np.ndarray:
    """
    The 3x3 rotation taking an ECEF displacement into the East-North-Up frame
    of an observer at the given geodetic latitude/longitude (degrees). Rows are the
    E, N and U basis vectors expressed in ECEF; the transpose is the inverse rotation.
    """
    lat, lon = np.deg2rad(latitude), np.deg2rad(longitude)
    return np.array([
        [-np.sin(lon), np.cos(lon), 0.0],
        [-np.sin(lat) * np.cos(lon), -np.sin(lat) * np.sin(lon), np.cos(lat)],
        [np.cos(lat) * np.cos(lon), np.cos(lat) * np.sin(lon), np.sin(lat)],
    ])


def ecef_to_enu(
    latitude: float,
    longitude: float,
    observer_ecef: EcefVector,
    target_ecef: EcefVector,
) -> EnuVector:
    """
    Express the displacement from observer to target in the observer's local
    East-North-Up frame.

    Args:
        latitude:
            The observer's geodetic latitude, in degrees

        longitude:
            The observer's geodetic longitude, in degrees

        observer_ecef:
            The observer's ECEF position, in meters

        target_ecef:
            The target's ECEF position, in meters

    Returns:
        EnuVector, in meters
    """
    ensure_finite(
        target_x=target_ecef[0], target_y=target_ecef[1], target_z=target_ecef[2],
        observer_x=observer_ecef[0], observer_y=observer_ecef[1], observer_z=observer_ecef[2],
    )
    lat, lon = math.radians(latitude), math.radians(longitude)
    dx = target_ecef[0] - observer_ecef[0]
    dy = target_ecef[1] - observer_ecef[1]
    dz = target_ecef[2] - observer_ecef[2]

    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)

    return EnuVector(
        -sin_lon * dx + cos_lon * dy,
        -sin_lat * cos_lon * dx - sin_lat * sin_lon * dy + cos_lat * dz,
        cos_lat * cos_lon * dx + cos_lat * sin_lon * dy + sin_lat * dz,
    )


def enu_to_ecef(
    latitude: float,
    longitude: float,
    observer_ecef: EcefVector,
    enu: EnuVector,
) -> EcefVector:
    """Inverse of ecef_to_enu: the absolute ECEF position of an ENU displacement"""
    ensure_finite(east=enu[0], north=enu[1], up=enu[2])
    offset = enu_rotation_matrix(latitude, longitude).T @ np.array(enu, dtype=float)
    return EcefVector(*(float(v) for v in np.array(observer_ecef, dtype=float) + offset))


def enu_to_topocentric(enu: EnuVector) -> TopocentricResult:
    """
    Convert an ENU displacement to altitude, azimuth and slant range.

    A target with no horizontal displacement (straight up, straight down or on top
    of the observer) has no defined azimuth; DEGENERATE_AZIMUTH (north) is reported
    instead. A target coinciding with the observer additionally reports
    COINCIDENT_ALTITUDE (zenith) and a range of 0.

    Args:
        enu:
            The ENU displacement, in meters

    Returns:
        TopocentricResult, angles in degrees and range in meters
    """
    east, north, up = enu
    ensure_finite(east=east, north=north, up=up)

    horizontal = math.hypot(east, north)
    slant_range = math.hypot(horizontal, up)

    if horizontal == 0:
        if up == 0:
            warn_once(COINCIDENT_WARNING)
            return TopocentricResult(COINCIDENT_ALTITUDE, DEGENERATE_AZIMUTH, slant_range)

        warn_once(VERTICAL_WARNING)
        return TopocentricResult(
            math.degrees(math.atan2(up, horizontal)), DEGENERATE_AZIMUTH, slant_range
        )

    altitude = math.degrees(math.atan2(up, horizontal))
    azimuth = (math.degrees(math.atan2(east, north)) + 360) % 360
    if azimuth >= 360:
        azimuth = 0.

    return TopocentricResult(altitude, azimuth, slant_range)


def julian_date(timestamp: datetime) -> float:
    """The Julian date (UTC) of a datetime. Naive datetimes are assumed to be UTC."""
    return _JD_UNIX_EPOCH + default_to_zulu(timestamp).timestamp() / 86400.


def greenwich_sidereal_time(timestamp: datetime) -> float:
    """
    Greenwich mean sidereal time, in radians within [0, 2pi), using the IAU 1982
    polynomial. UT1 is approximated by UTC.
    """
    t = (julian_date(timestamp) - JD_J2000) / JULIAN_CENTURY_DAYS
    c0, c1, c2, c3 = GMST_COEFFICIENTS
    seconds = c0 + (c1 + (c2 + c3 * t) * t) * t

    # 240 seconds of sidereal time per degree
    gmst = math.radians(seconds / 240.) % (2 * math.pi)
    if gmst < 0:
        gmst += 2 * math.pi

    return gmst


def eci_to_ecef(position_eci: Sequence[float], sidereal_time: float) -> EcefVector:
    """
    Rotate an Earth-centered inertial position into the earth-fixed frame.

    Args:
        position_eci:
            The (x, y, z) inertial position, in meters

        sidereal_time:
            Greenwich sidereal angle, in radians

    Returns:
        EcefVector
    """
    x, y, z = position_eci
    ensure_finite(x=x, y=y, z=z, sidereal_time=sidereal_time)
    cos_g, sin_g = math.cos(sidereal_time), math.sin(sidereal_time)
    return EcefVector(
        x * cos_g + y * sin_g,
        -x * sin_g + y * cos_g,
        z,
    )


def ecef_to_eci(position_ecef: Sequence[float], sidereal_time: float) -> tuple:
    """Inverse of eci_to_ecef. Returns the (x, y, z) inertial position in meters."""
    x, y, z = position_ecef
    ensure_finite(x=x, y=y, z=z, sidereal_time=sidereal_time)
    cos_g, sin_g = math.cos(sidereal_time), math.sin(sidereal_time)
    return (
        x * cos_g - y * sin_g,
        x * sin_g + y * cos_g,
        z,
    )
