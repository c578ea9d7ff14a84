"""
Value types passed through the topocentric pipeline
"""

__all__ = [
    'EcefVector', 'Ellipsoid', 'EnuVector', 'GeodeticPoint', 'TopocentricResult',
    'GRS80', 'WGS84',
]

import math
from typing import NamedTuple, Tuple

from pydantic import validate_call

from topocoords._const import GRS80_A, GRS80_E2, WGS84_A, WGS84_E2
from topocoords.exceptions import InvalidInputError
from topocoords.utils.functions import ensure_finite, normalize_longitude


class Ellipsoid(NamedTuple):
    """A reference ellipsoid, defined by its semi-major axis (meters) and e^2"""
    semi_major_axis: float
    eccentricity_squared: float


WGS84 = Ellipsoid(WGS84_A, WGS84_E2)
GRS80 = Ellipsoid(GRS80_A, GRS80_E2)


class EcefVector(NamedTuple):
    """Earth-Centered Earth-Fixed cartesian position, in meters"""
    x: float
    y: float
    z: float

    def __sub__(self, other):
        return EcefVector(self.x - other.x, self.y - other.y, self.z - other.z)


class EnuVector(NamedTuple):
    """Displacement in an observer's East-North-Up tangent plane, in meters"""
    east: float
    north: float
    up: float


class TopocentricResult(NamedTuple):
    """
    Position of a target on an observer's local sky.

    altitude: degrees above the horizon, in [-90, 90]
    azimuth: compass bearing in degrees, 0 = North, 90 = East, in [0, 360)
    range: slant range in meters, never negative
    """
    altitude: float
    azimuth: float
    range: float

    @property
    def is_visible(self) -> bool:
        """True when the target is on or above the observer's horizon"""
        return self.altitude >= 0


class GeodeticPoint:
    """
    Representation of a position referenced to an ellipsoidal earth, i.e. a
    latitude/longitude pair plus altitude above the ellipsoid.

    Latitudes outside [-90, 90] are rejected rather than wrapped over the pole.
    Longitudes are wrapped into (-180, 180].

    Args:
        latitude:
            Degrees north of the equator

        longitude:
            Degrees east of the prime meridian

        altitude:
            (Default 0.0) Meters above the ellipsoid
    """

    @validate_call
    def __init__(
        self,
        latitude: float,
        longitude: float,
        altitude: float = 0.0,
    ):
        ensure_finite(latitude=latitude, longitude=longitude, altitude=altitude)
        if not -90 <= latitude <= 90:
            raise InvalidInputError(f'latitude must be within [-90, 90], got {latitude}')

        self._latitude = latitude
        self._longitude = normalize_longitude(longitude)
        self._altitude = altitude

    @property
    def latitude(self) -> float:
        return self._latitude

    @property
    def longitude(self) -> float:
        return self._longitude

    @property
    def altitude(self) -> float:
        return self._altitude

    def __eq__(self, other):
        if not isinstance(other, GeodeticPoint):
            return False

        return (
            self.latitude == other.latitude and
            self.longitude == other.longitude and
            self.altitude == other.altitude
        )

    def __hash__(self):
        return hash((self.latitude, self.longitude, self.altitude))

    def __repr__(self):
        return f'<GeodeticPoint({self.latitude}, {self.longitude}, {self.altitude})>'

    @property
    def radians(self) -> Tuple[float, float]:
        """The (latitude, longitude) pair in radians"""
        return math.radians(self.latitude), math.radians(self.longitude)

    @classmethod
    def from_ecef(cls, ecef: EcefVector, ellipsoid: Ellipsoid = WGS84):
        """Create a GeodeticPoint from an ECEF position"""
        from topocoords.calc import ecef_to_geodetic  # pylint: disable=import-outside-toplevel
        return ecef_to_geodetic(ecef, ellipsoid=ellipsoid)

    def to_ecef(self, ellipsoid: Ellipsoid = WGS84) -> EcefVector:
        """Convert this point to an ECEF position"""
        from topocoords.calc import geodetic_to_ecef  # pylint: disable=import-outside-toplevel
        return geodetic_to_ecef(self, ellipsoid=ellipsoid)

    def to_float(self) -> Tuple[float, float, float]:
        """
        Converts the point to a tuple of floats.

        Returns:
            Tuple of (latitude, longitude, altitude)
        """
        return self.latitude, self.longitude, self.altitude
