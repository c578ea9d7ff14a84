import sys

from topocoords._version import __version__  # noqa: F401
from topocoords.utils.logging import LOGGER
from topocoords.coordinates import (
    EcefVector, Ellipsoid, EnuVector, GeodeticPoint, TopocentricResult, GRS80, WGS84
)
from topocoords.calc import (
    ecef_to_enu, ecef_to_geodetic, enu_to_topocentric, geodetic_to_ecef
)
from topocoords.exceptions import InvalidInputError, PropagationError
from topocoords.pipeline import look_angles, observe, observe_eci, observe_many
from topocoords.utils.conditional_imports import ConditionalPackageInterceptor


ConditionalPackageInterceptor.permit_packages(
    {
        'sgp4': 'topocoords[sgp4]',
    }
)
sys.meta_path.append(ConditionalPackageInterceptor)  # type: ignore

__all__ = [
    'EcefVector',
    'Ellipsoid',
    'EnuVector',
    'GeodeticPoint',
    'GRS80',
    'InvalidInputError',
    'PropagationError',
    'TopocentricResult',
    'WGS84',
    'ecef_to_enu',
    'ecef_to_geodetic',
    'enu_to_topocentric',
    'geodetic_to_ecef',
    'look_angles',
    'observe',
    'observe_eci',
    'observe_many',
    'LOGGER',
]
