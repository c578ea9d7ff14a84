"""
Boundary to orbit propagators.

topocoords never propagates orbits itself. A propagator is any object providing
`propagate`, `sidereal_time` and `eci_to_ecef` (see OrbitPropagator); it is always
passed explicitly to the functions that need one. Two implementations ship:

    - Sgp4Propagator wraps the sgp4 package (pip install topocoords[sgp4])
    - GroundTrackPropagator moves a satellite along a synthetic circular ground
      track, useful for demos and tests that should not depend on real element sets

load_propagator() builds a propagator from an ordered list of providers, keeping
a record of every attempt.
"""

__all__ = [
    'DEFAULT_PROVIDERS', 'GroundTrack', 'GroundTrackPropagator', 'OrbitPropagator',
    'PropagatedState', 'PropagatorBase', 'ProviderAttempt', 'ProviderResult',
    'Sgp4Propagator', 'load_propagator',
]

from datetime import datetime, timedelta, timezone
from functools import partial
import math
from typing import (
    Any, Callable, List, NamedTuple, Optional, Protocol, Sequence, Tuple, runtime_checkable
)

from topocoords._const import SGP4_STALE_ELEMENTS_DAYS
from topocoords.calc import ecef_to_eci, eci_to_ecef, geodetic_to_ecef, greenwich_sidereal_time
from topocoords.coordinates import EcefVector, GeodeticPoint
from topocoords.exceptions import InvalidInputError, PropagationError
from topocoords.utils.functions import default_to_zulu, normalize_longitude
from topocoords.utils.logging import LOGGER
from topocoords.utils.mixins import LoggingMixin

_KM = 1000.


class PropagatedState(NamedTuple):
    """Inertial state of a satellite: position in meters, velocity in meters/second"""
    position_eci: Tuple[float, float, float]
    velocity_eci: Tuple[float, float, float]


@runtime_checkable
class OrbitPropagator(Protocol):
    """The capabilities topocoords expects from an orbit propagator"""

    def propagate(self, elements: Any, timestamp: datetime) -> PropagatedState: ...

    def sidereal_time(self, timestamp: datetime) -> float: ...

    def eci_to_ecef(self, position_eci: Sequence[float], sidereal_time: float) -> EcefVector: ...


class PropagatorBase(LoggingMixin):
    """
    Shared frame handling for propagators whose inertial frame is rotated into
    ECEF by Greenwich mean sidereal time alone (no polar motion or nutation).
    """

    def propagate(self, elements: Any, timestamp: datetime) -> PropagatedState:
        raise NotImplementedError

    def sidereal_time(self, timestamp: datetime) -> float:
        return greenwich_sidereal_time(timestamp)

    def eci_to_ecef(self, position_eci: Sequence[float], sidereal_time: float) -> EcefVector:
        return eci_to_ecef(position_eci, sidereal_time)

    def position_ecef(self, elements: Any, timestamp: datetime) -> EcefVector:
        """Propagate and rotate straight into the earth-fixed frame"""
        state = self.propagate(elements, timestamp)
        return self.eci_to_ecef(state.position_eci, self.sidereal_time(timestamp))


class Sgp4Propagator(PropagatorBase):
    """
    SGP4/SDP4 propagation through the sgp4 package. Positions are produced in the
    TEME frame, which is treated as the inertial frame here.

    Args:
        accelerated:
            (Default False) If True, require the compiled sgp4 extension and raise
            PropagationError when only the pure-python implementation is installed
    """

    def __init__(self, accelerated: bool = False):
        super().__init__()
        from sgp4 import api  # pylint: disable=import-outside-toplevel

        if accelerated:
            if not api.accelerated:
                raise PropagationError('The compiled sgp4 extension is not available')
            satrec = api.Satrec
        else:
            from sgp4.model import Satrec as satrec  # pylint: disable=import-outside-toplevel

        self._api = api
        self._satrec = satrec
        self.accelerated = accelerated
        self.logger.debug(
            'Using the %s sgp4 implementation', 'compiled' if accelerated else 'pure-python'
        )

    def load_elements(self, line1: str, line2: str):
        """
        Build the element set for a two-line element pair.

        Args:
            line1:
                The TLE line beginning with "1 "

            line2:
                The TLE line beginning with "2 "

        Returns:
            An sgp4 Satrec, to be passed back to propagate()
        """
        try:
            satrec = self._satrec.twoline2rv(line1.strip(), line2.strip())
        except (ValueError, IndexError) as exc:
            raise PropagationError(f'Could not read two-line element set: {exc}') from exc

        if satrec.error:
            raise PropagationError(
                f'Element set was rejected by sgp4 (error {satrec.error}): '
                f'{self._api.SGP4_ERRORS.get(satrec.error, "unknown error")}'
            )

        return satrec

    def propagate(self, elements: Any, timestamp: datetime) -> PropagatedState:
        timestamp = default_to_zulu(timestamp).astimezone(timezone.utc)
        jd, fr = self._api.jday(
            timestamp.year, timestamp.month, timestamp.day,
            timestamp.hour, timestamp.minute,
            timestamp.second + timestamp.microsecond / 1e6,
        )
        error, position, velocity = elements.sgp4(jd, fr)
        if error != 0:
            raise PropagationError(
                f'SGP4 propagation to {timestamp.isoformat()} failed (error {error}): '
                f'{self._api.SGP4_ERRORS.get(error, "unknown error")}'
            )

        if not all(math.isfinite(v) for v in (*position, *velocity)):
            raise PropagationError(f'SGP4 produced a non-finite state at {timestamp.isoformat()}')

        if abs(jd - elements.jdsatepoch + fr - elements.jdsatepochF) > SGP4_STALE_ELEMENTS_DAYS:
            self.warn_once(
                'Propagating more than %d days from the element set epoch; positions '
                'lose accuracy. (this warning will not repeat)',
                SGP4_STALE_ELEMENTS_DAYS,
            )

        return PropagatedState(
            tuple(v * _KM for v in position),
            tuple(v * _KM for v in velocity),
        )


class GroundTrack(NamedTuple):
    """
    Elements of a synthetic satellite whose sub-satellite point follows a sine
    wave in latitude while drifting east at a constant rate.

    epoch: time at which the satellite is at the start longitude on the equator
    period_minutes: time for one full latitude oscillation
    max_latitude: turning latitude of the track, degrees (the orbit inclination)
    longitude_rate: eastward drift of the sub-satellite point, degrees per minute
    start_longitude: longitude at the epoch, degrees
    altitude: height above the ellipsoid, meters
    """
    epoch: datetime
    period_minutes: float = 95.
    max_latitude: float = 51.6
    longitude_rate: float = 3.6
    start_longitude: float = -180.
    altitude: float = 420_000.


class GroundTrackPropagator(PropagatorBase):
    """
    Propagator for GroundTrack elements. The state is derived from the
    sub-satellite point, so eci_to_ecef() recovers the track exactly; the velocity
    is a central difference over `velocity_step_seconds`.
    """

    def __init__(self, velocity_step_seconds: float = 1.):
        super().__init__()
        if not velocity_step_seconds > 0:
            raise InvalidInputError('velocity_step_seconds must be positive')

        self.velocity_step_seconds = velocity_step_seconds

    def subpoint(self, track: GroundTrack, timestamp: datetime) -> GeodeticPoint:
        """The satellite's geodetic position at a point in time"""
        if not track.period_minutes > 0:
            raise InvalidInputError(f'period_minutes must be positive, got {track.period_minutes}')

        minutes = (
            default_to_zulu(timestamp) - default_to_zulu(track.epoch)
        ).total_seconds() / 60.
        phase = minutes / track.period_minutes * 2 * math.pi

        return GeodeticPoint(
            track.max_latitude * math.sin(phase),
            normalize_longitude(minutes * track.longitude_rate + track.start_longitude),
            track.altitude,
        )

    def _position_eci(self, track: GroundTrack, timestamp: datetime) -> Tuple[float, float, float]:
        ecef = geodetic_to_ecef(self.subpoint(track, timestamp))
        return ecef_to_eci(ecef, self.sidereal_time(timestamp))

    def propagate(self, elements: GroundTrack, timestamp: datetime) -> PropagatedState:
        half_step = timedelta(seconds=self.velocity_step_seconds / 2)
        before = self._position_eci(elements, timestamp - half_step)
        after = self._position_eci(elements, timestamp + half_step)

        return PropagatedState(
            self._position_eci(elements, timestamp),
            tuple((b - a) / self.velocity_step_seconds for a, b in zip(before, after)),
        )


class ProviderAttempt(NamedTuple):
    """The outcome of trying one propagator provider"""
    name: str
    succeeded: bool
    error: Optional[str] = None


class ProviderResult(NamedTuple):
    """The propagator that was loaded, plus every attempt made to get it"""
    propagator: OrbitPropagator
    attempts: List[ProviderAttempt]


DEFAULT_PROVIDERS: Tuple[Tuple[str, Callable[[], OrbitPropagator]], ...] = (
    ('sgp4-accelerated', partial(Sgp4Propagator, accelerated=True)),
    ('sgp4-python', partial(Sgp4Propagator, accelerated=False)),
)


def load_propagator(
    providers: Sequence[Tuple[str, Callable[[], OrbitPropagator]]] = DEFAULT_PROVIDERS,
) -> ProviderResult:
    """
    Instantiate the first provider that loads successfully.

    Providers are tried in order. A provider fails if its factory raises ImportError
    (the backing package is missing) or PropagationError; anything else propagates.

    Args:
        providers:
            (name, factory) pairs, tried in order

    Returns:
        ProviderResult

    Raises:
        PropagationError, carrying the attempts, if no provider could be loaded
    """
    attempts: List[ProviderAttempt] = []
    for name, factory in providers:
        try:
            propagator = factory()
        except (ImportError, PropagationError) as exc:
            LOGGER.warning('Propagator provider %r failed to load: %s', name, exc)
            attempts.append(ProviderAttempt(name, False, str(exc)))
            continue

        LOGGER.info('Loaded propagator provider %r', name)
        attempts.append(ProviderAttempt(name, True))
        return ProviderResult(propagator, attempts)

    raise PropagationError(
        'Unable to load an orbit propagator from any provider: '
        + ', '.join(attempt.name for attempt in attempts),
        attempts=attempts,
    )
