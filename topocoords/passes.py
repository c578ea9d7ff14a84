"""
Sampling of look angles over time, and grouping of the samples into visible passes
"""

__all__ = [
    'LookSample', 'VisibilitySummary', 'sample_look_angles', 'split_visible_passes',
    'summarize_visibility',
]

from datetime import datetime, timedelta
from typing import Any, List, NamedTuple, Sequence

from topocoords.calc import ecef_to_enu, enu_to_topocentric, geodetic_to_ecef
from topocoords.coordinates import Ellipsoid, GeodeticPoint, WGS84
from topocoords.exceptions import InvalidInputError, PropagationError
from topocoords.propagation import OrbitPropagator
from topocoords.utils.functions import default_to_zulu, ensure_finite, round_half_up
from topocoords.utils.logging import LOGGER


class LookSample(NamedTuple):
    """Look angles at one instant; minute is the offset from the start of the sampling span"""
    minute: float
    timestamp: datetime
    altitude: float
    azimuth: float
    range: float


class VisibilitySummary(NamedTuple):
    """How many samples were on or above the horizon, and in how many passes"""
    visible: int
    total: int
    passes: int


def sample_look_angles(
    propagator: OrbitPropagator,
    elements: Any,
    observer: GeodeticPoint,
    start: datetime,
    span_minutes: float = 180,
    step_minutes: float = 2,
    skip_failures: bool = True,
    ellipsoid: Ellipsoid = WGS84,
) -> List[LookSample]:
    """
    Propagate a satellite across a span of time and compute its look angles from
    an observer at each step.

    Args:
        propagator:
            The orbit propagator used to position the satellite

        elements:
            The satellite's elements, in whatever form the propagator accepts

        observer:
            The observer's geodetic position

        start:
            The first sample time. Naive datetimes are assumed to be UTC.

        span_minutes:
            (Default 180) Length of the sampled span; the last sample falls on or
            before start + span_minutes

        step_minutes:
            (Default 2) Time between samples

        skip_failures:
            (Default True) If True, samples the propagator fails on are logged and
            left out. If False, the PropagationError is raised.

        ellipsoid:
            (Default WGS84) The reference ellipsoid

    Returns:
        List[LookSample], in time order
    """
    ensure_finite(span_minutes=span_minutes, step_minutes=step_minutes)
    if step_minutes <= 0:
        raise InvalidInputError(f'step_minutes must be positive, got {step_minutes}')
    if span_minutes < 0:
        raise InvalidInputError(f'span_minutes must not be negative, got {span_minutes}')

    start = default_to_zulu(start)
    observer_ecef = geodetic_to_ecef(observer, ellipsoid=ellipsoid)

    # Rounded so that a span which is a whole number of steps keeps its final sample
    count = int(round_half_up(span_minutes / step_minutes, 9)) + 1

    samples, skipped = [], 0
    for index in range(count):
        minute = round_half_up(index * step_minutes, 9)
        timestamp = start + timedelta(minutes=minute)
        try:
            state = propagator.propagate(elements, timestamp)
        except PropagationError as exc:
            if not skip_failures:
                raise
            LOGGER.warning('Skipping sample at %s: %s', timestamp.isoformat(), exc)
            skipped += 1
            continue

        target_ecef = propagator.eci_to_ecef(
            state.position_eci, propagator.sidereal_time(timestamp)
        )
        look = enu_to_topocentric(
            ecef_to_enu(observer.latitude, observer.longitude, observer_ecef, target_ecef)
        )
        samples.append(LookSample(minute, timestamp, *look))

    if skipped:
        LOGGER.warning('%d of %d samples could not be propagated', skipped, skipped + len(samples))

    return samples


def split_visible_passes(
    samples: Sequence[LookSample],
    min_altitude: float = 0.,
) -> List[List[LookSample]]:
    """
    Group consecutive samples at or above a minimum altitude into passes.

    Args:
        samples:
            Look samples in time order

        min_altitude:
            (Default 0.0) The altitude, in degrees, a sample must reach to count
            as visible

    Returns:
        List of passes, each a non-empty list of samples
    """
    passes, current = [], []
    for sample in samples:
        if sample.altitude >= min_altitude:
            current.append(sample)
        elif current:
            passes.append(current)
            current = []

    if current:
        passes.append(current)

    return passes


def summarize_visibility(
    samples: Sequence[LookSample],
    min_altitude: float = 0.,
) -> VisibilitySummary:
    """Count visible samples and passes, using the same threshold as split_visible_passes"""
    return VisibilitySummary(
        visible=sum(1 for sample in samples if sample.altitude >= min_altitude),
        total=len(samples),
        passes=len(split_visible_passes(samples, min_altitude)),
    )
