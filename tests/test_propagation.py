from datetime import datetime, timedelta, timezone
import logging
import math

import pytest

from topocoords import GeodeticPoint, InvalidInputError, PropagationError, geodetic_to_ecef
from topocoords.propagation import *

# Element set from the sgp4 package documentation
ISS_LINE1 = '1 25544U 98067A   19343.69339541  .00001764  00000-0  38792-4 0  9991'
ISS_LINE2 = '2 25544  51.6439 211.2001 0007417  17.6667  85.6398 15.50103472202482'
ISS_EPOCH = datetime(2019, 12, 9, 16, 38, 29, tzinfo=timezone.utc)

default_epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def ground_track():
    return GroundTrack(default_epoch)


@pytest.fixture
def sgp4_propagator():
    pytest.importorskip('sgp4')
    return Sgp4Propagator()


class _BrokenElements:
    """Stands in for a Satrec whose propagation fails"""

    def sgp4(self, jd, fr):
        return 1, (math.nan, math.nan, math.nan), (math.nan, math.nan, math.nan)


def test_groundtrack_subpoint(ground_track):
    propagator = GroundTrackPropagator()

    point = propagator.subpoint(ground_track, default_epoch)
    assert point == GeodeticPoint(0., 180., 420_000.)

    # A quarter period later the track reaches its turning latitude
    point = propagator.subpoint(ground_track, default_epoch + timedelta(minutes=23.75))
    assert point.latitude == pytest.approx(51.6)
    assert point.longitude == pytest.approx(-94.5)

    point = propagator.subpoint(ground_track, default_epoch + timedelta(minutes=47.5))
    assert point.latitude == pytest.approx(0., abs=1e-9)

    # Naive datetimes are treated as UTC
    assert propagator.subpoint(ground_track, datetime(2024, 1, 1)) == GeodeticPoint(0., 180., 420_000.)


def test_groundtrack_invalid(ground_track):
    with pytest.raises(InvalidInputError):
        GroundTrackPropagator(velocity_step_seconds=0)

    with pytest.raises(InvalidInputError):
        GroundTrackPropagator().subpoint(ground_track._replace(period_minutes=0.), default_epoch)


def test_groundtrack_propagate(ground_track):
    propagator = GroundTrackPropagator()
    timestamp = default_epoch + timedelta(minutes=10)
    state = propagator.propagate(ground_track, timestamp)

    assert isinstance(state, PropagatedState)
    radius = math.sqrt(sum(x ** 2 for x in state.position_eci))
    assert 6_700_000 < radius < 6_850_000

    speed = math.sqrt(sum(v ** 2 for v in state.velocity_eci))
    assert 1_000 < speed < 20_000

    # ECI -> ECEF recovers the synthetic track
    ecef = propagator.position_ecef(ground_track, timestamp)
    expected = geodetic_to_ecef(propagator.subpoint(ground_track, timestamp))
    assert ecef == pytest.approx(tuple(expected), abs=1e-5)


def test_propagators_satisfy_protocol():
    assert isinstance(GroundTrackPropagator(), OrbitPropagator)
    assert not isinstance(object(), OrbitPropagator)


def test_propagator_base():
    with pytest.raises(NotImplementedError):
        PropagatorBase().propagate(None, default_epoch)


def test_load_propagator_order(caplog):
    def missing():
        raise ImportError('No module named fancy_propagator')

    caplog.set_level(logging.INFO, logger='topocoords')
    result = load_propagator([
        ('fancy', missing),
        ('ground-track', GroundTrackPropagator),
        ('never-tried', GroundTrackPropagator),
    ])

    assert isinstance(result, ProviderResult)
    assert isinstance(result.propagator, GroundTrackPropagator)
    assert result.attempts == [
        ProviderAttempt('fancy', False, 'No module named fancy_propagator'),
        ProviderAttempt('ground-track', True),
    ]
    assert "provider 'fancy' failed to load" in caplog.text
    assert "Loaded propagator provider 'ground-track'" in caplog.text


def test_load_propagator_all_fail():
    def missing():
        raise ImportError('missing')

    def broken():
        raise PropagationError('broken')

    with pytest.raises(PropagationError) as exc_info:
        load_propagator([('a', missing), ('b', broken)])

    assert [attempt.name for attempt in exc_info.value.attempts] == ['a', 'b']
    assert not any(attempt.succeeded for attempt in exc_info.value.attempts)

    with pytest.raises(PropagationError):
        load_propagator([])


def test_load_propagator_unexpected_error():
    def buggy():
        raise ZeroDivisionError()

    with pytest.raises(ZeroDivisionError):
        load_propagator([('buggy', buggy), ('ground-track', GroundTrackPropagator)])


def test_load_propagator_default():
    pytest.importorskip('sgp4')
    result = load_propagator()
    assert isinstance(result.propagator, Sgp4Propagator)
    assert result.attempts[-1].succeeded
    assert [a.name for a in result.attempts][-1] in ('sgp4-accelerated', 'sgp4-python')


def test_sgp4_propagate(sgp4_propagator):
    from sgp4.api import Satrec, jday

    satrec = sgp4_propagator.load_elements(ISS_LINE1, ISS_LINE2)
    timestamp = ISS_EPOCH + timedelta(minutes=42)
    state = sgp4_propagator.propagate(satrec, timestamp)

    reference = Satrec.twoline2rv(ISS_LINE1, ISS_LINE2)
    _, position, velocity = reference.sgp4(*jday(2019, 12, 9, 17, 20, 29))
    assert state.position_eci == pytest.approx(tuple(x * 1000 for x in position), abs=1.)
    assert state.velocity_eci == pytest.approx(tuple(v * 1000 for v in velocity), abs=1e-2)

    radius = math.sqrt(sum(x ** 2 for x in state.position_eci))
    assert 6_600_000 < radius < 6_900_000

    # Low earth orbit: the sub-satellite point stays within the inclination band
    point = GeodeticPoint.from_ecef(sgp4_propagator.position_ecef(satrec, timestamp))
    assert abs(point.latitude) < 52.
    assert 350_000 < point.altitude < 450_000


def test_sgp4_propagate_naive_datetime(sgp4_propagator):
    satrec = sgp4_propagator.load_elements(ISS_LINE1, ISS_LINE2)
    assert sgp4_propagator.propagate(satrec, datetime(2019, 12, 9, 17)) == \
        sgp4_propagator.propagate(satrec, datetime(2019, 12, 9, 17, tzinfo=timezone.utc))


def test_sgp4_stale_elements_warning(sgp4_propagator, caplog, monkeypatch):
    monkeypatch.setattr(Sgp4Propagator, 'WARNED_ONCE', set())
    satrec = sgp4_propagator.load_elements(ISS_LINE1, ISS_LINE2)

    sgp4_propagator.propagate(satrec, ISS_EPOCH + timedelta(days=2))
    assert 'element set epoch' not in caplog.text

    sgp4_propagator.propagate(satrec, ISS_EPOCH + timedelta(days=45))
    sgp4_propagator.propagate(satrec, ISS_EPOCH - timedelta(days=45))
    assert caplog.text.count('more than 30 days from the element set epoch') == 1


def test_sgp4_propagation_failure(sgp4_propagator):
    with pytest.raises(PropagationError, match='error 1'):
        sgp4_propagator.propagate(_BrokenElements(), ISS_EPOCH)


def test_sgp4_bad_elements(sgp4_propagator):
    with pytest.raises(PropagationError):
        sgp4_propagator.load_elements('not a tle', 'still not a tle')


def test_sgp4_accelerated():
    api = pytest.importorskip('sgp4.api')
    if api.accelerated:
        assert Sgp4Propagator(accelerated=True).accelerated
    else:
        with pytest.raises(PropagationError):
            Sgp4Propagator(accelerated=True)
