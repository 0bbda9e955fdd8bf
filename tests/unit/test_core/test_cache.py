import pytest

from core.cache import SnapshotCache
from core.models import EnvironmentalSnapshot


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return SnapshotCache(ttl_seconds=60, clock=clock)


@pytest.fixture
def snapshot():
    return EnvironmentalSnapshot(
        elevation=250, slope=6.0, land_cover="Sawah", rainfall=310,
        soil_type="Latosol", ndvi=0.65, population_density=2024,
    )


def test_get_missing(cache):
    assert cache.get("-7.9000,110.3000") is None


def test_set_and_get(cache, snapshot):
    cache.set("-7.9000,110.3000", snapshot)
    assert cache.get("-7.9000,110.3000") is snapshot
    assert len(cache) == 1


def test_expiry_is_inclusive(cache, clock, snapshot):
    """An entry exactly TTL seconds old is stale."""
    cache.set("k", snapshot)

    clock.now += 59
    assert cache.get("k") is snapshot

    clock.now += 1
    assert cache.get("k") is None


def test_overwrite_restarts_ttl(cache, clock, snapshot):
    cache.set("k", snapshot)
    clock.now += 50
    cache.set("k", snapshot)
    clock.now += 50
    assert cache.get("k") is snapshot


def test_write_prunes_expired_entries(cache, clock, snapshot):
    cache.set("old", snapshot)
    clock.now += 30
    cache.set("recent", snapshot)
    clock.now += 30

    cache.set("new", snapshot)

    assert len(cache) == 2
    assert cache.get("old") is None
    assert cache.get("recent") is snapshot


def test_stats_and_clear(cache, snapshot):
    cache.set("a", snapshot)
    cache.set("b", snapshot)

    assert cache.stats() == {"size": 2, "ttl_minutes": 1.0}

    cache.clear()
    assert len(cache) == 0
