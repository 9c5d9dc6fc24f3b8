import threading
import time

from clubboard.cache import CacheSnapshot, collect_years
from clubboard.ingestion import ScopeKind, WeGlideClient

from conftest import BlockingClient, FakeClient, FakeResponse, flight_payload


def test_collect_years_newest_first(make_flight):
    club = [make_flight(1, year="2022"), make_flight(2, year="2024")]
    airport = [make_flight(3, year="2023"), make_flight(4, year="2024")]

    assert collect_years(club, airport) == ["2024", "2023", "2022"]
    assert collect_years() == []


def test_empty_snapshot_is_stale(make_cache):
    cache = make_cache(FakeClient())

    assert cache.snapshot == CacheSnapshot()
    assert cache.is_stale()


def test_first_call_refreshes_both_scopes(make_cache, make_flight, clock):
    club = [make_flight(1, year="2023")]
    airport = [make_flight(2, year="2024"), make_flight(3, year="2021")]
    client = FakeClient(club, airport)
    cache = make_cache(client)

    snapshot = cache.get_fresh()

    assert sorted(scope.kind for scope in client.calls) == [ScopeKind.AIRPORT, ScopeKind.CLUB]
    assert snapshot.club_flights == tuple(club)
    assert snapshot.airport_flights == tuple(airport)
    assert snapshot.available_years == ("2024", "2023", "2021")
    assert snapshot.last_fetched_at == clock.now


def test_no_refresh_within_ttl(make_cache, clock):
    client = FakeClient()
    cache = make_cache(client)
    first = cache.get_fresh()

    clock.advance(1800)
    assert cache.get_fresh() is first
    clock.advance(1800)  # exactly one hour old is still fresh
    assert cache.get_fresh() is first
    assert len(client.calls) == 2


def test_exactly_one_refresh_after_ttl(make_cache, clock):
    client = FakeClient()
    cache = make_cache(client)
    first = cache.get_fresh()

    clock.advance(3601)
    second = cache.get_fresh()
    third = cache.get_fresh()

    assert second is not first
    assert third is second
    assert second.last_fetched_at == clock.now
    assert len(client.calls) == 4
    assert cache.stats["refresh_attempts"] == 2


def test_failed_refresh_keeps_stale_snapshot(make_cache, make_flight, clock):
    client = FakeClient(club=[make_flight(1)])
    cache = make_cache(client)
    first = cache.get_fresh()
    fetched_at = first.last_fetched_at

    client.failures[ScopeKind.AIRPORT] = RuntimeError("boom")
    clock.advance(7200)
    snapshot = cache.get_fresh()

    assert snapshot is first
    assert snapshot.last_fetched_at == fetched_at
    assert cache.is_stale()
    assert cache.stats["failed_refreshes"] == 1


def test_failed_first_refresh_returns_empty_snapshot(make_cache):
    client = FakeClient(failures={ScopeKind.CLUB: RuntimeError("boom")})
    cache = make_cache(client)

    snapshot = cache.get_fresh()

    assert snapshot.last_fetched_at is None
    assert snapshot.club_flights == ()
    # Both scopes ran to completion before the refresh was abandoned
    assert len(client.calls) == 2


def test_refresh_is_forced(make_cache):
    client = FakeClient()
    cache = make_cache(client)
    cache.get_fresh()

    assert cache.refresh() is True
    assert len(client.calls) == 4


def test_concurrent_callers_share_one_refresh(make_cache):
    client = BlockingClient()
    cache = make_cache(client)
    results = []

    def worker():
        results.append(cache.get_fresh())

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    assert client.started.wait(timeout=5)
    client.release.set()
    for t in threads:
        t.join(timeout=5)

    assert len(results) == 5
    assert len(client.calls) == 2
    assert all(r is results[0] for r in results)
    assert cache.stats["refresh_attempts"] == 1


def test_waiting_caller_reuses_failed_refresh(make_cache):
    client = BlockingClient(failures={ScopeKind.CLUB: RuntimeError("boom")})
    cache = make_cache(client)
    results = []

    first = threading.Thread(target=lambda: results.append(cache.get_fresh()))
    first.start()
    assert client.started.wait(timeout=5)

    waiting = threading.Thread(target=lambda: results.append(cache.get_fresh()))
    waiting.start()
    time.sleep(0.2)  # let the second caller block on the refresh lock
    client.release.set()
    first.join(timeout=5)
    waiting.join(timeout=5)

    assert len(results) == 2
    assert all(r.last_fetched_at is None for r in results)
    assert len(client.calls) == 2
    assert cache.stats["refresh_attempts"] == 1
    assert cache.stats["failed_refreshes"] == 1


def test_next_caller_after_failed_refresh_tries_again(make_cache):
    client = FakeClient(failures={ScopeKind.AIRPORT: RuntimeError("boom")})
    cache = make_cache(client)

    cache.get_fresh()
    cache.get_fresh()

    assert cache.stats["refresh_attempts"] == 2


def test_client_counters_add_up_across_scope_workers(make_cache):
    class ScopedSession:
        def get(self, url, params=None, timeout=None):
            skip = params["skip"]
            end = min(skip + params["limit"], 1000)
            return FakeResponse([flight_payload(i) for i in range(skip, end)])

    client = WeGlideClient(page_size=100, session=ScopedSession())
    cache = make_cache(client)

    threads = [threading.Thread(target=cache.refresh) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    # 10 full pages plus the closing empty page, per scope, per refresh
    assert client.stats["pages_fetched"] == 4 * 2 * 11
    assert client.stats["page_errors"] == 0
    assert len(cache.snapshot.club_flights) == 1000


def test_stats_report_age(make_cache, make_flight, clock):
    cache = make_cache(FakeClient(club=[make_flight(1)], airport=[make_flight(2), make_flight(3)]))
    cache.get_fresh()
    clock.advance(90)

    stats = cache.stats
    assert stats["club_flights"] == 1
    assert stats["airport_flights"] == 2
    assert stats["age_seconds"] == 90
    assert stats["stale"] is False
    assert stats["refreshing"] is False
