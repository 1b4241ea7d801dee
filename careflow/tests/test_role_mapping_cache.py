"""
Tests for the role mapping cache
"""
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import OperationalError

from careflow.models.role_mapping import RoleMapping
from careflow.services.role_mapping_service import DEFAULT_ROLE_MAPPINGS, RoleMappingCache

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class CountingFetcher:
    def __init__(self, tables):
        self.tables = list(tables)
        self.calls = 0

    def __call__(self, db):
        table = self.tables[min(self.calls, len(self.tables) - 1)]
        self.calls += 1
        return dict(table)


def failing_fetcher(db):
    raise OperationalError("SELECT * FROM role_mappings", {}, Exception("connection refused"))


def test_fetch_error_returns_fallback_table(db):
    cache = RoleMappingCache(fetcher=failing_fetcher)

    mappings = cache.get(db, T0)

    assert mappings == DEFAULT_ROLE_MAPPINGS
    assert mappings["Recruiter"] == "Manager"
    assert cache.map_role(db, "Recruiter", T0) == "Manager"


def test_fallback_is_not_cached(db):
    calls = []

    def flaky(session):
        calls.append(1)
        if len(calls) == 1:
            return failing_fetcher(session)
        return {"Recruiter": "Coordinator"}

    cache = RoleMappingCache(fetcher=flaky)

    assert cache.get(db, T0)["Recruiter"] == "Manager"
    assert not cache.is_fresh(T0)
    assert cache.get(db, T0)["Recruiter"] == "Coordinator"
    assert cache.is_fresh(T0)


def test_cached_table_served_within_ttl():
    fetcher = CountingFetcher([{"Nurse": "Nurse"}, {"Nurse": "Senior Nurse"}])
    cache = RoleMappingCache(fetcher=fetcher, ttl_seconds=300)

    assert cache.map_role(None, "Nurse", T0) == "Nurse"
    assert cache.map_role(None, "Nurse", T0 + timedelta(seconds=299)) == "Nurse"
    assert fetcher.calls == 1


def test_expired_table_is_refetched():
    fetcher = CountingFetcher([{"Nurse": "Nurse"}, {"Nurse": "Senior Nurse"}])
    cache = RoleMappingCache(fetcher=fetcher, ttl_seconds=300)

    cache.get(None, T0)

    assert cache.map_role(None, "Nurse", T0 + timedelta(seconds=300)) == "Senior Nurse"
    assert fetcher.calls == 2


def test_invalidate_forces_refetch():
    fetcher = CountingFetcher([{"Admin": "Manager"}, {"Admin": "Director"}])
    cache = RoleMappingCache(fetcher=fetcher)
    cache.get(None, T0)

    cache.invalidate()

    assert cache.map_role(None, "Admin", T0) == "Director"


def test_unmapped_role_uses_default_role():
    cache = RoleMappingCache(fetcher=lambda db: {}, default_role="Carer")

    assert cache.map_role(None, "Volunteer", T0) == "Carer"


def test_default_fetcher_reads_table(db):
    db.add(RoleMapping(external_role="Care Worker", internal_role="Carer"))
    db.commit()
    cache = RoleMappingCache()

    assert cache.get(db, T0) == {"Care Worker": "Carer"}
