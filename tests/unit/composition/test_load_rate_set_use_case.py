from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import FakeCacheStore, FakeRateSetSource
from tpo.application.ports.collaborators import CollaboratorUnavailableError
from tpo.application.use_cases.load_rate_set import LoadRateSet, rate_set_cache_key
from tpo.domain.common.ids import BranchId
from tpo.domain.common.money import CurrencyRateSet


class BrokenCacheStore:
    def get(self, key: str) -> str | None:
        raise ConnectionError("redis down")

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise ConnectionError("redis down")

    def delete(self, key: str) -> None:
        raise ConnectionError("redis down")


def test_cache_key_per_branch() -> None:
    assert rate_set_cache_key(BranchId("brn_1")) == "rates:brn_1"
    assert rate_set_cache_key(None) == "rates:global"


def test_fetched_rate_set_is_cached() -> None:
    source = FakeRateSetSource(CurrencyRateSet(sar_to_idr=Decimal("4300"), usd_to_idr=Decimal("16000")))
    cache = FakeCacheStore()
    use_case = LoadRateSet(source=source, cache=cache)

    first = use_case.execute(BranchId("brn_1"))
    second = use_case.execute(BranchId("brn_1"))

    assert first == second == CurrencyRateSet(sar_to_idr=Decimal("4300"), usd_to_idr=Decimal("16000"))
    assert len(source.calls) == 1
    assert "rates:brn_1" in cache.values


def test_missing_rate_set_defaults_without_caching() -> None:
    cache = FakeCacheStore()

    rate_set = LoadRateSet(source=FakeRateSetSource(None), cache=cache).execute(None)

    assert rate_set == CurrencyRateSet()
    assert cache.values == {}


def test_unavailable_source_defaults() -> None:
    source = FakeRateSetSource(error=CollaboratorUnavailableError("timed out", "get_business_rules"))

    assert LoadRateSet(source=source, cache=FakeCacheStore()).execute(BranchId("brn_1")) == CurrencyRateSet()


def test_broken_cache_falls_through_to_source() -> None:
    source = FakeRateSetSource(CurrencyRateSet.of(4250, 15800))

    rate_set = LoadRateSet(source=source, cache=BrokenCacheStore()).execute(BranchId("brn_1"))

    assert rate_set.sar_to_idr == Decimal("4250")
    assert len(source.calls) == 1


def test_corrupt_cache_entry_is_ignored() -> None:
    cache = FakeCacheStore()
    cache.values["rates:brn_1"] = "{not json"
    source = FakeRateSetSource(CurrencyRateSet.of(4250, 15800))

    rate_set = LoadRateSet(source=source, cache=cache).execute(BranchId("brn_1"))

    assert rate_set.usd_to_idr == Decimal("15800")
    assert len(source.calls) == 1
