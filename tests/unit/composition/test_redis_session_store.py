from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import hotel_product, visa_product
from tpo.application.ports.sessions import CompositionSession, Notice, OptimisticConcurrencyError
from tpo.domain.catalog.entities import ProductType
from tpo.domain.common.ids import BranchId, CompositionId, OwnerId
from tpo.domain.common.money import Currency, CurrencyRateSet
from tpo.domain.common.roles import Role
from tpo.domain.order.composition import start_composition
from tpo.infrastructure.sessions import redis_session_store
from tpo.infrastructure.sessions.redis_session_store import RedisCompositionStore, composition_key

COMPOSITION_ID = CompositionId("cmp_1")


class FakeRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.expiry: dict[str, int] = {}
        self.watched: tuple[str, ...] = ()

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def set(self, name: str, value: str, ex: int | None = None) -> None:
        self.values[name] = value
        if ex is not None:
            self.expiry[name] = ex

    def delete(self, name: str) -> None:
        self.values.pop(name, None)

    def multi(self) -> None:
        pass

    def transaction(self, func, *watches: str, **kwargs):
        self.watched = watches
        return func(self)


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    client = FakeRedis()
    monkeypatch.setattr(redis_session_store, "get_redis_client", lambda timeout_seconds=1.0: client)
    return client


def _session() -> CompositionSession:
    composition = start_composition(
        COMPOSITION_ID,
        CurrencyRateSet.of(4300, 16000),
        branch_id=BranchId("brn_1"),
        owner_id=OwnerId("own_1"),
    )
    hotel_row_id = composition.rows[0].row_id
    composition = composition.select_product(hotel_row_id, hotel_product())
    composition = composition.toggle_sub_line_meal(
        hotel_row_id,
        composition.hotel_row(hotel_row_id).sub_lines[0].line_id,
        hotel_product(),
    )
    composition = composition.add_row(ProductType.VISA)
    composition = composition.select_product(composition.rows[1].row_id, visa_product())
    composition = composition.set_active_currency(Currency.SAR)
    return CompositionSession(
        composition=composition,
        role=Role.INVOICE_KOORDINATOR,
        products=(hotel_product(), visa_product()),
        notices=(Notice("CATALOG_UNAVAILABLE", "Product catalog could not be loaded."),),
    )


def test_session_survives_storage(fake_redis: FakeRedis) -> None:
    store = RedisCompositionStore(ttl_seconds=7200)
    session = _session()

    saved = store.save(session)

    assert fake_redis.expiry[composition_key(COMPOSITION_ID)] == 7200
    assert fake_redis.watched == (composition_key(COMPOSITION_ID),)
    assert saved == replace(session, revision=1)
    assert store.get(COMPOSITION_ID) == saved


def test_missing_session(fake_redis: FakeRedis) -> None:
    assert RedisCompositionStore(ttl_seconds=60).get(CompositionId("cmp_404")) is None


def test_corrupt_or_outdated_payload_reads_as_expired(fake_redis: FakeRedis) -> None:
    store = RedisCompositionStore(ttl_seconds=60)
    store.save(_session())
    key = composition_key(COMPOSITION_ID)
    outdated = json.loads(fake_redis.values[key])
    outdated["schemaVersion"] = 0

    fake_redis.values[key] = json.dumps(outdated)
    assert store.get(COMPOSITION_ID) is None

    fake_redis.values[key] = "{broken"
    assert store.get(COMPOSITION_ID) is None


def test_delete(fake_redis: FakeRedis) -> None:
    store = RedisCompositionStore(ttl_seconds=60)
    store.save(_session())

    store.delete(COMPOSITION_ID)

    assert fake_redis.values == {}


def test_save_from_an_outdated_revision_is_rejected(fake_redis: FakeRedis) -> None:
    store = RedisCompositionStore(ttl_seconds=60)
    loaded = store.save(_session())
    store.save(loaded.with_composition(loaded.composition.with_selection(BranchId("brn_2"), None)))

    with pytest.raises(OptimisticConcurrencyError):
        store.save(loaded.with_composition(loaded.composition.set_active_currency(Currency.USD)))

    current = store.get(COMPOSITION_ID)
    assert current is not None
    assert current.revision == 2
    assert current.composition.branch_id == "brn_2"
    assert current.composition.active_currency == Currency.SAR


def test_save_of_a_deleted_session_is_rejected(fake_redis: FakeRedis) -> None:
    store = RedisCompositionStore(ttl_seconds=60)
    loaded = store.save(_session())
    store.delete(COMPOSITION_ID)

    with pytest.raises(OptimisticConcurrencyError):
        store.save(loaded)

    assert fake_redis.values == {}
