from __future__ import annotations

import logging

from pydantic import ValidationError

from tpo.application.dto.responses import RateSetResponse
from tpo.application.metrics.composition import record_collaborator_failure, record_rate_set_fallback
from tpo.application.ports.cache import CacheStore
from tpo.application.ports.collaborators import CollaboratorUnavailableError, RateSetSource
from tpo.domain.common.ids import BranchId
from tpo.domain.common.money import CurrencyRateSet

logger = logging.getLogger(__name__)


def rate_set_cache_key(branch_id: BranchId | None) -> str:
    return f"rates:{branch_id or 'global'}"


class LoadRateSet:
    """Fetches the rate set for a branch, never failing.

    A missing or unreachable rate source yields the default rates so that the
    order form stays usable; the substitution is logged and counted.
    """

    def __init__(
        self,
        source: RateSetSource,
        cache: CacheStore,
        ttl_seconds: int = 300,
    ) -> None:
        self._source = source
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            return

    def execute(self, branch_id: BranchId | None) -> CurrencyRateSet:
        key = rate_set_cache_key(branch_id)
        payload = self._cache_get(key)
        if payload:
            try:
                cached = RateSetResponse.model_validate_json(payload)
            except ValidationError:
                cached = None
            if cached is not None:
                return CurrencyRateSet.of(cached.sarToIdr, cached.usdToIdr)

        try:
            fetched = self._source.get_rate_set(branch_id)
        except CollaboratorUnavailableError as exc:
            record_collaborator_failure(exc.operation)
            record_rate_set_fallback("unavailable")
            logger.warning(
                "rate_set_defaulted",
                extra={"branch_id": branch_id, "reason": "unavailable", "error": str(exc)},
            )
            return CurrencyRateSet()

        if fetched is None:
            record_rate_set_fallback("missing")
            logger.info("rate_set_defaulted", extra={"branch_id": branch_id, "reason": "missing"})
            return CurrencyRateSet()

        rate_set = fetched.normalized()
        self._cache_set(
            key,
            RateSetResponse(
                sarToIdr=rate_set.sar_to_idr,
                usdToIdr=rate_set.usd_to_idr,
                isDefault=rate_set.is_default,
            ).model_dump_json(),
        )
        return rate_set
