from __future__ import annotations

from tpo.application.dto.requests import ResolveTriadRequest
from tpo.application.dto.responses import TriadResponse
from tpo.application.mappers.composition_mapper import to_triad_response
from tpo.domain.common.money import CurrencyRateSet
from tpo.domain.pricing.triad import resolve_triad


class ResolveTriad:
    def execute(self, request_dto: ResolveTriadRequest) -> TriadResponse:
        rate_set = CurrencyRateSet.of(request_dto.sar_to_idr, request_dto.usd_to_idr)
        return to_triad_response(resolve_triad(request_dto.currency, request_dto.value, rate_set))
