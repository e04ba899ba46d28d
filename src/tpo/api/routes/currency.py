from __future__ import annotations

from fastapi import APIRouter

from tpo.application.dto.requests import ResolveTriadRequest
from tpo.application.dto.responses import TriadResponse
from tpo.application.use_cases.resolve_triad import ResolveTriad

router = APIRouter()


@router.post("/v1/currency/triad", response_model=TriadResponse)
def resolve_currency_triad(request_dto: ResolveTriadRequest) -> TriadResponse:
    return ResolveTriad().execute(request_dto)
