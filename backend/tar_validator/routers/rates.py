"""Rates router — per diem lookup and GSA connectivity check."""

from fastapi import APIRouter, Depends, Query

from tar_validator.dependencies import get_rate_client
from tar_validator.services.rate_client import PerDiemRateClient

router = APIRouter()


@router.get("")
def get_rates(
    city: str = Query(..., min_length=1),
    state: str = Query(..., min_length=2),
    client: PerDiemRateClient = Depends(get_rate_client),
):
    """Per diem M&IE and average lodging for a city; defaults when unavailable."""
    return client.get_rates(city, state)


@router.get("/health")
def rates_health(client: PerDiemRateClient = Depends(get_rate_client)):
    return client.check_connectivity()
