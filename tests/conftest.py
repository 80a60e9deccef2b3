"""Общие фикстуры тестов."""

from typing import Any, Dict, List

import pytest

from lead_pivot.core.domain.services import (
    FieldResolverService,
    PivotBuilderService,
    ValueFormatterService,
)


@pytest.fixture
def resolver() -> FieldResolverService:
    return FieldResolverService()


@pytest.fixture
def builder() -> PivotBuilderService:
    return PivotBuilderService()


@pytest.fixture
def formatter(resolver) -> ValueFormatterService:
    return ValueFormatterService(resolver)


@pytest.fixture
def leads() -> List[Dict[str, Any]]:
    """Небольшая выборка лидов в том виде, в котором их отдаёт таблица."""
    return [
        {
            "id": "1", "fullName": "Asha Rao", "status": "Hot", "source": "Web",
            "stage": "Trial Booked", "associate": "Kiran", "center": "Bandra",
            "createdAt": "2024-01-15T10:00:00Z", "ltv": "₹12,000", "visits": "3",
        },
        {
            "id": "2", "fullName": "Dev Patel", "status": "Hot", "source": "Ad",
            "stage": "Initial Contact", "associate": "Kiran", "center": "Bandra",
            "createdAt": "2024-01-20", "ltv": "8000", "visits": 1,
        },
        {
            "id": "3", "fullName": "Meera Iyer", "status": "Cold", "source": "Web",
            "stage": "Initial Contact", "associate": "Sana", "center": "Andheri",
            "createdAt": "05/02/2024", "ltv": "", "visits": "0",
        },
        {
            "id": "4", "fullName": "Rohan Shah", "status": "", "source": "Referral",
            "stage": "Converted", "associate": "Sana", "center": "Andheri",
            "createdAt": "not a date", "LTV": "1,50,000", "Visits": "7",
        },
        {
            "id": "5", "fullName": "Zoya Khan", "source": "Web",
            "stage": "Converted", "associate": "Kiran", "center": "Bandra",
            "createdAt": "2023-12-31", "ltv": 45000.5, "visits": "2",
        },
    ]
