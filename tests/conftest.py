"""Shared fixtures: a small users/orders/products schema."""

from __future__ import annotations

from typing import Callable

import pytest

from sqlpad.sqlintel import (
    CompletionResult,
    ForeignKey,
    MetadataIndex,
    SqlIntelService,
    StaticMetadataProvider,
)

SAMPLE_TABLES: dict[str, tuple[str, ...]] = {
    "users": ("id", "name", "email", "role", "created_at"),
    "orders": ("id", "user_id", "total", "status", "created_at"),
    "products": ("id", "name", "price"),
}

SAMPLE_FOREIGN_KEYS = (ForeignKey("orders", "user_id", "users", "id"),)

SAMPLE_VALUES: dict[str, tuple[str, ...]] = {
    "users.role": ("admin", "editor", "viewer"),
    "orders.status": ("pending", "shipped", "delivered"),
}

Complete = Callable[..., "CompletionResult | None"]


@pytest.fixture
def metadata() -> MetadataIndex:
    return MetadataIndex.build(SAMPLE_TABLES, foreign_keys=SAMPLE_FOREIGN_KEYS, values=SAMPLE_VALUES)


@pytest.fixture
def provider() -> StaticMetadataProvider:
    return StaticMetadataProvider(SAMPLE_TABLES, foreign_keys=SAMPLE_FOREIGN_KEYS, values=SAMPLE_VALUES)


@pytest.fixture
def service(provider: StaticMetadataProvider) -> SqlIntelService:
    return SqlIntelService(metadata_provider=provider)


@pytest.fixture
def complete(service: SqlIntelService) -> Complete:
    """Complete at the end of the text against the sample schema."""

    def _complete(text: str, **kwargs: object) -> CompletionResult | None:
        return service.complete(text, **kwargs)

    return _complete


@pytest.fixture
def labels(complete: Complete) -> Callable[[str], list[str]]:
    """Labels offered at the end of the text, or an empty list."""

    def _labels(text: str) -> list[str]:
        result = complete(text)
        return result.labels if result else []

    return _labels
