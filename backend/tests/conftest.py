"""Shared pytest fixtures and configuration."""

import os
from datetime import datetime

import pytest

# Set test environment variables before homepick.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("AUTH_PROVIDER", "mock")
os.environ.setdefault("ADMIN_EMAIL", "admin@homepick.kr")
os.environ.setdefault("KAKAO_REST_API_KEY", "")
os.environ.setdefault("SEED_SAMPLE_NEWS", "false")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from homepick.database import init_db
from homepick.schemas.listing import ListingResponse
from homepick.services.document_store import DocumentStore

ADMIN_TOKEN = "mock:admin@homepick.kr:admin"
USER_TOKEN = "mock:visitor@example.com"


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return DocumentStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def client(store):
    """TestClient with the store, identity provider and Kakao client swapped for test doubles."""
    from fastapi.testclient import TestClient

    from homepick.main import app
    from homepick.services.auth import MockIdentityProvider, get_identity_provider
    from homepick.services.document_store import get_store
    from homepick.services.external.kakao_local import KakaoLocalClient, get_kakao_client

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: MockIdentityProvider()
    app.dependency_overrides[get_kakao_client] = lambda: KakaoLocalClient(api_key="")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}


def make_listing(listing_id, **overrides) -> ListingResponse:
    """Build a listing record with sensible defaults."""
    data = {
        "id": str(listing_id),
        "title": f"매물 {listing_id}",
        "type": "APARTMENT",
        "trade_type": "SALE",
        "price": 50000,
        "area": 20,
        "floor": 3,
        "location": "서울 강남구 역삼동",
        "lat": 37.5,
        "lng": 127.03,
        "features": [],
        "created_at": datetime(2024, 5, 1),
    }
    data.update(overrides)
    return ListingResponse(**data)


@pytest.fixture
def sample_listings():
    """Two-listing set: an apartment for sale and an officetel on monthly rent."""
    return [
        make_listing(1, type="APARTMENT", trade_type="SALE", price=50000, area=20),
        make_listing(
            2, type="OFFICETEL", trade_type="MONTHLY", price=None,
            deposit=1000, monthly_rent=50, area=10,
        ),
    ]


@pytest.fixture
def listing_payload():
    """Valid create-form payload for a sale listing."""
    return {
        "title": "강남역 도보 5분 채광 좋은 아파트",
        "description": "남향, 올수리",
        "type": "APARTMENT",
        "trade_type": "SALE",
        "price": 1_250_000_000,
        "area": 34,
        "floor": 12,
        "location": "서울 강남구 역삼동",
        "lat": 37.4979,
        "lng": 127.0276,
        "images": ["https://picsum.photos/800/600"],
        "features": ["남향", "역세권"],
    }
