"""
Shared fixtures: an app built from explicit settings, with every table, the
object store and the mailer swapped for in-memory fakes.

The TestClient is used without its context manager, so the lifespan (DB pool,
keep-alive scheduler) never starts.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from complaints import repository as complaints_repository
from core.config import Settings
from core.storage import StorageClient
from main import create_app
from news import repository as news_repository
from newsletter import repository as newsletter_repository
from projects import repository as projects_repository
from subscribers import repository as subscribers_repository

from fakes import FakeMailer, FakeSubscribers, InMemoryTable

ADMIN_SECRET = "admin-secret-value"
SERVICE_ROLE_KEY = "service-role-value"
ANON_KEY = "anon-key-value"
STORAGE_URL = "https://storage.example.test"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        node_env="test",
        supabase_url=STORAGE_URL,
        anon_key=ANON_KEY,
        service_role_key=SERVICE_ROLE_KEY,
        admin_secret_key=ADMIN_SECRET,
        newsletter_batch_size=2,
        newsletter_batch_delay_s=0,
        keep_alive_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def tables() -> dict:
    return {
        "projects": InMemoryTable("projects", columns=projects_repository.COLUMNS),
        "news": InMemoryTable("news", columns=news_repository.COLUMNS, order_by="published_at"),
        "complaints": InMemoryTable("complaints", columns=complaints_repository.COLUMNS),
        "subscribers": FakeSubscribers("newsletter_subscribers", columns=("email", "subscribed")),
        "templates": InMemoryTable("newsletter_templates", columns=newsletter_repository.TEMPLATE_COLUMNS),
        "campaigns": InMemoryTable("newsletter_campaigns", columns=newsletter_repository.CAMPAIGN_COLUMNS),
    }


@pytest.fixture
def stored_objects() -> list[dict]:
    return []


@pytest.fixture
def storage(stored_objects) -> StorageClient:
    def handler(request: httpx.Request) -> httpx.Response:
        stored_objects.append(
            {
                "path": request.url.path,
                "content_type": request.headers.get("content-type"),
                "upsert": request.headers.get("x-upsert"),
                "size": len(request.content),
            }
        )
        return httpx.Response(200, json={"Key": request.url.path})

    return StorageClient(
        base_url=STORAGE_URL,
        api_key=SERVICE_ROLE_KEY,
        bucket="images",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def app(settings, tables, storage, mailer):
    app = create_app(settings)
    app.state.storage = storage
    app.state.mailer = mailer
    app.dependency_overrides[projects_repository.get_repository] = lambda: tables["projects"]
    app.dependency_overrides[news_repository.get_repository] = lambda: tables["news"]
    app.dependency_overrides[complaints_repository.get_repository] = lambda: tables["complaints"]
    app.dependency_overrides[subscribers_repository.get_repository] = lambda: tables["subscribers"]
    app.dependency_overrides[newsletter_repository.get_template_repository] = lambda: tables["templates"]
    app.dependency_overrides[newsletter_repository.get_campaign_repository] = lambda: tables["campaigns"]
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {ADMIN_SECRET}"}
