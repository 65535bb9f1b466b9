"""
Tests for credential extraction and the public/admin access tiers.
"""

from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from auth import security
from main import create_app
from projects import repository as projects_repository

from conftest import ADMIN_SECRET, ANON_KEY, SERVICE_ROLE_KEY

PROJECTS = "/api/v1/projects"
VALID_PROJECT = {
    "title": "Market stalls renovation",
    "description": "Renovation of forty stalls at the central market.",
    "location": "Central market",
}


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer   abc  ", "abc"),
        ("Basic abc", ""),
        ("Bearer", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_bearer_token(header, expected):
    assert security.extract_bearer_token(header) == expected


def test_request_credentials_skips_empty_values():
    creds = security.request_credentials(authorization="Token x", api_key=" k ", admin_secret="")

    assert creds == ["k"]


def test_empty_secrets_never_match():
    assert security.matches_any([""], ["", "secret"]) is False
    assert security.matches_any(["secret"], [""]) is False
    assert security.matches_any(["other", "secret"], ["secret"]) is True


@pytest.mark.parametrize(
    "headers",
    [
        {"Authorization": f"Bearer {ADMIN_SECRET}"},
        {"Authorization": f"Bearer {SERVICE_ROLE_KEY}"},
        {"x-api-key": SERVICE_ROLE_KEY},
        {"x-admin-secret": ADMIN_SECRET},
    ],
)
def test_admin_credentials_are_accepted_from_any_header(client, headers):
    assert client.post(PROJECTS, json=VALID_PROJECT, headers=headers).status_code == 201


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": f"Bearer {ANON_KEY}"},
        {"Authorization": "Bearer wrong"},
        {"x-admin-secret": ADMIN_SECRET + "x"},
    ],
)
def test_non_admin_credentials_are_rejected(client, headers, tables):
    resp = client.post(PROJECTS, json=VALID_PROJECT, headers=headers)

    assert resp.status_code == 401
    assert resp.json()["message"] == "Unauthorized. Admin access required."
    assert tables["projects"].rows == []


def test_authorization_is_checked_before_validation(client):
    resp = client.post(PROJECTS, json={"title": "x"})

    assert resp.status_code == 401


def test_admin_secret_disabled_when_unset(settings, tables):
    app = create_app(replace(settings, admin_secret_key=""))
    app.dependency_overrides[projects_repository.get_repository] = lambda: tables["projects"]
    client = TestClient(app)

    resp = client.post(PROJECTS, json=VALID_PROJECT, headers={"Authorization": f"Bearer {ADMIN_SECRET}"})

    assert resp.status_code == 401


def test_open_mode_allows_anonymous_reads(client):
    assert client.get(PROJECTS).status_code == 200


def test_key_mode_requires_a_known_key(settings, tables):
    app = create_app(replace(settings, public_access_mode="key"))
    app.dependency_overrides[projects_repository.get_repository] = lambda: tables["projects"]
    client = TestClient(app)

    anonymous = client.get(PROJECTS)
    with_anon_key = client.get(PROJECTS, headers={"x-api-key": ANON_KEY})
    with_admin = client.get(PROJECTS, headers={"Authorization": f"Bearer {ADMIN_SECRET}"})

    assert anonymous.status_code == 401
    assert anonymous.json()["message"] == "Unauthorized. Valid API key required."
    assert with_anon_key.status_code == 200
    assert with_admin.status_code == 200
