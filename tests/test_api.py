#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_api
    ~~~~~~~~~~~~~~

    The HTTP surface: status codes, auth and the JSON loan views.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from lendbook.app import create_app
from lendbook.core.exceptions import StorageUnavailableError
from lendbook.core.store import LendingStore


@pytest.fixture
def app(store, clock):
    return create_app(store=store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth(app):
    def _auth(identity):
        token = app.state.identities.issue_token(identity.id)
        return {"Authorization": f"Bearer {token}"}
    return _auth


def test_health(client):
    assert client.get("/v1/api/health").json() == {"status": "ok"}
    response = client.get("/v1/api/health/db")
    assert response.status_code == 200


def test_health_db_down(client, store):
    with patch.object(store, "check_db", return_value=False):
        response = client.get("/v1/api/health/db")
    assert response.status_code == 500


def test_requires_authentication(client, item_id):
    response = client.post("/v1/api/loans", json={"item_id": item_id})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = client.get("/v1/api/loans", headers={"Authorization": "Bearer junk"})
    assert response.status_code == 401


def test_session_cookie_accepted(client, app, alice):
    token = app.state.identities.issue_token(alice.id)
    response = client.get("/v1/api/users/me", cookies={"session": token})
    assert response.status_code == 200
    assert response.json() == {"id": alice.id, "name": "Alice", "role": "user"}


def test_borrow_and_return(client, auth, alice, item_id):
    response = client.post("/v1/api/loans", json={"item_id": item_id}, headers=auth(alice))
    assert response.status_code == 201
    loan = response.json()
    assert loan["item_id"] == item_id
    assert loan["holder_id"] == alice.id
    assert loan["title"] == "Dune"
    assert loan["returned_at"] is None

    response = client.put(f"/v1/api/loans/{loan['loan_id']}/returned", headers=auth(alice))
    assert response.status_code == 200
    assert response.json()["returned_at"] is not None

    response = client.put(f"/v1/api/loans/{loan['loan_id']}/returned", headers=auth(alice))
    assert response.status_code == 409


def test_borrow_errors(client, auth, alice, bob, item_id):
    response = client.post("/v1/api/loans", json={"item_id": "missing"}, headers=auth(alice))
    assert response.status_code == 404

    response = client.post(
        "/v1/api/loans", json={"item_id": item_id, "holder_id": bob.id}, headers=auth(alice))
    assert response.status_code == 403

    assert client.post("/v1/api/loans", json={"item_id": item_id}, headers=auth(alice)).status_code == 201
    response = client.post("/v1/api/loans", json={"item_id": item_id}, headers=auth(bob))
    assert response.status_code == 409
    assert "already on loan" in response.json()["detail"]


def test_borrow_validates_body(client, auth, alice):
    response = client.post("/v1/api/loans", json={}, headers=auth(alice))
    assert response.status_code == 422


def test_return_errors(client, auth, alice, bob, admin, item_id):
    assert client.put("/v1/api/loans/missing/returned", headers=auth(alice)).status_code == 404

    loan = client.post("/v1/api/loans", json={"item_id": item_id}, headers=auth(alice)).json()
    response = client.put(f"/v1/api/loans/{loan['loan_id']}/returned", headers=auth(bob))
    assert response.status_code == 403

    response = client.put(f"/v1/api/loans/{loan['loan_id']}/returned", headers=auth(admin))
    assert response.status_code == 200


def test_loan_listings(client, auth, alice, bob, add_item):
    dune, emma = add_item(), add_item(title="Emma", author="Jane Austen")
    a = client.post("/v1/api/loans", json={"item_id": dune}, headers=auth(alice)).json()
    b = client.post("/v1/api/loans", json={"item_id": emma}, headers=auth(bob)).json()

    everyone = client.get("/v1/api/loans", headers=auth(alice)).json()
    assert [l["loan_id"] for l in everyone] == [a["loan_id"], b["loan_id"]]

    mine = client.get("/v1/api/users/me/loans", headers=auth(bob)).json()
    assert [l["loan_id"] for l in mine] == [b["loan_id"]]

    client.put(f"/v1/api/loans/{a['loan_id']}/returned", headers=auth(alice))
    history = client.get(f"/v1/api/items/{dune}/loans", headers=auth(bob)).json()
    assert [l["loan_id"] for l in history] == [a["loan_id"]]
    assert history[0]["returned_at"] is not None

    assert client.get("/v1/api/items/missing/loans", headers=auth(bob)).status_code == 404


def test_storage_failure_is_generic_500(client, app, auth, alice, item_id):
    failure = StorageUnavailableError("Storage unavailable: OperationalError")
    with patch.object(app.state.lending, "borrow", side_effect=failure):
        response = client.post("/v1/api/loans", json={"item_id": item_id}, headers=auth(alice))
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


class HealthOnlyStore(LendingStore):
    """Answers health checks and nothing else."""
    transaction = reader = get_item = get_user = get_loan = None
    find_active_loan = insert_loan = mark_returned = loan_view = find_loans = None

    def check_db(self):
        return True


def test_app_accepts_any_lending_store():
    store = HealthOnlyStore()
    assert store.init() is store

    with TestClient(create_app(store=store)) as client:
        assert client.get("/v1/api/health/db").status_code == 200
