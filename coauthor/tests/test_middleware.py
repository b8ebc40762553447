# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for authentication, validation and error rendering middleware.
"""

import pytest
import redis
from unittest.mock import MagicMock, patch
from pydantic import ValidationError

from coauthor.middleware.validation import format_validation_errors
from coauthor.models.requests import CredentialsRequest, SaveItemRequest
from coauthor.services.redis import RedisConnectionError


class TestAuthMiddleware:
    """Bearer tokens, the blocklist and session modes."""

    def test_missing_token(self, client):
        response = client.get('/api/session')

        assert response.status_code == 401
        assert response.get_json() == {"error": "You must be logged in!"}

    def test_malformed_token(self, client):
        response = client.get('/api/session', headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_valid_session(self, client, login):
        headers = login("alice")

        response = client.get('/api/session', headers=headers)

        assert response.status_code == 200
        assert response.get_json()["username"] == "alice"
        assert "password" not in response.get_json()

    def test_logged_out_token_is_rejected(self, client, login):
        headers = login("alice")

        assert client.post('/api/logout', headers=headers).status_code == 200
        assert client.get('/api/session', headers=headers).status_code == 401

    def test_logout_fails_when_token_cannot_be_blocked(self, app, client, login):
        headers = login("alice")

        with patch.object(app.redis_service.client, "set", side_effect=redis.ConnectionError("down")):
            response = client.post('/api/logout', headers=headers)

        assert response.status_code == 503
        assert response.get_json() == {"error": "Could not end the session, please retry"}
        assert client.get('/api/session', headers=headers).status_code == 200

    def test_account_kept_when_token_cannot_be_blocked(self, app, client, login):
        headers = login("alice")

        with patch.object(app.redis_service.client, "set", side_effect=redis.ConnectionError("down")):
            response = client.delete('/api/users', headers=headers)

        assert response.status_code == 503
        assert client.get('/api/users/alice').status_code == 200

    def test_blocklist_unavailable_fails_secure(self, app, client, login):
        headers = login("alice")
        app.redis_service.is_token_blocked = MagicMock(side_effect=RedisConnectionError("down"))

        assert client.get('/api/session', headers=headers).status_code == 401

    def test_login_requires_logged_out(self, client, login):
        headers = login("alice")

        response = client.post(
            '/api/login',
            json={"username": "alice", "password": "secret"},
            headers=headers
        )

        assert response.status_code == 403
        assert response.get_json() == {"error": "You must be logged out!"}

    def test_bad_credentials(self, client, login):
        login("alice")

        response = client.post('/api/login', json={"username": "alice", "password": "nope"})

        assert response.status_code == 401


class TestValidation:

    def test_format_validation_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            CredentialsRequest(username="has space", password="")

        errors = format_validation_errors(exc_info.value)
        fields = {error["field"] for error in errors}

        assert fields == {"username", "password"}
        assert all({"field", "message", "type", "input"} <= set(error) for error in errors)

    def test_alias_fields(self):
        request = SaveItemRequest.model_validate({"_id": "abc", "name": " Favorites "})

        assert request.post_id == "abc"
        assert request.name == "Favorites"

    def test_invalid_body_returns_details(self, client):
        response = client.post('/api/users', json={"username": ""})
        body = response.get_json()

        assert response.status_code == 400
        assert body["error"].startswith("Invalid request")
        assert {detail["field"] for detail in body["details"]} == {"username", "password"}

    def test_non_object_body(self, client):
        response = client.post('/api/users', json=["alice"])
        assert response.status_code == 400

    def test_invalid_object_id(self, client, login):
        headers = login("alice")

        response = client.patch('/api/posts/approve/not-an-id', headers=headers)

        assert response.status_code == 400


class TestErrorHandler:

    def test_unknown_route(self, client):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        assert "error" in response.get_json()

    def test_wrong_method(self, client):
        response = client.put('/api/session')
        assert response.status_code == 405

    def test_unexpected_error_is_500(self, app, client, login):
        headers = login("alice")
        app.concepts.drafting.get_by_member = MagicMock(side_effect=RuntimeError("boom"))

        response = client.get('/api/drafts', headers=headers)

        assert response.status_code == 500
        assert response.get_json() == {"error": "RuntimeError: boom"}

    def test_unexpected_error_hidden_in_production(self, app, client, login):
        headers = login("alice")
        app.config['ENVIRONMENT'] = 'production'
        app.concepts.drafting.get_by_member = MagicMock(side_effect=RuntimeError("boom"))

        response = client.get('/api/drafts', headers=headers)

        assert response.status_code == 500
        assert response.get_json() == {"error": "An unexpected error occurred"}
