# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.

Storage is an in-memory ``mongomock`` client and the token blocklist an
in-memory ``fakeredis`` server, so the suite needs no running services.
"""

import os
import pytest
import fakeredis
import mongomock
from bson import ObjectId

from coauthor.app import create_app
from coauthor.concepts import build_concepts
from coauthor.services.auth import AuthService
from coauthor.services.mongodb import MongoDBService
from coauthor.services.redis import RedisService

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['MONGODB_DATABASE'] = 'coauthor_test'

TEST_THEMES = ["Travel", "Food", "Music"]


@pytest.fixture(scope="session")
def auth_service():
    """Token service with one key pair for the whole session and cheap hashing."""
    return AuthService(bcrypt_rounds=4)


@pytest.fixture
def mongodb_service():
    """MongoDB service over an in-memory client."""
    service = MongoDBService(
        database_name="coauthor_test",
        client=mongomock.MongoClient(),
        max_retries=2,
        retry_factor=0.001
    )
    service.create_indexes()
    yield service
    service.close_connection()


@pytest.fixture
def redis_service():
    """Blocklist service over an in-memory Redis."""
    return RedisService(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def concepts(mongodb_service, auth_service):
    return build_concepts(mongodb_service, auth_service, TEST_THEMES)


@pytest.fixture
def make_user(concepts):
    """Register a user and return its id."""
    def _make_user(username: str, password: str = "secret") -> ObjectId:
        return concepts.users.create(username, password).id
    return _make_user


@pytest.fixture
def app(mongodb_service, redis_service, auth_service, concepts):
    """Flask application wired to the in-memory services."""
    application = create_app(
        config={
            'ENVIRONMENT': 'test',
            'TESTING': True,
            'OTEL_ENABLED': False,
            'DOCS_ENABLED': False,
            'POST_THEMES': TEST_THEMES
        },
        concepts=concepts,
        mongodb_service=mongodb_service,
        redis_service=redis_service,
        auth_service=auth_service
    )
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Register (if needed) and log in; returns the Authorization header."""
    def _login(username: str, password: str = "secret") -> dict:
        client.post('/api/users', json={"username": username, "password": password})
        response = client.post('/api/login', json={"username": username, "password": password})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['access_token']}"}
    return _login
