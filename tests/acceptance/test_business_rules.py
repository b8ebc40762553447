"""
Business rule enforcement acceptance tests.

Tests that authorization guards fail closed and that state invariants hold
across endpoints.
"""

import pytest


class TestApprovalRules:

    @pytest.fixture(autouse=True)
    def setup_business_rules_test(self, client, login):
        self.client = client
        self.alice = login("alice")
        self.bob = login("bob")
        self.mallory = login("mallory")

        draft_id = client.post('/api/drafts', json={"content": "A"}, headers=self.alice).get_json()["draft"]["_id"]
        client.patch(f'/api/drafts/{draft_id}', json={"member": "bob"}, headers=self.alice)
        client.patch(f'/api/drafts/select/{draft_id}', json={"content": "A"}, headers=self.alice)
        self.post_id = client.post('/api/posts', json={"draft_id": draft_id}, headers=self.alice).get_json()["post"]["_id"]

    def test_outsider_cannot_approve(self):
        response = self.client.patch(f'/api/posts/approve/{self.post_id}', headers=self.mallory)

        assert response.status_code == 403
        assert response.get_json() == {"error": f"mallory is not an approver of post {self.post_id}!"}

    def test_cannot_approve_twice(self):
        self.client.patch(f'/api/posts/approve/{self.post_id}', headers=self.alice)

        response = self.client.patch(f'/api/posts/approve/{self.post_id}', headers=self.alice)

        assert response.status_code == 403
        assert response.get_json() == {"error": f"alice already approved post {self.post_id}!"}

    def test_approval_needs_every_approver(self):
        first = self.client.patch(f'/api/posts/approve/{self.post_id}', headers=self.alice).get_json()["post"]
        assert first["status"] == "NotApproved"

        second = self.client.patch(f'/api/posts/approve/{self.post_id}', headers=self.bob).get_json()["post"]
        assert second["status"] == "Approved"

    def test_unknown_post(self):
        response = self.client.patch('/api/posts/approve/0123456789abcdef01234567', headers=self.alice)
        assert response.status_code == 404

    def test_deleted_approver_renders_placeholder(self):
        self.client.delete('/api/users', headers=self.bob)

        feed = self.client.get('/api/posts', headers=self.alice).get_json()

        assert feed[0]["approvers"] == ["alice", "DELETED_USER"]


class TestAccountRules:

    def test_username_is_unique(self, client):
        client.post('/api/users', json={"username": "alice", "password": "secret"})

        response = client.post('/api/users', json={"username": "alice", "password": "other"})

        assert response.status_code == 403
        assert response.get_json() == {"error": "User with username alice already exists!"}

    def test_username_cannot_contain_slashes(self, client):
        response = client.post('/api/users', json={"username": "a/b", "password": "secret"})
        assert response.status_code == 400

    def test_wrong_current_password(self, client, login):
        headers = login("alice")

        response = client.patch(
            '/api/users/password',
            json={"currentPassword": "nope", "newPassword": "better"},
            headers=headers
        )

        assert response.status_code == 403


class TestDraftRules:

    def test_selection_requires_existing_content(self, client, login):
        alice = login("alice")
        draft_id = client.post('/api/drafts', json={"content": "A"}, headers=alice).get_json()["draft"]["_id"]

        response = client.patch(f'/api/drafts/select/{draft_id}', json={"content": "Z"}, headers=alice)
        assert response.status_code == 404

        response = client.patch(f'/api/drafts/deselect/{draft_id}', json={"content": "A"}, headers=alice)
        assert response.status_code == 404

    def test_content_is_required(self, client, login):
        alice = login("alice")

        assert client.post('/api/drafts', json={}, headers=alice).status_code == 400
        assert client.post('/api/drafts', json={"content": "   "}, headers=alice).status_code == 400
