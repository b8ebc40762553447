"""
Acceptance tests for the Coauthor platform.

Tests complete user journeys through the HTTP API: drafting together,
publishing with multi-approver consensus, hosting events and befriending.
"""

import pytest


class TestDraftToPostWorkflow:
    """A draft written by two users becomes a post approved by both."""

    @pytest.fixture(autouse=True)
    def setup_workflow(self, client, login):
        self.client = client
        self.u1 = login("u1")
        self.u2 = login("u2")

    def test_draft_conversion_and_consensus(self):
        client = self.client

        draft = client.post('/api/drafts', json={"content": "A"}, headers=self.u1).get_json()["draft"]
        draft_id = draft["_id"]
        assert draft["members"] == ["u1"]
        assert draft["contentSet"] == ["A"]

        assert client.patch(f'/api/drafts/{draft_id}', json={"member": "u2"}, headers=self.u1).status_code == 200

        added = client.patch(f'/api/drafts/add/{draft_id}', json={"content": "B"}, headers=self.u2)
        assert added.get_json()["contentSet"] == ["A", "B"]

        duplicate = client.patch(f'/api/drafts/add/{draft_id}', json={"content": "A"}, headers=self.u1)
        assert duplicate.status_code == 403

        client.patch(f'/api/drafts/select/{draft_id}', json={"content": "A"}, headers=self.u1)
        selected = client.patch(f'/api/drafts/select/{draft_id}', json={"content": "B"}, headers=self.u2)
        assert selected.get_json()["selectedSet"] == ["A", "B"]

        converted = client.post('/api/posts', json={"draft_id": draft_id}, headers=self.u1)
        assert converted.status_code == 201
        post = converted.get_json()["post"]
        assert post["approvers"] == ["u1", "u2"]
        assert post["content"] == ["A", "B"]
        assert post["status"] == "NotApproved"

        # The draft is gone
        assert client.get('/api/drafts', headers=self.u1).get_json() == []
        assert client.delete(f'/api/drafts/delete/{draft_id}', headers=self.u1).status_code == 404

        first = client.patch(f'/api/posts/approve/{post["_id"]}', headers=self.u1).get_json()["post"]
        assert first["approved"] == ["u1"]
        assert first["status"] == "NotApproved"

        second = client.patch(f'/api/posts/approve/{post["_id"]}', headers=self.u2).get_json()["post"]
        assert set(second["approved"]) == {"u1", "u2"}
        assert second["status"] == "Approved"

    def test_second_conversion_of_same_draft_fails(self):
        client = self.client
        draft_id = client.post('/api/drafts', json={"content": "A"}, headers=self.u1).get_json()["draft"]["_id"]

        assert client.post('/api/posts', json={"draft_id": draft_id}, headers=self.u1).status_code == 201
        assert client.post('/api/posts', json={"draft_id": draft_id}, headers=self.u1).status_code == 404


class TestEventWorkflow:
    """Approvers of an approved post host an event others can attend."""

    @pytest.fixture(autouse=True)
    def setup_workflow(self, client, login):
        self.client = client
        self.host = login("host")
        self.guest = login("guest")

        draft_id = client.post('/api/drafts', json={"content": "Picnic"}, headers=self.host).get_json()["draft"]["_id"]
        client.patch(f'/api/drafts/select/{draft_id}', json={"content": "Picnic"}, headers=self.host)
        self.post_id = client.post('/api/posts', json={"draft_id": draft_id}, headers=self.host).get_json()["post"]["_id"]

    def _create_event(self, headers, location="Park"):
        return self.client.post(
            '/api/events',
            json={"post_id": self.post_id, "location": location},
            headers=headers
        )

    def test_event_requires_approved_post(self):
        assert self._create_event(self.host).status_code == 403

    def test_host_and_attend(self):
        client = self.client
        client.patch(f'/api/posts/approve/{self.post_id}', headers=self.host)

        assert self._create_event(self.guest).status_code == 403

        created = self._create_event(self.host)
        assert created.status_code == 201
        event = created.get_json()["event"]
        assert event["hosts"] == ["host"]
        assert event["info"] == self.post_id

        assert client.patch(f'/api/events/rsvp/{event["_id"]}', headers=self.guest).status_code == 200
        assert client.patch(f'/api/events/rsvp/{event["_id"]}', headers=self.guest).status_code == 200

        moved = client.patch(
            f'/api/events/location/{event["_id"]}',
            json={"new_location": "Beach"},
            headers=self.guest
        )
        assert moved.status_code == 404

        moved = client.patch(
            f'/api/events/location/{event["_id"]}',
            json={"new_location": "Beach"},
            headers=self.host
        )
        assert moved.status_code == 200

        events = client.get('/api/events?host=host', headers=self.host).get_json()
        assert events[0]["attendees"] == ["guest"]
        assert events[0]["location"] == "Beach"

        assert client.delete(f'/api/events/delete/{event["_id"]}', headers=self.host).status_code == 200
        assert client.get('/api/events', headers=self.host).get_json() == []


class TestFriendWorkflow:

    @pytest.fixture(autouse=True)
    def setup_workflow(self, client, login):
        self.client = client
        self.a = login("a")
        self.b = login("b")

    def test_request_accept_unfriend(self):
        client = self.client

        assert client.post('/api/friend/requests/b', headers=self.a).status_code == 200

        reverse = client.post('/api/friend/requests/a', headers=self.b)
        assert reverse.status_code == 403
        assert reverse.get_json() == {"error": "A friend request from a to b is already pending!"}

        requests = client.get('/api/friend/requests', headers=self.b).get_json()
        assert [(r["from"], r["to"]) for r in requests] == [("a", "b")]

        assert client.put('/api/friend/accept/a', headers=self.b).status_code == 200
        assert client.get('/api/friends', headers=self.a).get_json() == ["b"]
        assert client.get('/api/friend/requests', headers=self.a).get_json() == []

        again = client.post('/api/friend/requests/b', headers=self.a)
        assert again.get_json() == {"error": "a and b are already friends!"}

        assert client.delete('/api/friends/a', headers=self.b).status_code == 200
        assert client.get('/api/friends', headers=self.a).get_json() == []
        assert client.delete('/api/friends/a', headers=self.b).status_code == 404

    def test_reject_and_withdraw(self):
        client = self.client

        client.post('/api/friend/requests/b', headers=self.a)
        assert client.put('/api/friend/reject/a', headers=self.b).status_code == 200
        assert client.put('/api/friend/accept/a', headers=self.b).status_code == 404

        client.post('/api/friend/requests/b', headers=self.a)
        assert client.delete('/api/friend/requests/b', headers=self.a).status_code == 200
        assert client.get('/api/friend/requests', headers=self.b).get_json() == []

    def test_cannot_befriend_self(self):
        response = self.client.post('/api/friend/requests/a', headers=self.a)

        assert response.status_code == 403
        assert response.get_json() == {"error": "a cannot befriend themselves!"}
