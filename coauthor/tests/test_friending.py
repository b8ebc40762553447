# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the friend-request lifecycle.
"""

import pytest
from unittest.mock import patch
from bson import ObjectId

from coauthor.concepts.friending import FRIENDS, NONE
from coauthor.errors import AppError, ErrorKind


class TestFriendingConcept:

    @pytest.fixture
    def friending(self, concepts):
        return concepts.friending

    @pytest.fixture
    def users(self):
        return ObjectId(), ObjectId()

    def test_request_accept_unfriend(self, friending, users):
        a, b = users

        friending.send_request(a, b)
        assert friending.relationship_state(a, b) == f"pending({a}->{b})"

        friending.accept_request(a, b)
        assert friending.relationship_state(a, b) == FRIENDS
        assert friending.get_friends(a) == [b]
        assert friending.get_friends(b) == [a]
        assert friending.get_requests(a) == []

        friending.remove_friend(b, a)
        assert friending.relationship_state(a, b) == NONE

    def test_no_request_to_self(self, friending, users):
        a, _ = users

        with pytest.raises(AppError) as exc_info:
            friending.send_request(a, a)
        assert exc_info.value.kind == ErrorKind.SELF_RELATIONSHIP

    def test_one_pending_request_per_pair(self, friending, users):
        a, b = users
        friending.send_request(a, b)

        for sender, receiver in [(a, b), (b, a)]:
            with pytest.raises(AppError) as exc_info:
                friending.send_request(sender, receiver)
            assert exc_info.value.kind == ErrorKind.REQUEST_PENDING

        assert len(friending.get_requests(a)) == 1

    def test_no_request_between_friends(self, friending, users):
        a, b = users
        friending.send_request(a, b)
        friending.accept_request(a, b)

        with pytest.raises(AppError) as exc_info:
            friending.send_request(b, a)
        assert exc_info.value.kind == ErrorKind.ALREADY_FRIENDS

    def test_accept_requires_matching_direction(self, friending, users):
        a, b = users
        friending.send_request(a, b)

        with pytest.raises(AppError) as exc_info:
            friending.accept_request(b, a)
        assert exc_info.value.kind == ErrorKind.REQUEST_NOT_FOUND
        assert friending.relationship_state(a, b) == f"pending({a}->{b})"

    def test_reject_request(self, friending, users):
        a, b = users
        friending.send_request(a, b)

        friending.reject_request(a, b)
        assert friending.relationship_state(a, b) == NONE

        with pytest.raises(AppError) as exc_info:
            friending.reject_request(a, b)
        assert exc_info.value.kind == ErrorKind.REQUEST_NOT_FOUND

    def test_remove_request(self, friending, users):
        a, b = users
        friending.send_request(a, b)

        friending.remove_request(a, b)

        assert friending.get_requests(b) == []
        friending.send_request(b, a)
        assert friending.relationship_state(a, b) == f"pending({b}->{a})"

    def test_remove_friend_when_not_friends(self, friending, users):
        a, b = users

        with pytest.raises(AppError) as exc_info:
            friending.remove_friend(a, b)
        assert exc_info.value.kind == ErrorKind.NOT_FRIENDS
        assert exc_info.value.users == {"user1": a, "user2": b}

    def test_get_requests_lists_both_directions(self, friending):
        a, b, c = ObjectId(), ObjectId(), ObjectId()
        friending.send_request(a, b)
        friending.send_request(c, a)

        requests = friending.get_requests(a)
        assert {(r.from_user, r.to_user) for r in requests} == {(a, b), (c, a)}


class TestFriendingInterleavings:
    """Concurrent operations on one pair replayed at their critical points."""

    @pytest.fixture
    def friending(self, concepts):
        return concepts.friending

    @pytest.fixture
    def users(self):
        return ObjectId(), ObjectId()

    def test_request_sent_while_accept_creates_edge(self, friending, users):
        a, b = users
        friending.send_request(a, b)
        real_insert = friending.friends.insert_unique
        outcomes = []

        def send_then_insert(document):
            try:
                friending.send_request(a, b)
            except AppError as e:
                outcomes.append(e.kind)
            return real_insert(document)

        with patch.object(friending.friends, "insert_unique", side_effect=send_then_insert):
            friending.accept_request(a, b)

        assert outcomes == [ErrorKind.REQUEST_PENDING]
        assert friending.relationship_state(a, b) == FRIENDS
        assert friending.get_requests(a) == []

    def test_request_sent_while_accept_consumes_request(self, friending, users):
        a, b = users
        friending.send_request(a, b)
        real_delete = friending.requests.find_one_and_delete
        outcomes = []

        def send_then_delete(query):
            try:
                friending.send_request(b, a)
            except AppError as e:
                outcomes.append(e.kind)
            return real_delete(query)

        with patch.object(friending.requests, "find_one_and_delete", side_effect=send_then_delete):
            friending.accept_request(a, b)

        assert outcomes == [ErrorKind.ALREADY_FRIENDS]
        assert friending.relationship_state(a, b) == FRIENDS
        assert friending.get_requests(a) == []

    def test_accept_racing_reject_leaves_no_edge(self, friending, users):
        a, b = users
        friending.send_request(a, b)
        real_delete = friending.requests.find_one_and_delete

        def reject_first(query):
            # The receiver rejects just before the accept consumes the request
            real_delete(query)
            return real_delete(query)

        with patch.object(friending.requests, "find_one_and_delete", side_effect=reject_first):
            with pytest.raises(AppError) as exc_info:
                friending.accept_request(a, b)

        assert exc_info.value.kind == ErrorKind.REQUEST_NOT_FOUND
        assert friending.relationship_state(a, b) == NONE
