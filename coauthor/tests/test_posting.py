# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the posting concept and approval consensus.
"""

import threading
import pytest
from bson import ObjectId

from coauthor.domain.consensus import compute_status, consensus_reached
from coauthor.errors import AppError, ErrorKind
from coauthor.models.enums import PostStatus


class TestConsensus:
    """Approval is set equality, not a count."""

    def test_consensus_reached(self):
        u1, u2 = ObjectId(), ObjectId()

        assert consensus_reached([u2, u1], [u1, u2])
        assert not consensus_reached([u1], [u1, u2])
        assert not consensus_reached([], [])

    def test_duplicate_approvals_do_not_count_twice(self):
        u1, u2 = ObjectId(), ObjectId()
        assert compute_status([u1, u1], [u1, u2]) == PostStatus.NOT_APPROVED

    def test_duplicate_approvers_collapse(self):
        u1, u2 = ObjectId(), ObjectId()
        assert compute_status([u1, u2], [u1, u2, u2]) == PostStatus.APPROVED


class TestPostingConcept:
    """Test post creation, approval and themes."""

    @pytest.fixture
    def posting(self, concepts):
        return concepts.posting

    def test_create_post(self, posting):
        approvers = [ObjectId(), ObjectId()]
        post = posting.create(approvers, ["A", "B"])

        assert post.approvers == approvers
        assert post.content == ["A", "B"]
        assert post.approved == []
        assert post.status == PostStatus.NOT_APPROVED.value

    def test_approve_until_consensus(self, posting):
        u1, u2 = ObjectId(), ObjectId()
        post = posting.create([u1, u2], ["A"])

        after_first = posting.approve_post(post.id, u1)
        assert after_first.status == PostStatus.NOT_APPROVED.value

        after_second = posting.approve_post(post.id, u2)
        assert after_second.status == PostStatus.APPROVED.value
        assert posting.get_post(post.id).status == PostStatus.APPROVED.value

    def test_approve_is_idempotent(self, posting):
        u1, u2 = ObjectId(), ObjectId()
        post = posting.create([u1, u2], ["A"])

        posting.approve_post(post.id, u1)
        again = posting.approve_post(post.id, u1)

        assert again.approved == [u1]
        assert again.status == PostStatus.NOT_APPROVED.value

    def test_approve_by_non_approver(self, posting):
        post = posting.create([ObjectId()], ["A"])

        with pytest.raises(AppError) as exc_info:
            posting.approve_post(post.id, ObjectId())
        assert exc_info.value.kind == ErrorKind.NOT_POST_APPROVER
        assert posting.get_post(post.id).approved == []

    def test_approve_missing_post(self, posting):
        with pytest.raises(AppError) as exc_info:
            posting.approve_post(ObjectId(), ObjectId())
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_concurrent_approvals_reach_consensus(self, posting):
        approvers = [ObjectId() for _ in range(5)]
        post = posting.create(approvers, ["A"])

        threads = [
            threading.Thread(target=posting.approve_post, args=(post.id, user))
            for user in approvers
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        final = posting.get_post(post.id)
        assert set(final.approved) == set(approvers)
        assert final.status == PostStatus.APPROVED.value

    def test_assert_user_can_approve(self, posting):
        u1, u2 = ObjectId(), ObjectId()
        post = posting.create([u1, u2], ["A"])

        posting.assert_user_can_approve(post.id, u1)
        posting.approve_post(post.id, u1)

        with pytest.raises(AppError) as exc_info:
            posting.assert_user_can_approve(post.id, u1)
        assert exc_info.value.kind == ErrorKind.ALREADY_APPROVED

        with pytest.raises(AppError) as exc_info:
            posting.assert_user_can_approve(post.id, ObjectId())
        assert exc_info.value.kind == ErrorKind.NOT_POST_APPROVER

    def test_assert_post_is_approved(self, posting):
        user = ObjectId()
        post = posting.create([user], ["A"])

        with pytest.raises(AppError) as exc_info:
            posting.assert_post_is_approved(post.id)
        assert exc_info.value.kind == ErrorKind.NOT_ALLOWED

        posting.approve_post(post.id, user)
        posting.assert_post_is_approved(post.id)

    def test_set_theme(self, posting):
        post = posting.create([ObjectId()], ["A"])

        posting.set_theme(post.id, "Food")
        assert posting.get_post(post.id).theme == "Food"
        assert [p.id for p in posting.get_by_theme("Food")] == [post.id]

        with pytest.raises(AppError) as exc_info:
            posting.set_theme(post.id, "Gossip")
        assert exc_info.value.kind == ErrorKind.NOT_ALLOWED
        assert posting.get_post(post.id).theme == "Food"

    def test_filters(self, posting):
        u1, u2 = ObjectId(), ObjectId()
        first = posting.create([u1], ["A"])
        second = posting.create([u1, u2], ["B"])
        posting.approve_post(first.id, u1)

        assert {p.id for p in posting.get_by_author(u1)} == {first.id, second.id}
        assert [p.id for p in posting.get_by_author(u2)] == [second.id]
        assert [p.id for p in posting.get_by_status("Approved")] == [first.id]
        assert [p.id for p in posting.get_by_status(PostStatus.NOT_APPROVED)] == [second.id]
        assert posting.get_approvers(second.id) == [u1, u2]
