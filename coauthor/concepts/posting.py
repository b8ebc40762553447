# SPDX-License-Identifier: Apache-2.0

"""
Posting concept: a multi-approver consensus gate for published content.

A post becomes ``Approved`` only when its approvals equal its approver set.
Approvals are added with ``$addToSet`` on documents that list the user as an
approver, so concurrent approvals never drop each other and ``approved`` never
leaves the approver set. The status is recomputed from the document returned
by that same atomic update; approval is monotonic, so only the transition to
``Approved`` is ever written.
"""

from typing import Iterable, List, Sequence
from bson import ObjectId
from opentelemetry import trace
import logging

from ..domain.consensus import compute_status, contains_id
from ..errors import AppError, ErrorKind, not_allowed, not_found
from ..models.entities import PostDoc
from ..models.enums import PostStatus
from ..services.mongodb import DocCollection

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class PostingConcept:
    """Posts with approvers, ordered content, approvals and an optional theme."""

    def __init__(self, posts: DocCollection, themes: Iterable[str] = ()):
        self.posts = posts
        self.themes = list(themes)

    def create(self, approvers: Sequence[ObjectId], content: Sequence[str]) -> PostDoc:
        with tracer.start_as_current_span("posting.create") as span:
            span.set_attribute("post.approver_count", len(approvers))
            _id = self.posts.create_one({
                "approvers": list(approvers),
                "content": list(content),
                "approved": [],
                "status": PostStatus.NOT_APPROVED.value
            })
            logger.info("Post created", extra={"post_id": str(_id)})
            return self.get_post(_id)

    def get_post(self, _id: ObjectId) -> PostDoc:
        post = self.posts.read_one({"_id": _id})
        if post is None:
            raise not_found("Post {post} does not exist!", post=_id)
        return PostDoc.model_validate(post)

    def get_posts(self) -> List[PostDoc]:
        return self._read_many({})

    def get_by_author(self, author: ObjectId) -> List[PostDoc]:
        return self._read_many({"approvers": author})

    def get_by_theme(self, theme: str) -> List[PostDoc]:
        return self._read_many({"theme": theme})

    def get_by_status(self, status: str) -> List[PostDoc]:
        return self._read_many({"status": PostStatus(status).value})

    def get_approvers(self, _id: ObjectId) -> List[ObjectId]:
        return self.get_post(_id).approvers

    def approve_post(self, _id: ObjectId, user: ObjectId) -> PostDoc:
        """Record ``user``'s approval; approving twice leaves the post unchanged."""
        with tracer.start_as_current_span("posting.approve_post") as span:
            span.set_attribute("post.id", str(_id))

            updated = self.posts.find_one_and_update(
                {"_id": _id, "approvers": user},
                {"$addToSet": {"approved": user}}
            )
            if updated is None:
                post = self.get_post(_id)
                raise self._not_approver(post.id, user)

            post = PostDoc.model_validate(updated)
            status = compute_status(post.approved, post.approvers)
            if status == PostStatus.APPROVED and post.status != PostStatus.APPROVED.value:
                self.posts.update_one(
                    {"_id": _id},
                    {"$set": {"status": PostStatus.APPROVED.value}}
                )
                post = post.model_copy(update={"status": PostStatus.APPROVED.value})
                logger.info("Post reached consensus", extra={"post_id": str(_id)})

            span.set_attribute("post.status", str(post.status))
            return post

    def set_theme(self, _id: ObjectId, theme: str) -> dict:
        self.assert_theme_is_valid(theme)
        if not self.posts.partial_update_one({"_id": _id}, {"theme": theme}):
            raise not_found("Post {post} does not exist!", post=_id)
        return {"msg": f"Theme set to {theme}!"}

    def delete(self, _id: ObjectId) -> dict:
        self.posts.delete_one({"_id": _id})
        logger.info("Post deleted", extra={"post_id": str(_id)})
        return {"msg": "Post deleted successfully!"}

    def assert_user_is_approver(self, _id: ObjectId, user: ObjectId) -> None:
        post = self.get_post(_id)
        if not contains_id(post.approvers, user):
            raise self._not_approver(_id, user)

    def assert_user_can_approve(self, _id: ObjectId, user: ObjectId) -> None:
        """Approver who has not signed off yet."""
        post = self.get_post(_id)
        if not contains_id(post.approvers, user):
            raise self._not_approver(_id, user)
        if contains_id(post.approved, user):
            raise AppError(
                ErrorKind.ALREADY_APPROVED,
                "{user} already approved post {post}!",
                users={"user": user},
                values={"post": str(_id)}
            )

    def assert_post_is_approved(self, _id: ObjectId) -> None:
        if self.get_post(_id).status != PostStatus.APPROVED.value:
            raise not_allowed("Post {post} has not been approved by all approvers yet!", post=_id)

    def assert_theme_is_valid(self, theme: str) -> None:
        if theme not in self.themes:
            raise not_allowed(
                "Theme {theme} is not valid! Choose one of: {themes}",
                theme=theme,
                themes=", ".join(self.themes)
            )

    def _read_many(self, query: dict) -> List[PostDoc]:
        # Unpaged; see DESIGN.md for the pagination note
        return [PostDoc.model_validate(doc) for doc in self.posts.read_many(query, sort=[("_id", -1)])]

    @staticmethod
    def _not_approver(_id: ObjectId, user: ObjectId) -> AppError:
        return AppError(
            ErrorKind.NOT_POST_APPROVER,
            "{user} is not an approver of post {post}!",
            users={"user": user},
            values={"post": str(_id)}
        )
