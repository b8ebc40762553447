# SPDX-License-Identifier: Apache-2.0

"""
Post endpoints: the feed, draft conversion, approval and themes.
"""

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from ..domain import responses
from ..domain.consensus import intersect_by_id, visible_to
from ..errors import AppError, ErrorKind
from ..utils.context import RequestContext
from ..utils.ids import parse_object_id

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def get_posts(ctx: RequestContext):
    """
    Posts by the caller or the caller's friends.

    Optional ``author``, ``theme`` and ``status`` query filters narrow the feed
    further; all of them must match.
    """
    concepts = ctx.concepts
    filters = ctx.data

    visible = [ctx.user] + concepts.friending.get_friends(ctx.user)
    posts = visible_to(concepts.posting.get_posts(), "approvers", visible)

    if filters.author:
        author = concepts.identity.username_to_id(filters.author)
        posts = intersect_by_id(posts, concepts.posting.get_by_author(author))
    if filters.theme:
        posts = intersect_by_id(posts, concepts.posting.get_by_theme(filters.theme))
    if filters.status:
        posts = intersect_by_id(posts, concepts.posting.get_by_status(filters.status))

    return responses.posts(concepts.identity, posts)


def create_post(ctx: RequestContext):
    """
    Publish a draft: its members become the approvers and its selected
    fragments the content. The draft is consumed.
    """
    concepts = ctx.concepts
    draft_id = parse_object_id(ctx.data.draft_id, "draft_id")

    with tracer.start_as_current_span("posts.convert_draft") as span:
        span.set_attribute("draft.id", str(draft_id))

        concepts.drafting.assert_user_is_member(draft_id, ctx.user)
        draft = concepts.drafting.get_draft(draft_id)
        post = concepts.posting.create(draft.members, draft.selected_set)
        span.set_attribute("post.id", str(post.id))

        try:
            concepts.drafting.delete(draft_id)
        except AppError as e:
            if e.kind != ErrorKind.NOT_FOUND and not _draft_exists(ctx, draft_id):
                # The delete was applied even though it reported a failure
                logger.warning(
                    "Draft delete reported a failure but the draft is gone",
                    extra={"draft_id": str(draft_id), "post_id": str(post.id), "cause": e.kind.value}
                )
            else:
                # Never leave both the draft and its post behind
                _discard_post(ctx, post.id)
                if e.kind == ErrorKind.NOT_FOUND:
                    raise
                span.set_status(Status(StatusCode.ERROR, e.raw_message()))
                logger.error(
                    "Draft conversion failed after creating the post",
                    extra={"draft_id": str(draft_id), "post_id": str(post.id), "cause": e.kind.value}
                )
                raise AppError(
                    ErrorKind.PARTIAL_FAILURE,
                    "Could not publish draft {draft}, please try again.",
                    values={"draft": str(draft_id)}
                )

        logger.info("Draft converted", extra={"draft_id": str(draft_id), "post_id": str(post.id)})
        return {"msg": "Post created successfully!", "post": responses.post(concepts.identity, post)}


def approve_post(ctx: RequestContext, post_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(post_id, "post_id")

    concepts.posting.assert_user_can_approve(_id, ctx.user)
    post = concepts.posting.approve_post(_id, ctx.user)
    return {"msg": "Post approved!", "post": responses.post(concepts.identity, post)}


def set_theme(ctx: RequestContext, post_id: str):
    """Tag a post with a theme from the allow-list."""
    concepts = ctx.concepts
    _id = parse_object_id(post_id, "post_id")

    concepts.posting.assert_user_is_approver(_id, ctx.user)
    return concepts.posting.set_theme(_id, ctx.data.theme)


def delete_post(ctx: RequestContext, post_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(post_id, "post_id")

    concepts.posting.assert_user_is_approver(_id, ctx.user)
    return concepts.posting.delete(_id)


def _discard_post(ctx: RequestContext, post_id) -> None:
    try:
        ctx.concepts.posting.delete(post_id)
    except AppError as e:
        logger.error(
            "Failed to remove post after a failed conversion",
            extra={"post_id": str(post_id), "cause": e.kind.value}
        )


def _draft_exists(ctx: RequestContext, draft_id) -> bool:
    """Whether the draft is still stored; an unreadable draft counts as present."""
    try:
        ctx.concepts.drafting.get_draft(draft_id)
    except AppError as e:
        if e.kind == ErrorKind.NOT_FOUND:
            return False
        logger.error(
            "Could not check draft after a failed delete",
            extra={"draft_id": str(draft_id), "cause": e.kind.value}
        )
    return True
