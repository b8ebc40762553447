# SPDX-License-Identifier: Apache-2.0

"""
Draft endpoints. Every mutation requires draft membership.
"""

import logging

from ..domain import responses
from ..utils.context import RequestContext
from ..utils.ids import parse_object_id

logger = logging.getLogger(__name__)


def get_drafts(ctx: RequestContext):
    """Drafts the caller is a member of."""
    concepts = ctx.concepts
    return responses.drafts(concepts.identity, concepts.drafting.get_by_member(ctx.user))


def create_draft(ctx: RequestContext):
    concepts = ctx.concepts
    draft = concepts.drafting.create(ctx.user, ctx.data.content)
    return {"msg": "Draft created successfully!", "draft": responses.draft(concepts.identity, draft)}


def add_member(ctx: RequestContext, draft_id: str):
    """Invite another user, by username, to collaborate on the draft."""
    concepts = ctx.concepts
    _id = parse_object_id(draft_id, "draft_id")

    member = concepts.identity.username_to_id(ctx.data.member)
    concepts.drafting.assert_user_is_member(_id, ctx.user)
    return concepts.drafting.add_member(_id, member)


def add_content(ctx: RequestContext, draft_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(draft_id, "draft_id")

    concepts.drafting.assert_user_is_member(_id, ctx.user)
    return concepts.drafting.add_content(_id, ctx.data.content)


def select_content(ctx: RequestContext, draft_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(draft_id, "draft_id")

    concepts.drafting.assert_user_is_member(_id, ctx.user)
    return concepts.drafting.select(_id, ctx.data.content)


def deselect_content(ctx: RequestContext, draft_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(draft_id, "draft_id")

    concepts.drafting.assert_user_is_member(_id, ctx.user)
    return concepts.drafting.deselect(_id, ctx.data.content)


def delete_draft(ctx: RequestContext, draft_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(draft_id, "draft_id")

    concepts.drafting.assert_user_is_member(_id, ctx.user)
    return concepts.drafting.delete(_id)
