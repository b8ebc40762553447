# SPDX-License-Identifier: Apache-2.0

"""
Saved-collection endpoints. Collections are addressed by label and always
belong to the caller.
"""

from ..domain import responses
from ..utils.context import RequestContext
from ..utils.ids import parse_object_id


def get_saves(ctx: RequestContext):
    concepts = ctx.concepts
    return responses.saves(concepts.identity, concepts.saving.get_by_author(ctx.user))


def create_save(ctx: RequestContext):
    concepts = ctx.concepts
    save = concepts.saving.create(ctx.user, ctx.data.name)
    return {"msg": "Collection created!", "save": responses.save(concepts.identity, save)}


def save_item(ctx: RequestContext):
    """Save an existing post into one of the caller's collections."""
    concepts = ctx.concepts
    post_id = parse_object_id(ctx.data.post_id, "_id")

    concepts.posting.get_post(post_id)
    save = concepts.saving.get_save(ctx.user, ctx.data.name)
    return concepts.saving.save(save.id, post_id)
