# SPDX-License-Identifier: Apache-2.0

"""
Friend endpoints. Path parameters are usernames.
"""

from ..domain import responses
from ..utils.context import RequestContext


def get_friends(ctx: RequestContext):
    """Usernames of the caller's friends."""
    concepts = ctx.concepts
    return concepts.identity.ids_to_usernames(concepts.friending.get_friends(ctx.user))


def remove_friend(ctx: RequestContext, friend: str):
    concepts = ctx.concepts
    friend_id = concepts.identity.username_to_id(friend)
    return concepts.friending.remove_friend(ctx.user, friend_id)


def get_requests(ctx: RequestContext):
    """Pending requests sent or received by the caller."""
    concepts = ctx.concepts
    return responses.friend_requests(concepts.identity, concepts.friending.get_requests(ctx.user))


def send_request(ctx: RequestContext, to: str):
    concepts = ctx.concepts
    to_id = concepts.identity.username_to_id(to)
    return concepts.friending.send_request(ctx.user, to_id)


def remove_request(ctx: RequestContext, to: str):
    """Withdraw a request the caller sent."""
    concepts = ctx.concepts
    to_id = concepts.identity.username_to_id(to)
    return concepts.friending.remove_request(ctx.user, to_id)


def accept_request(ctx: RequestContext, from_user: str):
    concepts = ctx.concepts
    from_id = concepts.identity.username_to_id(from_user)
    return concepts.friending.accept_request(from_id, ctx.user)


def reject_request(ctx: RequestContext, from_user: str):
    concepts = ctx.concepts
    from_id = concepts.identity.username_to_id(from_user)
    return concepts.friending.reject_request(from_id, ctx.user)
