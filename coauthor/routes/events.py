# SPDX-License-Identifier: Apache-2.0

"""
Event endpoints. Events are hosted by the approvers of an approved post.
"""

from opentelemetry import trace
import logging

from ..domain import responses
from ..domain.consensus import intersect_by_id, visible_to
from ..utils.context import RequestContext
from ..utils.ids import parse_object_id

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def get_events(ctx: RequestContext):
    """Events hosted by the caller or the caller's friends, optionally by one ``host``."""
    concepts = ctx.concepts

    visible = [ctx.user] + concepts.friending.get_friends(ctx.user)
    events = visible_to(concepts.events.get_events(), "hosts", visible)

    if ctx.data.host:
        host = concepts.identity.username_to_id(ctx.data.host)
        events = intersect_by_id(events, concepts.events.get_by_host(host))

    return responses.events(concepts.identity, events)


def create_event(ctx: RequestContext):
    concepts = ctx.concepts
    post_id = parse_object_id(ctx.data.post_id, "post_id")

    with tracer.start_as_current_span("events.create_from_post") as span:
        span.set_attribute("post.id", str(post_id))

        concepts.posting.assert_user_is_approver(post_id, ctx.user)
        concepts.posting.assert_post_is_approved(post_id)
        hosts = concepts.posting.get_approvers(post_id)

        event = concepts.events.create(hosts, post_id, ctx.data.location)
        return {"msg": "Event created successfully!", "event": responses.event(concepts.identity, event)}


def rsvp_event(ctx: RequestContext, event_id: str):
    _id = parse_object_id(event_id, "event_id")
    return ctx.concepts.events.rsvp_event(_id, ctx.user)


def change_location(ctx: RequestContext, event_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(event_id, "event_id")

    concepts.events.assert_user_is_host(_id, ctx.user)
    return concepts.events.change_location(_id, ctx.data.new_location)


def delete_event(ctx: RequestContext, event_id: str):
    concepts = ctx.concepts
    _id = parse_object_id(event_id, "event_id")

    concepts.events.assert_user_is_host(_id, ctx.user)
    return concepts.events.delete(_id)
