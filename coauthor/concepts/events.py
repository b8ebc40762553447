# SPDX-License-Identifier: Apache-2.0

"""
Events concept: hosts and attendees gathered around a published post.
"""

from typing import List, Sequence
from bson import ObjectId
from opentelemetry import trace
import logging

from ..errors import AppError, ErrorKind, not_found
from ..models.entities import EventDoc
from ..services.mongodb import DocCollection

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class EventsConcept:

    def __init__(self, events: DocCollection):
        self.events = events

    def create(self, hosts: Sequence[ObjectId], info: ObjectId, location: str) -> EventDoc:
        with tracer.start_as_current_span("events.create"):
            _id = self.events.create_one({
                "hosts": list(hosts),
                "attendees": [],
                "location": location,
                "info": info
            })
            logger.info("Event created", extra={"event_id": str(_id), "post_id": str(info)})
            return self.get_event(_id)

    def get_event(self, _id: ObjectId) -> EventDoc:
        event = self.events.read_one({"_id": _id})
        if event is None:
            raise not_found("Event {event} does not exist!", event=_id)
        return EventDoc.model_validate(event)

    def get_events(self) -> List[EventDoc]:
        # Unpaged; see DESIGN.md for the pagination note
        return [EventDoc.model_validate(doc) for doc in self.events.read_many({}, sort=[("_id", -1)])]

    def get_by_host(self, host: ObjectId) -> List[EventDoc]:
        docs = self.events.read_many({"hosts": host}, sort=[("_id", -1)])
        return [EventDoc.model_validate(doc) for doc in docs]

    def get_attendees(self, _id: ObjectId) -> List[ObjectId]:
        return self.get_event(_id).attendees

    def rsvp_event(self, _id: ObjectId, user: ObjectId) -> dict:
        """Add ``user`` to the attendees; repeating an RSVP is a no-op."""
        with tracer.start_as_current_span("events.rsvp"):
            if not self.events.update_one({"_id": _id}, {"$addToSet": {"attendees": user}}):
                raise not_found("Event {event} does not exist!", event=_id)
            logger.info("RSVP recorded", extra={"event_id": str(_id), "user_id": str(user)})
            return {"msg": "RSVP successful!"}

    def change_location(self, _id: ObjectId, location: str) -> dict:
        if not self.events.partial_update_one({"_id": _id}, {"location": location}):
            raise not_found("Event {event} does not exist!", event=_id)
        return {"msg": f"Location changed to {location}!"}

    def delete(self, _id: ObjectId) -> dict:
        self.events.delete_one({"_id": _id})
        logger.info("Event deleted", extra={"event_id": str(_id)})
        return {"msg": "Event deleted successfully!"}

    def assert_user_is_host(self, _id: ObjectId, user: ObjectId) -> None:
        if self.events.read_one({"_id": _id, "hosts": user}) is not None:
            return
        self.get_event(_id)
        raise AppError(
            ErrorKind.NOT_EVENT_HOST,
            "{user} is not a host of event {event}!",
            users={"user": user},
            values={"event": str(_id)}
        )
