# SPDX-License-Identifier: Apache-2.0

"""
Drafting concept: a collaborative staging area for content before publication.

Every mutation is a single update expression guarded by a filter, so concurrent
members never overwrite each other's changes. ``selectedSet`` can only gain
fragments already in ``contentSet`` and fragments are never removed from
``contentSet``, which keeps ``selectedSet`` a subset of it.
"""

from typing import List, Optional
from bson import ObjectId
from opentelemetry import trace
import logging

from ..errors import AppError, ErrorKind, not_allowed, not_found
from ..models.entities import DraftDoc
from ..services.mongodb import DocCollection

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class DraftingConcept:
    """Drafts with members, candidate content and the selection to publish."""

    def __init__(self, drafts: DocCollection):
        self.drafts = drafts

    def create(self, author: ObjectId, content: Optional[str] = None) -> DraftDoc:
        with tracer.start_as_current_span("drafting.create"):
            _id = self.drafts.create_one({
                "members": [author],
                "contentSet": [content] if content else [],
                "selectedSet": []
            })
            logger.info("Draft created", extra={"draft_id": str(_id), "author": str(author)})
            return self.get_draft(_id)

    def get_draft(self, _id: ObjectId) -> DraftDoc:
        draft = self.drafts.read_one({"_id": _id})
        if draft is None:
            raise not_found("Draft {draft} does not exist!", draft=_id)
        return DraftDoc.model_validate(draft)

    def get_drafts(self) -> List[DraftDoc]:
        # Unpaged; see DESIGN.md for the pagination note
        return [DraftDoc.model_validate(doc) for doc in self.drafts.read_many({}, sort=[("_id", -1)])]

    def get_by_member(self, member: ObjectId) -> List[DraftDoc]:
        docs = self.drafts.read_many({"members": member}, sort=[("_id", -1)])
        return [DraftDoc.model_validate(doc) for doc in docs]

    def add_member(self, _id: ObjectId, user: ObjectId) -> dict:
        with tracer.start_as_current_span("drafting.add_member"):
            # Appends without deduplication
            if not self.drafts.update_one({"_id": _id}, {"$push": {"members": user}}):
                raise not_found("Draft {draft} does not exist!", draft=_id)
            logger.info("Draft member added", extra={"draft_id": str(_id), "member": str(user)})
            return {"msg": "User successfully added!"}

    def add_content(self, _id: ObjectId, content: str) -> dict:
        with tracer.start_as_current_span("drafting.add_content"):
            updated = self.drafts.find_one_and_update(
                {"_id": _id, "contentSet": {"$ne": content}},
                {"$push": {"contentSet": content}}
            )
            if updated is None:
                self.get_draft(_id)
                raise not_allowed("Content {content} already in draft", content=content)
            return {
                "msg": "Content set successfully updated!",
                "contentSet": updated["contentSet"]
            }

    def select(self, _id: ObjectId, content: str) -> dict:
        with tracer.start_as_current_span("drafting.select"):
            updated = self.drafts.find_one_and_update(
                {"_id": _id, "contentSet": content},
                {"$addToSet": {"selectedSet": content}}
            )
            if updated is None:
                self.get_draft(_id)
                raise not_found("Content {content} not in draft", content=content)
            return {
                "msg": "Selected set successfully updated!",
                "selectedSet": updated["selectedSet"]
            }

    def deselect(self, _id: ObjectId, content: str) -> dict:
        with tracer.start_as_current_span("drafting.deselect"):
            updated = self.drafts.find_one_and_update(
                {"_id": _id, "selectedSet": content},
                {"$pull": {"selectedSet": content}}
            )
            if updated is None:
                self.get_draft(_id)
                raise not_found("Content {content} not selected", content=content)
            return {
                "msg": "Selected set successfully updated!",
                "selectedSet": updated["selectedSet"]
            }

    def get_content(self, _id: ObjectId) -> List[str]:
        """Selected fragments, in selection order."""
        return self.get_draft(_id).selected_set

    def get_members(self, _id: ObjectId) -> List[ObjectId]:
        return self.get_draft(_id).members

    def delete(self, _id: ObjectId) -> dict:
        # Exactly one caller deletes a draft; a second conversion lands here
        if not self.drafts.delete_one({"_id": _id}):
            raise not_found("Draft {draft} does not exist!", draft=_id)
        logger.info("Draft deleted", extra={"draft_id": str(_id)})
        return {"msg": "Draft deleted successfully!"}

    def assert_user_is_member(self, _id: ObjectId, user: ObjectId) -> None:
        if self.drafts.read_one({"_id": _id, "members": user}) is not None:
            return
        self.get_draft(_id)
        raise AppError(
            ErrorKind.NOT_DRAFT_MEMBER,
            "{user} is not a member of draft {draft}!",
            users={"user": user},
            values={"draft": str(_id)}
        )
