# SPDX-License-Identifier: Apache-2.0

"""
Saving concept: labeled bookmark collections owned by one user.
"""

from typing import List
from bson import ObjectId
import logging

from ..errors import not_allowed, not_found
from ..models.entities import SaveDoc
from ..services.mongodb import DocCollection

logger = logging.getLogger(__name__)


class SavingConcept:

    def __init__(self, saved: DocCollection):
        self.saved = saved

    def create(self, owner: ObjectId, label: str) -> SaveDoc:
        if self.saved.read_one({"owner": owner, "label": label}) is not None:
            raise not_allowed("You already have a collection named {label}!", label=label)

        _id = self.saved.insert_unique({"owner": owner, "label": label, "items": []})
        if _id is None:
            raise not_allowed("You already have a collection named {label}!", label=label)

        logger.info("Collection created", extra={"save_id": str(_id), "owner": str(owner)})
        return SaveDoc.model_validate(self.saved.read_one({"_id": _id}))

    def save(self, _id: ObjectId, item: ObjectId) -> dict:
        """Add ``item`` to the collection; saving it again changes nothing."""
        if not self.saved.update_one({"_id": _id}, {"$addToSet": {"items": item}}):
            raise not_found("Collection {save} does not exist!", save=_id)
        return {"msg": "Item saved!"}

    def get_by_author(self, owner: ObjectId) -> List[SaveDoc]:
        docs = self.saved.read_many({"owner": owner}, sort=[("label", 1)])
        return [SaveDoc.model_validate(doc) for doc in docs]

    def get_save(self, owner: ObjectId, label: str) -> SaveDoc:
        doc = self.saved.read_one({"owner": owner, "label": label})
        if doc is None:
            raise not_found("Collection {label} does not exist!", label=label)
        return SaveDoc.model_validate(doc)
