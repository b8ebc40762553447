# SPDX-License-Identifier: Apache-2.0

"""
Response shaping for the frontend.

Concept documents store user ids; responses show usernames. Every function
here gathers the ids of all documents it is given and resolves them with a
single batched lookup before splitting the names back per document.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..concepts.identity import IdentityResolver
from ..models.base import BaseDocument
from ..models.entities import DraftDoc, EventDoc, FriendRequestDoc, PostDoc, SaveDoc, UserDoc

# (field attribute, JSON key, is_list)
UserField = Tuple[str, str, bool]

DRAFT_FIELDS: Sequence[UserField] = (("members", "members", True),)
POST_FIELDS: Sequence[UserField] = (("approvers", "approvers", True), ("approved", "approved", True))
EVENT_FIELDS: Sequence[UserField] = (("hosts", "hosts", True), ("attendees", "attendees", True))
REQUEST_FIELDS: Sequence[UserField] = (("from_user", "from", False), ("to_user", "to", False))
SAVE_FIELDS: Sequence[UserField] = (("owner", "owner", False),)


def _resolve_many(
    identity: IdentityResolver,
    documents: Sequence[BaseDocument],
    fields: Sequence[UserField],
) -> List[Dict[str, Any]]:
    flat = []
    for doc in documents:
        for attr, _, is_list in fields:
            value = getattr(doc, attr)
            flat.extend(value if is_list else [value])

    names = iter(identity.ids_to_usernames(flat))

    shaped = []
    for doc in documents:
        body = doc.to_json()
        for attr, key, is_list in fields:
            value = getattr(doc, attr)
            if is_list:
                body[key] = [next(names) for _ in value]
            else:
                body[key] = next(names)
        shaped.append(body)
    return shaped


def _resolve_one(identity, document: Optional[BaseDocument], fields) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    return _resolve_many(identity, [document], fields)[0]


def user(document: UserDoc) -> Dict[str, Any]:
    return document.to_json()


def users(documents: Sequence[UserDoc]) -> List[Dict[str, Any]]:
    return [doc.to_json() for doc in documents]


def draft(identity: IdentityResolver, document: Optional[DraftDoc]):
    return _resolve_one(identity, document, DRAFT_FIELDS)


def drafts(identity: IdentityResolver, documents: Sequence[DraftDoc]):
    return _resolve_many(identity, documents, DRAFT_FIELDS)


def post(identity: IdentityResolver, document: Optional[PostDoc]):
    return _resolve_one(identity, document, POST_FIELDS)


def posts(identity: IdentityResolver, documents: Sequence[PostDoc]):
    return _resolve_many(identity, documents, POST_FIELDS)


def event(identity: IdentityResolver, document: Optional[EventDoc]):
    return _resolve_one(identity, document, EVENT_FIELDS)


def events(identity: IdentityResolver, documents: Sequence[EventDoc]):
    return _resolve_many(identity, documents, EVENT_FIELDS)


def friend_requests(identity: IdentityResolver, documents: Sequence[FriendRequestDoc]):
    return _resolve_many(identity, documents, REQUEST_FIELDS)


def save(identity: IdentityResolver, document: Optional[SaveDoc]):
    return _resolve_one(identity, document, SAVE_FIELDS)


def saves(identity: IdentityResolver, documents: Sequence[SaveDoc]):
    return _resolve_many(identity, documents, SAVE_FIELDS)
