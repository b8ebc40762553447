# SPDX-License-Identifier: Apache-2.0

"""
Concepts package - independent state machines, one per entity type.

``Concepts`` is the composition root: one instance of each concept, built once
at startup and handed to the request layer.
"""

from dataclasses import dataclass
from typing import Iterable

from ..services.auth import AuthService
from ..services.mongodb import MongoDBService
from .drafting import DraftingConcept
from .events import EventsConcept
from .friending import FriendingConcept
from .identity import IdentityResolver
from .posting import PostingConcept
from .saving import SavingConcept
from .users import UsersConcept


@dataclass(frozen=True)
class Concepts:
    """One instance of every concept for the lifetime of the process."""
    users: UsersConcept
    identity: IdentityResolver
    drafting: DraftingConcept
    posting: PostingConcept
    events: EventsConcept
    friending: FriendingConcept
    saving: SavingConcept


def build_concepts(
    mongodb_service: MongoDBService,
    auth_service: AuthService,
    themes: Iterable[str],
) -> Concepts:
    """Wire every concept to its collection."""
    users = mongodb_service.collection("users")

    return Concepts(
        users=UsersConcept(users, auth_service),
        identity=IdentityResolver(users),
        drafting=DraftingConcept(mongodb_service.collection("drafts")),
        posting=PostingConcept(mongodb_service.collection("posts"), themes),
        events=EventsConcept(mongodb_service.collection("events")),
        friending=FriendingConcept(
            mongodb_service.collection("friends"),
            mongodb_service.collection("friend_requests")
        ),
        saving=SavingConcept(mongodb_service.collection("saved"))
    )


__all__ = [
    "Concepts",
    "build_concepts",
    "UsersConcept",
    "IdentityResolver",
    "DraftingConcept",
    "PostingConcept",
    "EventsConcept",
    "FriendingConcept",
    "SavingConcept"
]
