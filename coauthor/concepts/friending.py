# SPDX-License-Identifier: Apache-2.0

"""
Friending concept: the friend-request lifecycle between two users.

Per unordered pair the state is one of ``none``, ``pending(A->B)``,
``pending(B->A)`` or ``friends``. Both collections carry a unique index on the
canonical ``pair`` key, so a pair can never hold two pending requests (in
either direction) or two friendship edges, even under concurrent requests.
A request document only exists while it is pending.
"""

from typing import List
from bson import ObjectId
from opentelemetry import trace
import logging

from ..domain.consensus import ordered_pair, pair_key
from ..errors import AppError, ErrorKind
from ..models.entities import FriendRequestDoc, FriendshipDoc
from ..services.mongodb import DocCollection

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

NONE = "none"
PENDING = "pending"
FRIENDS = "friends"


class FriendingConcept:

    def __init__(self, friends: DocCollection, requests: DocCollection):
        self.friends = friends
        self.requests = requests

    def send_request(self, from_user: ObjectId, to_user: ObjectId) -> dict:
        with tracer.start_as_current_span("friending.send_request"):
            self._assert_not_self(from_user, to_user)
            pair = pair_key(from_user, to_user)
            self._assert_not_friends(from_user, to_user)

            existing = self.requests.read_one({"pair": pair})
            if existing is not None:
                raise self._request_pending(existing["from"], existing["to"])

            _id = self.requests.insert_unique({"from": from_user, "to": to_user, "pair": pair})
            if _id is None:
                # A concurrent request for the same pair won
                existing = self.requests.read_one({"pair": pair}) or {"from": to_user, "to": from_user}
                raise self._request_pending(existing["from"], existing["to"])

            # A concurrent accept may have created the edge in the meantime
            if self.friends.read_one({"pair": pair}) is not None:
                self.requests.delete_one({"_id": _id})
                raise self._already_friends(from_user, to_user)

            logger.info("Friend request sent", extra={"from": str(from_user), "to": str(to_user)})
            return {"msg": "Sent request!"}

    def accept_request(self, from_user: ObjectId, to_user: ObjectId) -> dict:
        with tracer.start_as_current_span("friending.accept_request"):
            query = {"from": from_user, "to": to_user}
            if self.requests.read_one(query) is None:
                raise self._request_not_found(from_user, to_user)

            # The edge exists before the request is consumed, so a pair is
            # always observed as pending or friends, never as neither.
            user1, user2 = ordered_pair(from_user, to_user)
            edge_id = self.friends.insert_unique(
                {"user1": user1, "user2": user2, "pair": pair_key(from_user, to_user)}
            )

            if self.requests.find_one_and_delete(query) is None:
                # Rejected or withdrawn concurrently
                if edge_id is not None:
                    self.friends.delete_one({"_id": edge_id})
                raise self._request_not_found(from_user, to_user)

            logger.info("Friend request accepted", extra={"from": str(from_user), "to": str(to_user)})
            return {"msg": "Accepted request!"}

    def reject_request(self, from_user: ObjectId, to_user: ObjectId) -> dict:
        with tracer.start_as_current_span("friending.reject_request"):
            if self.requests.find_one_and_delete({"from": from_user, "to": to_user}) is None:
                raise self._request_not_found(from_user, to_user)
            return {"msg": "Rejected request!"}

    def remove_request(self, from_user: ObjectId, to_user: ObjectId) -> dict:
        """Withdraw a request the sender no longer wants answered."""
        with tracer.start_as_current_span("friending.remove_request"):
            if self.requests.find_one_and_delete({"from": from_user, "to": to_user}) is None:
                raise self._request_not_found(from_user, to_user)
            return {"msg": "Removed request!"}

    def remove_friend(self, user: ObjectId, friend: ObjectId) -> dict:
        with tracer.start_as_current_span("friending.remove_friend"):
            if not self.friends.delete_one({"pair": pair_key(user, friend)}):
                raise AppError(
                    ErrorKind.NOT_FRIENDS,
                    "{user1} and {user2} are not friends!",
                    users={"user1": user, "user2": friend}
                )
            logger.info("Friendship removed", extra={"user": str(user), "friend": str(friend)})
            return {"msg": "Unfriended!"}

    def get_requests(self, user: ObjectId) -> List[FriendRequestDoc]:
        docs = self.requests.read_many({"$or": [{"from": user}, {"to": user}]}, sort=[("_id", -1)])
        return [FriendRequestDoc.model_validate(doc) for doc in docs]

    def get_friendships(self, user: ObjectId) -> List[FriendshipDoc]:
        docs = self.friends.read_many({"$or": [{"user1": user}, {"user2": user}]})
        return [FriendshipDoc.model_validate(doc) for doc in docs]

    def get_friends(self, user: ObjectId) -> List[ObjectId]:
        return [
            edge.user2 if edge.user1 == user else edge.user1
            for edge in self.get_friendships(user)
        ]

    def relationship_state(self, user_a: ObjectId, user_b: ObjectId) -> str:
        pair = pair_key(user_a, user_b)
        if self.friends.read_one({"pair": pair}) is not None:
            return FRIENDS
        request = self.requests.read_one({"pair": pair})
        if request is not None:
            return f"{PENDING}({request['from']}->{request['to']})"
        return NONE

    def _assert_not_self(self, user_a: ObjectId, user_b: ObjectId) -> None:
        if user_a == user_b:
            raise AppError(
                ErrorKind.SELF_RELATIONSHIP,
                "{user} cannot befriend themselves!",
                users={"user": user_a}
            )

    def _assert_not_friends(self, user_a: ObjectId, user_b: ObjectId) -> None:
        if self.friends.read_one({"pair": pair_key(user_a, user_b)}) is not None:
            raise self._already_friends(user_a, user_b)

    @staticmethod
    def _already_friends(user_a: ObjectId, user_b: ObjectId) -> AppError:
        return AppError(
            ErrorKind.ALREADY_FRIENDS,
            "{user1} and {user2} are already friends!",
            users={"user1": user_a, "user2": user_b}
        )

    @staticmethod
    def _request_pending(from_user: ObjectId, to_user: ObjectId) -> AppError:
        return AppError(
            ErrorKind.REQUEST_PENDING,
            "A friend request from {from_user} to {to_user} is already pending!",
            users={"from_user": from_user, "to_user": to_user}
        )

    @staticmethod
    def _request_not_found(from_user: ObjectId, to_user: ObjectId) -> AppError:
        return AppError(
            ErrorKind.REQUEST_NOT_FOUND,
            "Friend request from {from_user} to {to_user} does not exist!",
            users={"from_user": from_user, "to_user": to_user}
        )
