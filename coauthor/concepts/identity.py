# SPDX-License-Identifier: Apache-2.0

"""
Identity resolution between user ids and usernames.

Every call issues at most one batched lookup against the users collection,
whatever the input size, and keeps the input order and duplicates.
"""

from typing import Iterable, List, Sequence
from bson import ObjectId
from opentelemetry import trace
import logging

from ..errors import not_found
from ..services.mongodb import DocCollection

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DELETED_USER = "DELETED_USER"


class IdentityResolver:
    """Batched id <-> username conversion."""

    def __init__(self, users: DocCollection):
        self.users = users

    def ids_to_usernames(self, ids: Sequence[ObjectId]) -> List[str]:
        """
        Map user ids to usernames position by position.

        Ids without a matching user (deleted accounts) map to ``DELETED_USER``.
        """
        ids = list(ids)
        if not ids:
            return []

        with tracer.start_as_current_span("identity.ids_to_usernames") as span:
            span.set_attribute("identity.input_count", len(ids))

            unique = list({str(_id): ObjectId(str(_id)) for _id in ids}.values())
            users = self.users.read_many({"_id": {"$in": unique}})
            names = {str(user["_id"]): user["username"] for user in users}

            resolved = [names.get(str(_id), DELETED_USER) for _id in ids]
            missing = len(unique) - len(names)
            if missing:
                logger.debug(f"{missing} user ids did not resolve to a username")
            return resolved

    def usernames_to_ids(self, usernames: Iterable[str]) -> List[ObjectId]:
        """
        Map usernames to user ids position by position.

        Raises:
            AppError(NOT_FOUND): If any username is unknown
        """
        usernames = list(usernames)
        if not usernames:
            return []

        with tracer.start_as_current_span("identity.usernames_to_ids") as span:
            span.set_attribute("identity.input_count", len(usernames))

            users = self.users.read_many({"username": {"$in": list(set(usernames))}})
            ids = {user["username"]: user["_id"] for user in users}

            unknown = [name for name in usernames if name not in ids]
            if unknown:
                raise not_found("User with username {username} not found!", username=unknown[0])
            return [ids[name] for name in usernames]

    def username_to_id(self, username: str) -> ObjectId:
        return self.usernames_to_ids([username])[0]

    def id_to_username(self, _id: ObjectId) -> str:
        return self.ids_to_usernames([_id])[0]
