# SPDX-License-Identifier: Apache-2.0

"""
Users concept: registration, credential checks and username lookups.
"""

from typing import List
from bson import ObjectId
from opentelemetry import trace
from pymongo.errors import DuplicateKeyError
import logging

from ..errors import AppError, ErrorKind, not_allowed, not_found
from ..models.entities import UserDoc
from ..services.auth import AuthService
from ..services.mongodb import DocCollection

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class UsersConcept:
    """Registered users keyed by id, unique by username."""

    def __init__(self, users: DocCollection, auth_service: AuthService):
        self.users = users
        self.auth_service = auth_service

    def create(self, username: str, password: str) -> UserDoc:
        with tracer.start_as_current_span("users.create"):
            self._assert_good_credentials(username, password)
            self._assert_username_unique(username)

            _id = self.users.insert_unique({
                "username": username,
                "password": self.auth_service.hash_password(password)
            })
            if _id is None:
                # Lost a race against a concurrent registration
                raise not_allowed("User with username {username} already exists!", username=username)

            logger.info("User created", extra={"user_id": str(_id)})
            return self.get_user_by_id(_id)

    def get_user_by_id(self, _id: ObjectId) -> UserDoc:
        user = self.users.read_one({"_id": _id})
        if user is None:
            raise not_found("User not found!")
        return UserDoc.model_validate(user)

    def get_user_by_username(self, username: str) -> UserDoc:
        user = self.users.read_one({"username": username})
        if user is None:
            raise not_found("User with username {username} not found!", username=username)
        return UserDoc.model_validate(user)

    def get_users(self, username: str = None) -> List[UserDoc]:
        query = {"username": username} if username else {}
        return [UserDoc.model_validate(doc) for doc in self.users.read_many(query, sort=[("username", 1)])]

    def authenticate(self, username: str, password: str) -> UserDoc:
        with tracer.start_as_current_span("users.authenticate") as span:
            user = self.users.read_one({"username": username})
            if user is None or not self.auth_service.verify_password(password, user["password"]):
                span.set_attribute("auth.result", "failed")
                logger.warning("Authentication failed", extra={"username": username})
                raise AppError(ErrorKind.UNAUTHENTICATED, "Username or password is incorrect.")
            span.set_attribute("auth.result", "success")
            return UserDoc.model_validate(user)

    def update_username(self, _id: ObjectId, username: str) -> dict:
        self._assert_username_unique(username)
        try:
            matched = self.users.partial_update_one({"_id": _id}, {"username": username})
        except DuplicateKeyError:
            raise not_allowed("User with username {username} already exists!", username=username)
        if not matched:
            raise not_found("User not found!")
        return {"msg": "Updated username successfully!"}

    def update_password(self, _id: ObjectId, current_password: str, new_password: str) -> dict:
        user = self.users.read_one({"_id": _id})
        if user is None:
            raise not_found("User not found!")
        if not self.auth_service.verify_password(current_password, user["password"]):
            raise not_allowed("The given current password is wrong!")

        self.users.partial_update_one(
            {"_id": _id},
            {"password": self.auth_service.hash_password(new_password)}
        )
        logger.info("Password updated", extra={"user_id": str(_id)})
        return {"msg": "Updated password successfully!"}

    def delete(self, _id: ObjectId) -> dict:
        self.users.delete_one({"_id": _id})
        logger.info("User deleted", extra={"user_id": str(_id)})
        return {"msg": "You deleted your account"}

    @staticmethod
    def _assert_good_credentials(username: str, password: str) -> None:
        if not username or not password:
            raise not_allowed("Username and password must be non-empty!")

    def _assert_username_unique(self, username: str) -> None:
        if self.users.read_one({"username": username}) is not None:
            raise not_allowed("User with username {username} already exists!", username=username)
