# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas for stored documents and request bodies.
"""

from .base import BaseDocument, to_jsonable
from .enums import PostStatus
from .entities import (
    UserDoc,
    DraftDoc,
    PostDoc,
    EventDoc,
    FriendshipDoc,
    FriendRequestDoc,
    SaveDoc
)

__all__ = [
    "BaseDocument",
    "to_jsonable",
    "PostStatus",
    "UserDoc",
    "DraftDoc",
    "PostDoc",
    "EventDoc",
    "FriendshipDoc",
    "FriendRequestDoc",
    "SaveDoc"
]
