# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Documents owned by each concept.
"""

from typing import List, Optional
from pydantic import Field
from bson import ObjectId

from .base import BaseDocument
from .enums import PostStatus


class UserDoc(BaseDocument):
    """Registered user; the password is a bcrypt hash and never leaves the concept."""

    username: str
    password: str = Field(..., exclude=True)


class DraftDoc(BaseDocument):
    """Collaborative staging area for content."""

    members: List[ObjectId] = Field(default_factory=list)
    content_set: List[str] = Field(default_factory=list, alias="contentSet")
    selected_set: List[str] = Field(default_factory=list, alias="selectedSet")


class PostDoc(BaseDocument):
    """Published artifact gated by approver consensus."""

    approvers: List[ObjectId] = Field(default_factory=list)
    content: List[str] = Field(default_factory=list)
    approved: List[ObjectId] = Field(default_factory=list)
    status: PostStatus = PostStatus.NOT_APPROVED
    theme: Optional[str] = None


class EventDoc(BaseDocument):
    """Event attached to a published post."""

    hosts: List[ObjectId] = Field(default_factory=list)
    attendees: List[ObjectId] = Field(default_factory=list)
    location: str
    info: ObjectId


class FriendshipDoc(BaseDocument):
    """Symmetric friend edge, stored once per unordered pair."""

    user1: ObjectId
    user2: ObjectId
    pair: str


class FriendRequestDoc(BaseDocument):
    """Pending friend request; exists only while pending."""

    from_user: ObjectId = Field(..., alias="from")
    to_user: ObjectId = Field(..., alias="to")
    pair: str


class SaveDoc(BaseDocument):
    """Labeled bookmark collection."""

    owner: ObjectId
    label: str
    items: List[ObjectId] = Field(default_factory=list)
