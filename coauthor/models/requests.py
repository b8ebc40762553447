# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import PostStatus


class RequestModel(BaseModel):
    """Base model for request bodies and query strings."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True
    )


class UsernameRequest(RequestModel):
    """Base for requests that set a username."""

    username: str = Field(..., min_length=1, max_length=64, description="Username")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        """Usernames are used in URL paths."""
        if '/' in v or any(c.isspace() for c in v):
            raise ValueError('Username cannot contain whitespace or slashes')
        return v


class CredentialsRequest(UsernameRequest):
    """Request model for registering and logging in."""

    password: str = Field(..., min_length=1, description="Password")


class UpdateUsernameRequest(UsernameRequest):
    """Request model for changing the username."""

    username: str = Field(..., min_length=1, max_length=64, description="New username")


class UpdatePasswordRequest(RequestModel):
    """Request model for changing the password."""

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=1)


class PostFilters(RequestModel):
    """Query filters for the post feed."""

    author: Optional[str] = Field(None, description="Author username")
    theme: Optional[str] = Field(None, description="Post theme")
    status: Optional[PostStatus] = Field(None, description="Approval status")


class ConvertDraftRequest(RequestModel):
    """Request model for publishing a draft as a post."""

    draft_id: str = Field(..., min_length=1, description="Draft to convert")


class SetThemeRequest(RequestModel):
    """Request model for setting a post theme."""

    theme: str = Field(..., min_length=1, description="Theme from the allow-list")


class ContentRequest(RequestModel):
    """Request model carrying one content fragment."""

    content: str = Field(..., min_length=1, description="Content fragment")


class AddMemberRequest(RequestModel):
    """Request model for adding a draft member."""

    member: str = Field(..., min_length=1, description="Username of the new member")


class EventFilters(RequestModel):
    """Query filters for the event feed."""

    host: Optional[str] = Field(None, description="Host username")


class CreateEventRequest(RequestModel):
    """Request model for creating an event from a post."""

    post_id: str = Field(..., min_length=1, description="Approved post the event is about")
    location: str = Field(..., min_length=1, description="Event location")


class ChangeLocationRequest(RequestModel):
    """Request model for moving an event."""

    new_location: str = Field(..., min_length=1, description="New event location")


class CreateSaveRequest(RequestModel):
    """Request model for creating a labeled collection."""

    name: str = Field(..., min_length=1, max_length=100, description="Collection label")


class SaveItemRequest(RequestModel):
    """Request model for saving a post into a collection."""

    post_id: str = Field(..., alias="_id", min_length=1, description="Post to save")
    name: str = Field(..., min_length=1, description="Collection label")
