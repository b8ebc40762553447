# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Application error taxonomy and the formatter registry used at the HTTP boundary.

Concepts raise ``AppError`` with a tagged ``ErrorKind`` and the raw identifiers
involved. Identifiers are only turned into usernames when the error handler
renders the message, through the formatter registered for the error kind.
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Closed set of error variants raised by concepts and routes."""
    NOT_FOUND = "not-found"
    NOT_ALLOWED = "not-allowed"
    UNAUTHENTICATED = "unauthenticated"
    ALREADY_SESSIONED = "already-sessioned"
    VALIDATION = "validation-error"
    PARTIAL_FAILURE = "partial-failure"
    STORAGE_UNAVAILABLE = "storage-unavailable"
    NOT_DRAFT_MEMBER = "not-draft-member"
    NOT_POST_APPROVER = "not-post-approver"
    ALREADY_APPROVED = "already-approved"
    NOT_EVENT_HOST = "not-event-host"
    SELF_RELATIONSHIP = "self-relationship"
    ALREADY_FRIENDS = "already-friends"
    REQUEST_PENDING = "request-pending"
    REQUEST_NOT_FOUND = "request-not-found"
    NOT_FRIENDS = "not-friends"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NOT_ALLOWED: 403,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.ALREADY_SESSIONED: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.PARTIAL_FAILURE: 500,
    ErrorKind.STORAGE_UNAVAILABLE: 503,
    ErrorKind.NOT_DRAFT_MEMBER: 404,
    ErrorKind.NOT_POST_APPROVER: 403,
    ErrorKind.ALREADY_APPROVED: 403,
    ErrorKind.NOT_EVENT_HOST: 404,
    ErrorKind.SELF_RELATIONSHIP: 403,
    ErrorKind.ALREADY_FRIENDS: 403,
    ErrorKind.REQUEST_PENDING: 403,
    ErrorKind.REQUEST_NOT_FOUND: 404,
    ErrorKind.NOT_FRIENDS: 404,
}


class AppError(Exception):
    """
    Business or infrastructure failure with a tagged kind.

    ``template`` is a ``str.format`` template. Placeholders named in ``users``
    hold raw user identifiers and are replaced by usernames when rendered;
    placeholders named in ``values`` are substituted verbatim.
    """

    def __init__(
        self,
        kind: ErrorKind,
        template: str,
        users: Optional[Mapping[str, Any]] = None,
        values: Optional[Mapping[str, Any]] = None,
        details: Optional[list] = None,
    ):
        self.kind = kind
        self.template = template
        self.users = dict(users or {})
        self.values = dict(values or {})
        self.details = details or []
        super().__init__(self.raw_message())

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def raw_message(self) -> str:
        """Message with identifiers left as ids, for logs."""
        fields = {name: str(value) for name, value in self.users.items()}
        fields.update(self.values)
        return self.template.format(**fields)

    def __repr__(self) -> str:
        return f"AppError({self.kind.value!r}, {self.raw_message()!r})"


def not_found(template: str, **values) -> AppError:
    return AppError(ErrorKind.NOT_FOUND, template, values=values)


def not_allowed(template: str, **values) -> AppError:
    return AppError(ErrorKind.NOT_ALLOWED, template, values=values)


def validation_error(template: str, details: Optional[list] = None, **values) -> AppError:
    return AppError(ErrorKind.VALIDATION, template, values=values, details=details)


def unauthenticated(template: str = "You must be logged in!") -> AppError:
    return AppError(ErrorKind.UNAUTHENTICATED, template)


def already_sessioned(template: str = "You must be logged out!") -> AppError:
    return AppError(ErrorKind.ALREADY_SESSIONED, template)


# Formatter registry

Renderer = Callable[[AppError, Any], str]


def render_plain(error: AppError, identity=None) -> str:
    return error.raw_message()


def render_with_usernames(error: AppError, identity) -> str:
    """Resolve every user placeholder with a single batched lookup."""
    if not error.users or identity is None:
        return error.raw_message()

    names = list(error.users.keys())
    usernames = identity.ids_to_usernames([error.users[name] for name in names])
    fields = dict(zip(names, usernames))
    fields.update(error.values)
    return error.template.format(**fields)


ERROR_FORMATTERS: Dict[ErrorKind, Renderer] = {
    ErrorKind.NOT_DRAFT_MEMBER: render_with_usernames,
    ErrorKind.NOT_POST_APPROVER: render_with_usernames,
    ErrorKind.ALREADY_APPROVED: render_with_usernames,
    ErrorKind.NOT_EVENT_HOST: render_with_usernames,
    ErrorKind.SELF_RELATIONSHIP: render_with_usernames,
    ErrorKind.ALREADY_FRIENDS: render_with_usernames,
    ErrorKind.REQUEST_PENDING: render_with_usernames,
    ErrorKind.REQUEST_NOT_FOUND: render_with_usernames,
    ErrorKind.NOT_FRIENDS: render_with_usernames,
}


def register_formatter(kind: ErrorKind, renderer: Renderer) -> None:
    ERROR_FORMATTERS[kind] = renderer


def format_error(error: AppError, identity=None) -> str:
    """Render the user-facing message for an error."""
    renderer = ERROR_FORMATTERS.get(error.kind, render_plain)
    try:
        return renderer(error, identity)
    except AppError as e:
        # Identity lookups can fail (e.g. storage unavailable); keep the raw message.
        logger.warning(
            "Failed to resolve identifiers for error message",
            extra={"error_kind": error.kind.value, "resolve_error": e.kind.value}
        )
        return error.raw_message()
