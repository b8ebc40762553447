# SPDX-License-Identifier: Apache-2.0

"""
Account and session endpoints.

Sessions are RS256 bearer tokens; logging out or deleting the account puts the
token on the Redis blocklist until it expires.
"""

from opentelemetry import trace
import logging

from ..domain import responses
from ..utils.context import RequestContext

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def get_session(ctx: RequestContext):
    """Return the logged-in user."""
    return responses.user(ctx.concepts.users.get_user_by_id(ctx.user))


def get_users(ctx: RequestContext):
    """List every registered user."""
    return responses.users(ctx.concepts.users.get_users())


def get_user(ctx: RequestContext, username: str):
    """Look up one user by username."""
    return responses.user(ctx.concepts.users.get_user_by_username(username))


def create_user(ctx: RequestContext):
    """Register a new account."""
    user = ctx.concepts.users.create(ctx.data.username, ctx.data.password)
    return {"msg": "Created user successfully!", "user": responses.user(user)}


def update_username(ctx: RequestContext):
    """Rename the caller; a new session is needed to refresh the token claim."""
    return ctx.concepts.users.update_username(ctx.user, ctx.data.username)


def update_password(ctx: RequestContext):
    return ctx.concepts.users.update_password(
        ctx.user,
        ctx.data.current_password,
        ctx.data.new_password
    )


def delete_user(ctx: RequestContext):
    """Delete the caller's account and end the session."""
    with tracer.start_as_current_span("users.delete_account"):
        # The token is blocked first so a failure leaves the account intact
        ctx.auth.revoke(ctx.session)
        return ctx.concepts.users.delete(ctx.user)


def log_in(ctx: RequestContext):
    """Check credentials and issue a session token."""
    user = ctx.concepts.users.authenticate(ctx.data.username, ctx.data.password)
    token = ctx.auth.auth_service.generate_token(str(user.id), user.username)
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return {"msg": "Logged in!", **token}


def log_out(ctx: RequestContext):
    ctx.auth.revoke(ctx.session)
    logger.info("User logged out", extra={"user_id": str(ctx.user)})
    return {"msg": "Logged out!"}
