# SPDX-License-Identifier: Apache-2.0

"""
Route table and dispatcher.

Every endpoint is one ``Route`` entry. The dispatcher runs the same sequence
for all of them: authenticate the caller, validate the input, call the
handler, serialize the result. Handlers then resolve usernames, run guards,
mutate and shape the response.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Type
from flask import Flask, current_app, jsonify
from pydantic import BaseModel
from opentelemetry import trace
import logging

from ..models.requests import (
    AddMemberRequest, ChangeLocationRequest, ContentRequest, ConvertDraftRequest,
    CreateEventRequest, CreateSaveRequest, CredentialsRequest, EventFilters,
    PostFilters, SaveItemRequest, SetThemeRequest, UpdatePasswordRequest,
    UpdateUsernameRequest
)
from ..middleware.validation import validate_request
from ..utils.context import RequestContext
from . import drafts, events, friends, posts, saves, users

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"

# Authentication modes
REQUIRED = "required"
OPTIONAL = "optional"
LOGGED_OUT = "logged_out"


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: Callable[..., Any]
    validator: Optional[Type[BaseModel]] = None
    auth: str = REQUIRED
    status: int = 200

    @property
    def source(self) -> str:
        """Where the validator reads its input from."""
        return "query" if self.method == "GET" else "body"

    @property
    def endpoint(self) -> str:
        module = self.handler.__module__.rsplit(".", 1)[-1]
        return f"{module}_{self.handler.__name__}"


ROUTES: List[Route] = [
    Route("GET", "/session", users.get_session),
    Route("GET", "/users", users.get_users, auth=OPTIONAL),
    Route("GET", "/users/<username>", users.get_user, auth=OPTIONAL),
    Route("POST", "/users", users.create_user, CredentialsRequest, auth=LOGGED_OUT, status=201),
    Route("PATCH", "/users/username", users.update_username, UpdateUsernameRequest),
    Route("PATCH", "/users/password", users.update_password, UpdatePasswordRequest),
    Route("DELETE", "/users", users.delete_user),
    Route("POST", "/login", users.log_in, CredentialsRequest, auth=LOGGED_OUT),
    Route("POST", "/logout", users.log_out),

    Route("GET", "/posts", posts.get_posts, PostFilters),
    Route("POST", "/posts", posts.create_post, ConvertDraftRequest, status=201),
    Route("PATCH", "/posts/approve/<post_id>", posts.approve_post),
    Route("PATCH", "/posts/theme/<post_id>", posts.set_theme, SetThemeRequest),
    Route("DELETE", "/posts/delete/<post_id>", posts.delete_post),

    Route("GET", "/drafts", drafts.get_drafts),
    Route("POST", "/drafts", drafts.create_draft, ContentRequest, status=201),
    Route("PATCH", "/drafts/<draft_id>", drafts.add_member, AddMemberRequest),
    Route("PATCH", "/drafts/add/<draft_id>", drafts.add_content, ContentRequest),
    Route("PATCH", "/drafts/select/<draft_id>", drafts.select_content, ContentRequest),
    Route("PATCH", "/drafts/deselect/<draft_id>", drafts.deselect_content, ContentRequest),
    Route("DELETE", "/drafts/delete/<draft_id>", drafts.delete_draft),

    Route("GET", "/events", events.get_events, EventFilters),
    Route("POST", "/events", events.create_event, CreateEventRequest, status=201),
    Route("PATCH", "/events/rsvp/<event_id>", events.rsvp_event),
    Route("PATCH", "/events/location/<event_id>", events.change_location, ChangeLocationRequest),
    Route("DELETE", "/events/delete/<event_id>", events.delete_event),

    Route("GET", "/saved", saves.get_saves),
    Route("POST", "/save", saves.create_save, CreateSaveRequest, status=201),
    Route("PATCH", "/save", saves.save_item, SaveItemRequest),

    Route("GET", "/friends", friends.get_friends),
    Route("DELETE", "/friends/<friend>", friends.remove_friend),
    Route("GET", "/friend/requests", friends.get_requests),
    Route("POST", "/friend/requests/<to>", friends.send_request),
    Route("DELETE", "/friend/requests/<to>", friends.remove_request),
    Route("PUT", "/friend/accept/<from_user>", friends.accept_request),
    Route("PUT", "/friend/reject/<from_user>", friends.reject_request),
]


def dispatch(route: Route, **path_params) -> Any:
    """Run one request through authentication, validation and the handler."""
    with tracer.start_as_current_span(f"route.{route.endpoint}") as span:
        span.set_attributes({
            "http.method": route.method,
            "http.route": API_PREFIX + route.path
        })

        auth = current_app.auth_middleware
        if route.auth == REQUIRED:
            session = auth.require_session()
        elif route.auth == LOGGED_OUT:
            auth.require_logged_out()
            session = None
        else:
            session = auth.current_session()

        if session is not None:
            span.set_attribute("user.id", str(session.user_id))

        context = RequestContext(
            concepts=current_app.concepts,
            auth=auth,
            session=session,
            data=validate_request(route.validator, route.source)
        )

        result = route.handler(context, **path_params)
        return jsonify(result), route.status


def _view(route: Route) -> Callable[..., Any]:
    def view(**path_params):
        return dispatch(route, **path_params)

    view.__name__ = route.endpoint
    view.__doc__ = route.handler.__doc__
    return view


def register_routes(app: Flask, routes: Optional[List[Route]] = None) -> None:
    """Attach every route of the table to the application."""
    for route in routes or ROUTES:
        app.add_url_rule(
            API_PREFIX + route.path,
            endpoint=route.endpoint,
            view_func=_view(route),
            methods=[route.method]
        )
    logger.info(f"Registered {len(routes or ROUTES)} routes")
