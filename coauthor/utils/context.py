# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Per-request context handed to route handlers.
"""

from dataclasses import dataclass
from typing import Any, Optional
from bson import ObjectId

from ..concepts import Concepts
from ..errors import unauthenticated
from ..middleware.auth import AuthMiddleware, Session


@dataclass
class RequestContext:
    """Caller session, validated input and the concepts for one request."""
    concepts: Concepts
    auth: AuthMiddleware
    session: Optional[Session] = None
    data: Any = None

    @property
    def user(self) -> ObjectId:
        """The authenticated caller's id."""
        if self.session is None:
            raise unauthenticated()
        return self.session.user_id
