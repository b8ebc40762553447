# SPDX-License-Identifier: Apache-2.0

"""
Request middleware: authentication, validation and error rendering.
"""

from .auth import AuthMiddleware, Session
from .error_handler import ErrorHandlerMiddleware
from .validation import format_validation_errors, validate_request

__all__ = [
    "AuthMiddleware",
    "Session",
    "ErrorHandlerMiddleware",
    "format_validation_errors",
    "validate_request"
]
