# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware.

Every failure leaves the application as ``{"error": message}``. ``AppError``
messages are rendered through the formatter registry, which is the only place
user ids inside error messages are turned into usernames.
"""

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from typing import Any, Dict, Tuple
from opentelemetry import trace
import logging
import traceback

from ..errors import AppError, format_error

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Centralized error handling for the Flask application."""

    def __init__(self, app: Flask):
        self.app = app
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(AppError)
        def handle_app_error(error):
            return self.handle_app_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error):
            if error.code is not None and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)

        # Handle generic exceptions
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def _identity(self):
        concepts = getattr(self.app, "concepts", None)
        return concepts.identity if concepts is not None else None

    def handle_app_error(self, error: AppError) -> Tuple[Any, int]:
        """
        Render a business or infrastructure error.

        Args:
            error: Tagged application error

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.app_error") as span:
            span.set_attributes({
                "error.type": error.kind.value,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if error.status_code >= 500 else logger.warning
            log(
                f"Request failed: {error.kind.value}",
                extra={
                    "error_type": error.kind.value,
                    "status_code": error.status_code,
                    "detail": error.raw_message(),
                    "path": request.path,
                    "method": request.method
                }
            )

            body: Dict[str, Any] = {"error": format_error(error, self._identity())}
            if error.details:
                body["details"] = error.details
            return jsonify(body), error.status_code

    def handle_client_error(self, error: HTTPException) -> Tuple[Any, int]:
        """Handle werkzeug client errors (unknown route, wrong method...)."""
        detail = str(error.description) if error.description else error.name

        logger.warning(
            f"Client error: {error.name}",
            extra={
                "status_code": error.code,
                "detail": detail,
                "path": request.path,
                "method": request.method,
                "user_agent": request.headers.get('User-Agent'),
                "ip_address": request.remote_addr
            }
        )

        return jsonify({"error": detail}), error.code

    def handle_server_error(self, error: HTTPException) -> Tuple[Any, int]:
        """Handle werkzeug server errors (5xx status codes)."""
        detail = str(error.description) if error.description else error.name

        logger.error(
            f"Server error: {error.name}",
            extra={
                "status_code": error.code,
                "detail": detail,
                "path": request.path,
                "method": request.method
            },
            exc_info=True
        )

        # Don't expose internal error details in production
        if self.app.config.get('ENVIRONMENT') == 'production':
            detail = "An internal server error occurred"

        return jsonify({"error": detail}), error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method,
                    "traceback": traceback.format_exc()
                },
                exc_info=True
            )

            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            return jsonify({"error": detail}), 500
