# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation using Pydantic models.

Bodies and query strings are parsed into request models; failures become
``VALIDATION`` errors carrying the per-field details.
"""

from typing import Any, Dict, List, Optional, Type
from flask import request
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from ..errors import validation_error

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def format_validation_errors(error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        error: Pydantic ValidationError

    Returns:
        List of formatted error dictionaries
    """
    errors = []

    for item in error.errors():
        field_path = ".".join(str(loc) for loc in item["loc"])
        errors.append({
            "field": field_path,
            "message": item["msg"],
            "type": item["type"],
            "input": item.get("input")
        })

    return errors


def request_payload(source: str) -> Dict[str, Any]:
    """Raw input for a validator: the JSON body or the query string."""
    if source == "query":
        return request.args.to_dict()

    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise validation_error(
            "Request body must be a JSON object",
            details=[{
                "field": "body",
                "message": "Expected a JSON object",
                "type": "json_error",
                "input": None
            }]
        )
    return data


def validate_request(model_class: Optional[Type[BaseModel]], source: str = "body") -> Optional[BaseModel]:
    """
    Validate the current request against a Pydantic model.

    Args:
        model_class: Request model, or None when the route takes no input
        source: "body" for the JSON body, "query" for the query string

    Returns:
        The validated model instance, or None

    Raises:
        AppError: VALIDATION with per-field details
    """
    if model_class is None:
        return None

    with tracer.start_as_current_span("validation.validate_request") as span:
        span.set_attributes({
            "validation.model": model_class.__name__,
            "validation.source": source,
            "http.method": request.method,
            "http.path": request.path
        })

        payload = request_payload(source)

        try:
            validated = model_class.model_validate(payload)
        except ValidationError as e:
            span.set_attribute("validation.result", "validation_error")
            details = format_validation_errors(e)

            logger.warning(
                "Request validation failed",
                extra={
                    "model": model_class.__name__,
                    "path": request.path,
                    "method": request.method,
                    "errors": details
                }
            )

            fields = ", ".join(detail["field"] for detail in details)
            raise validation_error("Invalid request: {fields}", details=details, fields=fields)

        span.set_attribute("validation.result", "success")
        return validated
