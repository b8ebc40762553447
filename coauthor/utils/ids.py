# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Identifier parsing for request parameters.
"""

from typing import Any
from bson import ObjectId
from bson.errors import InvalidId

from ..errors import validation_error


def parse_object_id(value: Any, field: str = "id") -> ObjectId:
    """Convert a request value to an ObjectId or raise a validation error."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise validation_error(
            "Invalid {field}: {value}",
            details=[{"field": field, "message": "Expected a 24-character hex id", "input": value}],
            field=field,
            value=value
        )
