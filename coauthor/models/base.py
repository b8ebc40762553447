# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base document model with common fields and JSON conversion.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict
from bson import ObjectId


def to_jsonable(value: Any) -> Any:
    """Convert ObjectIds and datetimes nested in a value to JSON types."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat() + "Z"
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


class BaseDocument(BaseModel):
    """Base model for documents stored in a collection."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # ObjectId is not a pydantic type
        arbitrary_types_allowed=True
    )

    id: ObjectId = Field(..., alias="_id", description="Unique identifier")
    created_at: Optional[datetime] = Field(None, alias="createdAt", description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt", description="Last update timestamp")

    def to_json(self) -> Dict[str, Any]:
        """Dump with storage field names and JSON-safe values."""
        return to_jsonable(self.model_dump(by_alias=True))
