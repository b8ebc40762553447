# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the Coauthor platform.
"""

from enum import Enum


class PostStatus(str, Enum):
    """Post approval status."""
    NOT_APPROVED = "NotApproved"
    APPROVED = "Approved"
