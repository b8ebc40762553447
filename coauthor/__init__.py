# SPDX-License-Identifier: Apache-2.0

"""
Coauthor API - collaborative drafting, multi-approver publishing, events,
saved collections and friends.
"""

__version__ = "1.0.0"
