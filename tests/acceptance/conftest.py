# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Acceptance tests reuse the unit-test fixtures: in-memory storage and
blocklist behind the real application factory.
"""

from coauthor.tests.conftest import *  # noqa: F401,F403
