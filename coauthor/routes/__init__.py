# SPDX-License-Identifier: Apache-2.0

"""
Synchronization layer: one handler per endpoint, wired by the route table.
"""
