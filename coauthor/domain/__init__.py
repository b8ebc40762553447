# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the Coauthor platform.

Pure business rules live in ``consensus``; ``responses`` shapes concept output
for callers by resolving identifiers to usernames.
"""
