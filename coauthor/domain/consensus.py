# SPDX-License-Identifier: Apache-2.0

"""
Pure helpers for approval consensus, relationship pairs and feed filtering.

No function in this module performs I/O.
"""

from typing import Any, Iterable, List, Sequence, Set, Tuple, TypeVar
from bson import ObjectId

from ..models.enums import PostStatus

T = TypeVar("T")


def _as_set(ids: Iterable[Any]) -> Set[str]:
    return {str(item) for item in ids}


def consensus_reached(approved: Iterable[Any], approvers: Iterable[Any]) -> bool:
    """True when the approvals equal the approver set (membership, not count)."""
    required = _as_set(approvers)
    return bool(required) and _as_set(approved) == required


def compute_status(approved: Iterable[Any], approvers: Iterable[Any]) -> PostStatus:
    if consensus_reached(approved, approvers):
        return PostStatus.APPROVED
    return PostStatus.NOT_APPROVED


def contains_id(ids: Iterable[Any], target: Any) -> bool:
    return str(target) in _as_set(ids)


def pair_key(user_a: ObjectId, user_b: ObjectId) -> str:
    """Canonical key of an unordered pair of users."""
    first, second = sorted((str(user_a), str(user_b)))
    return f"{first}:{second}"


def ordered_pair(user_a: ObjectId, user_b: ObjectId) -> Tuple[ObjectId, ObjectId]:
    first, second = sorted((user_a, user_b), key=str)
    return first, second


def visible_to(documents: Sequence[T], field: str, visible_ids: Iterable[Any]) -> List[T]:
    """Keep documents whose ``field`` list shares at least one id with ``visible_ids``."""
    visible = _as_set(visible_ids)
    return [doc for doc in documents if _as_set(getattr(doc, field)) & visible]


def intersect_by_id(documents: Sequence[T], subset: Sequence[Any]) -> List[T]:
    """Keep documents whose id also appears in ``subset``, preserving order."""
    keep = {str(item.id) for item in subset}
    return [doc for doc in documents if str(doc.id) in keep]
