from __future__ import annotations

from typing import List, Optional, Sequence, TypeVar

from .paths import resolve_path

T = TypeVar("T")

DEFAULT_SELECTION_LIMIT = 4


def select_results_for_path(
    results: Sequence[T],
    limit: int = DEFAULT_SELECTION_LIMIT,
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> List[T]:
    """
    Carve a path-specific slice out of one shared result list.

    - Path 1: the first ``limit`` results.
    - Path 2: a middle slice starting at a third of the list.
    - Path 3: a late slice, two short of the very end.

    Paths 2 and 3 only diverge when there are at least ``2 * limit``
    results; with fewer, every path gets the first ``limit``. Overlap
    between paths is possible for small lists.
    """
    if limit <= 0:
        return []

    rank = resolve_path(path_rank, path_label).rank
    total = len(results)

    if rank == 1 or total < limit * 2:
        return list(results[:limit])

    last_start = total - limit
    middle_start = min(max(total // 3, 1), last_start)
    if rank == 2:
        start = middle_start
    else:
        start = min(max(total - limit - 2, middle_start + 1), last_start)

    return list(results[start:start + limit])
