"""
Split and recombine the sort directives of a query.

A query's ``all_sorts`` holds at most one time sort (on the reserved
``dateTime`` column) plus any number of standard sorts.  The time sort is
always conceptually first, so ``combine_sorts`` puts it there and is the only
sanctioned way to rebuild ``all_sorts`` after replacing one of the two parts.
"""
from __future__ import annotations

from typing import Iterable

from src.request.model import OrderByColumn


def extract_time_sort(all_sorts: Iterable[OrderByColumn]) -> OrderByColumn | None:
    """Return the first time sort in *all_sorts*, or ``None``."""
    for sort in all_sorts:
        if sort.is_time_sort:
            return sort
    return None


def extract_standard_sorts(all_sorts: Iterable[OrderByColumn]) -> tuple[OrderByColumn, ...]:
    """Return every non-time sort, keeping relative order and dropping repeats."""
    return tuple(dict.fromkeys(s for s in all_sorts if not s.is_time_sort))


def combine_sorts(
    time_sort: OrderByColumn | None,
    standard_sorts: Iterable[OrderByColumn],
) -> tuple[OrderByColumn, ...]:
    """Put *time_sort* (if any) in front of *standard_sorts*.

    Time sorts smuggled into *standard_sorts* are dropped, so the result never
    holds more than one directive on ``dateTime``.
    """
    standard = extract_standard_sorts(standard_sorts)
    if time_sort is None:
        return standard
    return (time_sort,) + tuple(s for s in standard if s != time_sort)
