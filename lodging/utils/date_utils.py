"""Date helpers for stay ranges."""

from datetime import date, timedelta
from typing import Iterator, List


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Yield every night of the half-open stay [check_in, check_out)."""
    night = check_in
    while night < check_out:
        yield night
        night += timedelta(days=1)


def nights_of(check_in: date, check_out: date) -> List[date]:
    return list(iter_nights(check_in, check_out))


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open interval intersection: a.start < b.end and a.end > b.start."""
    return a_start < b_end and a_end > b_start
