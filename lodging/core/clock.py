"""
Injected current-time source.

Pricing, promotion validity, payment expiry and the sweeps never read the
ambient clock directly; they are handed a ``Clock`` so tests can pin "now".
"""

from datetime import date, datetime
from typing import Callable

import pytz

from lodging.config.settings import settings

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current time in the hotel's timezone (timezone-aware)."""
    return datetime.now(pytz.timezone(settings.TIMEZONE))


def fixed_clock(moment: datetime) -> Clock:
    """Clock that always returns ``moment``; naive values are localized to the hotel timezone."""
    if moment.tzinfo is None:
        moment = pytz.timezone(settings.TIMEZONE).localize(moment)

    def _now() -> datetime:
        return moment

    return _now


def today(clock: Clock) -> date:
    return clock().date()
