"""
Duty Range Calculator.

Base rate text comes from the external schedule and is often compound or
footnoted ("6.4% + 3.2¢/kg", "Free (A, AU, ...)"). Anything that does not
parse is left out of the min/max scan; it is never an error.
"""

import logging
import re

from .config import get_country_surcharges
from .models import DutyRange

logger = logging.getLogger(__name__)

_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_FREE_RE = re.compile(r"free\b", re.IGNORECASE)


def parse_duty_rate(rate_text):
    """First '<number>%' -> float, 'Free' (with or without a program list) -> 0.0,
    otherwise None."""
    if not rate_text:
        return None
    text = str(rate_text).strip()
    match = _PERCENT_RE.search(text)
    if match:
        return float(match.group(1))
    if _FREE_RE.match(text):
        return 0.0
    logger.debug(f"Unparseable duty rate text: {text!r}")
    return None


def country_surcharge(country_of_origin, surcharges=None):
    """Flat surcharge percent for a watch-listed country of origin, else 0."""
    if not country_of_origin:
        return 0.0
    table = surcharges if surcharges is not None else get_country_surcharges()
    return float(table.get(str(country_of_origin).strip().upper(), 0.0))


def calculate_duty_range(leaves, country_of_origin=None, surcharges=None):
    """Min/max base rate across leaves plus the country surcharge on both bounds."""
    low = high = None
    min_code = max_code = ""
    for leaf in leaves:
        rate = parse_duty_rate(leaf.base_duty_rate_text)
        if rate is None:
            continue
        if low is None or rate < low:
            low, min_code = rate, leaf.code
        if high is None or rate > high:
            high, max_code = rate, leaf.code

    if low is None:
        return DutyRange()

    surcharge = country_surcharge(country_of_origin, surcharges)
    return DutyRange(
        min=round(low + surcharge, 4),
        max=round(high + surcharge, 4),
        min_code=min_code,
        max_code=max_code,
    )
