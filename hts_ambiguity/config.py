"""
Engine configuration.

Confidence tiers, noise limits and the country-risk watch-list used by the
ambiguity engine. HTTP settings for the USITC candidate source and the
surcharge watch-list can be overridden from the environment.
"""

import logging
import os

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════
#  CONFIDENCE TIERS (0-100)
# ═══════════════════════════════════════════

CONFIDENCE_PREVIOUS_ANSWER = 100   # caller re-supplied an earlier answer
CONFIDENCE_NUMERIC_STATED = 95     # explicit numeric value vs threshold
CONFIDENCE_DIRECT_MATCH = 90       # option value/label found in free text
CONFIDENCE_SYNONYM_MATCH = 75      # synonym table hit
CONFIDENCE_ASSUMED = 40            # default policy, no evidence
CONFIDENCE_NONE = 0

CONFIDENCE_SINGLE_LEAF = 95
CONFIDENCE_NO_LEAVES = 30
CONFIDENCE_CONFIRMED = 98
CONFIDENCE_NEUTRAL = 50
CONFIDENCE_FLOOR = 30
CONFIDENCE_CEILING = 95
ASSUMPTION_PENALTY = 10

# "low" ambiguity needs every open question at or above this
LOW_AMBIGUITY_MIN_CONFIDENCE = 80


# ═══════════════════════════════════════════
#  VARIABLE BUILDER LIMITS
# ═══════════════════════════════════════════

MAX_OPTIONS = 6                    # above this a category is noise
MIN_SINGLE_WORD_LENGTH = 4
LEAF_CODE_LENGTH = 10


# ═══════════════════════════════════════════
#  DUTY SURCHARGES
# ═══════════════════════════════════════════

DEFAULT_COUNTRY_SURCHARGES = {
    "CN": 25.0,
}


def _parse_surcharges(raw):
    """Parse 'CN:25,HK:7.5' into {'CN': 25.0, 'HK': 7.5}. Bad pairs are skipped."""
    result = {}
    for pair in str(raw).split(","):
        if ":" not in pair:
            continue
        country, pct = pair.split(":", 1)
        country = country.strip().upper()
        try:
            result[country] = float(pct.strip())
        except ValueError:
            logger.warning(f"Ignoring malformed surcharge entry: {pair!r}")
    return result


def get_country_surcharges():
    """Watch-list of country -> flat surcharge percent."""
    raw = os.environ.get("HTS_COUNTRY_SURCHARGES")
    if raw:
        parsed = _parse_surcharges(raw)
        if parsed:
            return parsed
    return dict(DEFAULT_COUNTRY_SURCHARGES)


# ═══════════════════════════════════════════
#  USITC HTS REST API
# ═══════════════════════════════════════════

USITC_BASE_URL = os.environ.get("HTS_USITC_BASE_URL", "https://hts.usitc.gov/reststop")
USITC_TIMEOUT = float(os.environ.get("HTS_USITC_TIMEOUT", "10"))  # seconds
