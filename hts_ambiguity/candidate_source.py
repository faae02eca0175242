"""
Candidate Sources — where the leaves of a branch come from.

Every source implements fetch_leaves_under_branch(branch_prefix) and returns
only finest-grain leaves (10-digit codes) under the prefix. Any failure is
raised as UpstreamLookupFailure; a failed lookup is never reported as an
empty branch.

Sources:
  FirestoreCandidateSource  `tariff` collection (hs_code, description_en,
                            duty_rate, heading), queried by 4-digit heading
  UsitcCandidateSource      public HTS REST search, `general` column as rate
  StaticCandidateSource     caller already holds the leaves
"""

import logging

import requests

from .config import LEAF_CODE_LENGTH, USITC_BASE_URL, USITC_TIMEOUT
from .errors import UpstreamLookupFailure
from .models import LeafEntry, canonical_code

logger = logging.getLogger(__name__)


def _under_branch(code, prefix, leaf_length=LEAF_CODE_LENGTH):
    if not code.startswith(prefix):
        return False
    return leaf_length is None or len(code) == leaf_length


class CandidateSource:
    """Interface: return every leaf entry under a branch prefix."""

    def fetch_leaves_under_branch(self, branch_prefix):
        raise NotImplementedError


class StaticCandidateSource(CandidateSource):
    """In-memory leaf set, filtered by prefix like the remote sources."""

    def __init__(self, leaves, leaf_length=LEAF_CODE_LENGTH):
        self._leaves = list(leaves)
        self._leaf_length = leaf_length

    def fetch_leaves_under_branch(self, branch_prefix):
        prefix = canonical_code(branch_prefix)
        return [
            leaf for leaf in self._leaves
            if _under_branch(leaf.code, prefix, self._leaf_length)
        ]


class FirestoreCandidateSource(CandidateSource):
    """Reads leaves from the Firestore `tariff` collection.

    Same collection/fields as the tariff seeding scripts: hs_code,
    description_en (or description), duty_rate, heading.
    """

    def __init__(self, db, collection="tariff"):
        self._db = db
        self._collection = collection

    def fetch_leaves_under_branch(self, branch_prefix):
        prefix = canonical_code(branch_prefix)
        if len(prefix) < 4:
            raise UpstreamLookupFailure(
                f"Branch prefix too short for heading lookup: {branch_prefix!r}",
                branch_prefix=branch_prefix,
            )
        heading = prefix[:4]
        try:
            docs = list(
                self._db.collection(self._collection)
                .where("heading", "==", heading)
                .stream()
            )
        except Exception as e:
            logger.warning(f"FirestoreCandidateSource: lookup failed for {prefix}: {e}")
            raise UpstreamLookupFailure(
                f"Tariff lookup failed for branch {prefix}", branch_prefix=prefix, cause=e
            ) from e

        leaves = []
        for doc in docs:
            data = doc.to_dict() or {}
            code = canonical_code(data.get("hs_code", ""))
            if not _under_branch(code, prefix):
                continue
            leaves.append(LeafEntry(
                code=code,
                legal_description=data.get("description_en") or data.get("description", ""),
                base_duty_rate_text=data.get("duty_rate", ""),
            ))
        leaves.sort(key=lambda leaf: leaf.code)
        logger.info(f"FirestoreCandidateSource: {len(leaves)} leaves under {prefix}")
        return leaves


class UsitcCandidateSource(CandidateSource):
    """Queries the USITC HTS REST search endpoint."""

    def __init__(self, base_url=USITC_BASE_URL, timeout=USITC_TIMEOUT, session=None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = session or requests

    def fetch_leaves_under_branch(self, branch_prefix):
        prefix = canonical_code(branch_prefix)
        url = f"{self._base_url}/search"
        try:
            resp = self._http.get(
                url,
                params={"keyword": prefix},
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"USITC timeout for {prefix}")
            raise UpstreamLookupFailure(
                f"USITC lookup timed out for branch {prefix}", branch_prefix=prefix, cause=e
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"USITC error for {prefix}: {e}")
            raise UpstreamLookupFailure(
                f"USITC lookup failed for branch {prefix}", branch_prefix=prefix, cause=e
            ) from e

        if resp.status_code != 200:
            logger.warning(f"USITC returned {resp.status_code} for {prefix}")
            raise UpstreamLookupFailure(
                f"USITC returned HTTP {resp.status_code} for branch {prefix}",
                branch_prefix=prefix,
            )

        try:
            rows = resp.json()
        except ValueError as e:
            raise UpstreamLookupFailure(
                f"USITC returned malformed JSON for branch {prefix}", branch_prefix=prefix, cause=e
            ) from e
        if not isinstance(rows, list):
            raise UpstreamLookupFailure(
                f"USITC returned unexpected payload for branch {prefix}", branch_prefix=prefix
            )

        return parse_usitc_rows(rows, prefix)


def parse_usitc_rows(rows, prefix):
    """Keep 10-digit rows under prefix, in schedule order, de-duplicated."""
    leaves = []
    seen = set()
    for row in rows:
        if not isinstance(row, dict):
            continue
        code = canonical_code(row.get("htsno", ""))
        if code in seen or not _under_branch(code, prefix):
            continue
        seen.add(code)
        leaves.append(LeafEntry(
            code=code,
            legal_description=row.get("description", ""),
            base_duty_rate_text=row.get("general", ""),
        ))
    return leaves
