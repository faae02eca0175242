"""
Pytest Configuration and Shared Fixtures
"""
import pytest
from unittest.mock import Mock
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hts_ambiguity.models import AnalysisRequest, LeafEntry


# ============================================================
# MOCK FIRESTORE
# ============================================================

@pytest.fixture
def mock_db():
    """Create a mock Firestore database"""
    db = Mock()
    return db


@pytest.fixture
def mock_firestore_doc():
    """Create a mock Firestore document"""
    def _create(doc_id, data):
        doc = Mock()
        doc.id = doc_id
        doc.to_dict.return_value = data
        return doc
    return _create


# ============================================================
# BRANCH FIXTURES
# ============================================================

@pytest.fixture
def knife_construction_leaves():
    """Three knives differing only by blade construction"""
    return [
        LeafEntry("8211.93.00.10", "Knives having fixed blades", "5.4%"),
        LeafEntry("8211.93.00.20", "Knives having folding blades", "3%"),
        LeafEntry("8211.93.00.90", "Other knives", "Free"),
    ]


@pytest.fixture
def value_bracket_leaves():
    """Two knives split by a per-dozen value threshold"""
    return [
        LeafEntry("8211910500", "Knives valued not over $0.60 per dozen", "Free"),
        LeafEntry("8211912500", "Knives valued over $0.60 per dozen", "4.9%"),
    ]


@pytest.fixture
def material_cube_leaves():
    """Eight table knives: blade x handle x plating, each present or absent"""
    leaves = []
    n = 0
    for blade in (True, False):
        for handle in (True, False):
            for plated in (True, False):
                parts = ["Table knives"]
                if blade:
                    parts.append("with stainless steel blades")
                if handle:
                    parts.append("with handles of wood")
                if plated:
                    parts.append("silver-plated")
                n += 1
                leaves.append(LeafEntry(
                    f"82159100{n:02d}",
                    ", ".join(parts),
                    f"{n}%",
                ))
    return leaves


@pytest.fixture
def make_request():
    """Build an AnalysisRequest with defaults"""
    def _create(branch_prefix="8211", **kwargs):
        return AnalysisRequest(branch_prefix=branch_prefix, **kwargs)
    return _create


# ============================================================
# MARKERS
# ============================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests requiring network access")
