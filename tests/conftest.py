"""
Pytest configuration and fixtures for feature resolution tests.
"""

import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.graph.model import parse_crate_graph


@pytest.fixture(scope="session")
def crate_configs():
    """Crate graph shared by the resolution scenarios"""
    return parse_crate_graph({
        "pkg_root": {
            "crateName": "id1",
            "features": {
                "optional_id2": [],
            },
            "dependencies": {
                "id1": "pkg_id1",
                "optional_id2": {
                    "package_id": "pkg_id2",
                    "optional": True,
                },
                "id3": {
                    "package_id": "pkg_id3",
                    "uses_default_features": False,
                },
            },
        },
        "pkg_with_feature_clash": {
            "dependencies": {
                "id1": "pkg_id1",
            },
            "buildDependencies": {
                "id1": {
                    "package_id": "pkg_id1",
                    "features": ["for_build"],
                },
            },
        },
        "pkg_id1": {
            "crateName": "id1",
            "features": {
                "default": [],
            },
        },
        "pkg_id2": {
            "crateName": "id2",
            "features": {},
        },
        "pkg_id3": {
            "crateName": "id3",
            "features": {},
        },
    })


@pytest.fixture(scope="session")
def serde_like_graph():
    """
    Graph exercising feature-to-dependency references.

    app -> serde (default-features off, "derive" via "app/derive-all")
        -> serde_json (optional, via "dep:serde_json" in "json")
        -> log (optional, only weakly referenced)
    """
    return parse_crate_graph({
        "app": {
            "crateName": "app",
            "features": {
                "default": ["std"],
                "std": ["serde/std", "log?/std"],
                "derive-all": ["serde/derive"],
                "json": ["dep:serde_json"],
                "logging": ["log"],
            },
            "dependencies": {
                "log": {"package_id": "log 0.4", "optional": True},
                "serde": {"package_id": "serde 1.0", "uses_default_features": False},
                "serde_json": {"package_id": "serde_json 1.0", "optional": True},
            },
        },
        "serde 1.0": {
            "crateName": "serde",
            "features": {
                "default": ["std"],
                "std": [],
                "derive": ["serde_derive"],
            },
            "dependencies": {
                "serde_derive": {"package_id": "serde_derive 1.0", "optional": True},
            },
        },
        "serde_derive 1.0": {"crateName": "serde_derive"},
        "serde_json 1.0": {
            "crateName": "serde_json",
            "features": {"default": ["std"], "std": ["serde/std"]},
            "dependencies": {"serde": {"package_id": "serde 1.0", "uses_default_features": False}},
        },
        "log 0.4": {"crateName": "log", "features": {"std": []}},
    })
