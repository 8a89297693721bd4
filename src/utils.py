"""Shared utility functions."""
import os
from pathlib import Path
from typing import List


def get_project_root() -> Path:
    """
    Get the project root directory.

    Returns:
        Path to project root
    """
    return Path(__file__).parent.parent


def get_data_path(filename: str = None) -> Path:
    """
    Get path to the crate graph data directory or a file in it.

    Args:
        filename: Optional crate graph filename

    Returns:
        Path to data directory or specific graph file
    """
    data_dir = get_project_root() / "data"
    if filename:
        return data_dir / filename
    return data_dir


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Configuration constants."""

    # Resolution
    DEPENDENCY_KINDS = _split_list(
        os.getenv("FEATURE_RESOLVER_DEPENDENCY_KINDS", "dependencies,buildDependencies")
    )
    MAX_DEPTH = int(os.getenv("FEATURE_RESOLVER_MAX_DEPTH", "512"))

    # Logging
    LOG_LEVEL = os.getenv("FEATURE_RESOLVER_LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("FEATURE_RESOLVER_LOG_FORMAT", "console")
