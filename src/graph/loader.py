"""Crate graph loading from YAML/JSON documents."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from src.logging_config import get_logger
from .model import (
    CrateConfig,
    CrateGraph,
    DanglingReferenceError,
    GraphSchemaError,
    parse_crate_graph,
)

logger = get_logger(__name__)


def find_dangling_references(graph: Mapping[str, CrateConfig]) -> List[Tuple[str, str, str, str]]:
    """
    Find dependency specs naming package ids absent from the graph.

    Returns:
        List of (owner package id, kind, local dependency name, missing package id)
    """
    dangling = []
    for owner, crate in graph.items():
        for kind, group in crate.dependency_groups.items():
            for name, spec in group.items():
                if spec.package_id not in graph:
                    dangling.append((owner, kind, name, spec.package_id))
    return dangling


def validate_graph(graph: Mapping[str, CrateConfig]) -> None:
    """Raise DanglingReferenceError listing every dependency spec that points outside the graph."""
    dangling = find_dangling_references(graph)
    if not dangling:
        return

    lines = [
        f"  - {owner}.{kind}.{name} -> {missing}"
        for owner, kind, name, missing in dangling
    ]
    owner, _, name, missing = dangling[0]
    raise DanglingReferenceError(
        missing,
        dependency_path=[owner],
        dependency_name=name,
        message="Dangling package references in crate graph:\n" + "\n".join(lines),
    )


class CrateGraphLoader:
    """
    Loads a crate graph document.

    The document is either a mapping of package id -> crate config, or a
    mapping with a `crates` key holding it plus optional `root` and
    `features` entries naming a default resolution request.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.root: Optional[str] = None
        self.features: List[str] = []

    def load_raw(self) -> Dict[str, Any]:
        """
        Read the document.

        Returns:
            Raw mapping as parsed by yaml.safe_load
        """
        with open(self.path, "r") as f:
            document = yaml.safe_load(f)
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise GraphSchemaError(f"{self.path}: top level must be a mapping")
        return document

    def load(self, validate: bool = True) -> CrateGraph:
        """
        Load and parse the crate graph.

        Args:
            validate: Check every dependency spec for dangling package ids

        Returns:
            Crate graph keyed by package id
        """
        document = self.load_raw()

        crates = document
        if "crates" in document:
            crates = document.get("crates") or {}
            root = document.get("root")
            if root is not None and not isinstance(root, str):
                raise GraphSchemaError(f"{self.path}: 'root' must be a package id string")
            self.root = root
            features = document.get("features") or []
            if not isinstance(features, list):
                raise GraphSchemaError(f"{self.path}: 'features' must be a list")
            self.features = [str(f) for f in features]

        graph = parse_crate_graph(crates)
        logger.info("crate_graph_loaded", path=str(self.path), crates=len(graph))

        if validate:
            validate_graph(graph)
        return graph
