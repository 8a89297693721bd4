"""
Feature Expander

Resolves the closure of feature names that are "on" for one package and one
requested feature list. Feature definitions may reference each other
cyclically; every name is expanded at most once per call.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from src.graph.model import CrateConfig, get_crate, parse_feature_reference


@dataclass
class FeatureExpansion:
    """Result of expanding a feature request on a single package"""
    package_id: str
    active: List[str]  # Ordered set, first-insertion order
    dependency_features: Dict[str, List[str]] = field(default_factory=dict)  # dep name -> "dep/feat" right-hand sides

    def __post_init__(self):
        self._active_set = set(self.active)

    def is_active(self, name: str) -> bool:
        return name in self._active_set

    def features_for(self, dependency_name: str) -> List[str]:
        return self.dependency_features.get(dependency_name, [])


def expand_features(
    graph: Mapping[str, CrateConfig],
    package_id: str,
    requested_features: Sequence[str],
) -> FeatureExpansion:
    """
    Expand requested features on a package to closure.

    Works off a FIFO queue seeded with the request; requested entries are
    feature references just like the entries of a definition, so a request
    may carry "dep/feat" or "dep:name". A popped name that is
    already active is skipped; otherwise it is marked active and its
    references are queued in declaration order. Names without a definition
    stay active as leaf markers (this is how optional dependencies get
    switched on by their implicit same-named feature).

    For "dep/feat" only "dep" becomes active here; "feat" is recorded in
    dependency_features (once per occurrence, repeats kept) and handed to
    the dependency edge by the walker.
    "dep?/feat" records "feat" without activating "dep". "dep:name" marks
    "name" active without expanding a feature of that name.

    Args:
        graph: Crate graph (read-only)
        package_id: Package whose features are expanded
        requested_features: Feature names requested on the package

    Returns:
        FeatureExpansion with the active set and per-dependency feature requests
    """
    crate = get_crate(graph, package_id)

    active: Dict[str, None] = {}
    dependency_features: Dict[str, List[str]] = {}
    queue = deque(requested_features)

    while queue:
        ref = parse_feature_reference(queue.popleft())

        if ref.kind == "dependency":
            # Marker only, never expanded as a feature name
            active.setdefault(ref.name, None)
            continue
        if ref.kind != "feature":
            dependency_features.setdefault(ref.name, []).append(ref.dependency_feature)
            if ref.kind == "weak_dependency_feature":
                continue

        if ref.name in active:
            continue
        active[ref.name] = None
        queue.extend(crate.features.get(ref.name, ()))

    return FeatureExpansion(
        package_id=package_id,
        active=list(active),
        dependency_features=dependency_features,
    )


def expand(
    graph: Mapping[str, CrateConfig],
    package_id: str,
    requested_features: Sequence[str],
) -> List[str]:
    """Return the expanded active feature set of a package in first-insertion order."""
    return expand_features(graph, package_id, requested_features).active
