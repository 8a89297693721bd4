"""
Dependency Walker

Walks the crate graph from a root package, activating dependency edges
according to each package's expanded feature set, and records one
activation per edge taken.

Ordering rules:
- dependency kinds are processed in the configured order, each in full
- within a kind, non-optional dependencies come first, then activated
  optional dependencies, each in declaration order
- the Activation List is in pre-order (a package's record precedes the
  records of everything reached through it)
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from src.graph.model import CrateConfig, DependencySpec, get_crate
from src.logging_config import get_logger
from src.utils import Config
from .expander import FeatureExpansion, expand_features

logger = get_logger(__name__)

ActivationList = List["ActivationRecord"]
MergedMap = Dict[str, List[str]]


class DependencyDepthError(RuntimeError):
    """A dependency chain grew past the configured depth limit."""

    def __init__(self, package_id: str, dependency_path: Sequence[str], max_depth: int):
        self.package_id = package_id
        self.dependency_path = list(dependency_path)
        self.max_depth = max_depth
        super().__init__(
            f"Dependency chain deeper than {max_depth} reaching {package_id!r}: "
            f"{' -> '.join(self.dependency_path[:5])} -> ... "
            "(cyclic dependencies?)"
        )


@dataclass(frozen=True)
class ActivationRecord:
    """One traversal of a dependency edge (or the root) with its feature request"""
    package_id: str
    features: Tuple[str, ...]

    def to_dict(self) -> Dict:
        return {'packageId': self.package_id, 'features': list(self.features)}


@dataclass
class ResolutionResult:
    """Result of a resolution"""
    root: str
    activations: ActivationList
    merged: MergedMap
    metadata: Dict


@dataclass(frozen=True)
class _PendingResolution:
    package_id: str
    features: Tuple[str, ...]
    path: Tuple[str, ...]  # Package ids from the root down to the referencing package
    dependency_name: Optional[str] = None


def activated_dependencies(
    crate: CrateConfig,
    expansion: FeatureExpansion,
    dependency_kinds: Sequence[str],
) -> List[Tuple[str, str, DependencySpec]]:
    """
    Select the dependency edges taken from one package.

    Args:
        crate: Owner package config
        expansion: Expanded features of the owner
        dependency_kinds: Kinds to walk, in order

    Returns:
        List of (kind, local dependency name, spec) in walk order
    """
    edges = []
    for kind in dependency_kinds:
        group = crate.dependencies(kind)
        deferred = []
        for name, spec in group.items():
            if not spec.optional:
                edges.append((kind, name, spec))
            elif expansion.is_active(name):
                deferred.append((kind, name, spec))
            else:
                logger.debug(
                    "optional_dependency_skipped",
                    package_id=expansion.package_id,
                    dependency=name,
                    kind=kind,
                )
        edges.extend(deferred)
    return edges


def dependency_request(name: str, spec: DependencySpec, expansion: FeatureExpansion) -> Tuple[str, ...]:
    """Feature request carried on one edge: default (unless opted out), declared features, then dep/feat extras."""
    request = ["default"] if spec.uses_default_features else []
    request.extend(spec.features)
    request.extend(expansion.features_for(name))
    return tuple(request)


def merge_activations(activations: Sequence[ActivationRecord]) -> MergedMap:
    """Fold an Activation List into per-package, first-seen-order feature unions."""
    merged: MergedMap = {}
    for record in activations:
        features = merged.setdefault(record.package_id, [])
        for feature in record.features:
            if feature not in features:
                features.append(feature)
    return merged


class FeatureResolver:
    """
    Resolves per-edge and per-package feature sets over a crate graph.

    The graph is only read. Each resolve() call builds its own accumulators,
    so one resolver can serve many roots and requests, also from several
    threads.
    """

    def __init__(
        self,
        graph: Mapping[str, CrateConfig],
        dependency_kinds: Optional[Sequence[str]] = None,
        root_dependency_kinds: Optional[Sequence[str]] = None,
        max_depth: Optional[int] = None,
    ):
        """
        Initialize resolver.

        Args:
            graph: Crate graph keyed by package id
            dependency_kinds: Dependency kinds walked on every package, in order
                              (default: Config.DEPENDENCY_KINDS)
            root_dependency_kinds: Kinds walked on the root package only, e.g. to
                                   include devDependencies (default: dependency_kinds)
            max_depth: Longest dependency chain accepted (default: Config.MAX_DEPTH)
        """
        self.graph = graph
        self.dependency_kinds = list(Config.DEPENDENCY_KINDS if dependency_kinds is None else dependency_kinds)
        self.root_dependency_kinds = list(
            self.dependency_kinds if root_dependency_kinds is None else root_dependency_kinds
        )
        self.max_depth = Config.MAX_DEPTH if max_depth is None else max_depth

    def resolve(self, package_id: str, features: Sequence[str] = ()) -> ResolutionResult:
        """
        Resolve features from a root package.

        Uses an explicit stack instead of recursion; children are pushed in
        reverse walk order so they pop in walk order.

        Args:
            package_id: Root package id
            features: Features requested on the root (recorded literally)

        Returns:
            ResolutionResult with Activation List and Merged Map

        Raises:
            DanglingReferenceError: root or an activated dependency is not in the graph
            DependencyDepthError: a dependency chain exceeded max_depth
        """
        activations: ActivationList = []
        stack = [_PendingResolution(package_id, tuple(features), ())]

        while stack:
            pending = stack.pop()

            if len(pending.path) > self.max_depth:
                raise DependencyDepthError(pending.package_id, pending.path, self.max_depth)

            crate = get_crate(self.graph, pending.package_id, pending.path, pending.dependency_name)
            activations.append(ActivationRecord(pending.package_id, pending.features))

            expansion = expand_features(self.graph, pending.package_id, pending.features)
            kinds = self.dependency_kinds if pending.path else self.root_dependency_kinds
            path = pending.path + (pending.package_id,)

            children = []
            for kind, name, spec in activated_dependencies(crate, expansion, kinds):
                request = dependency_request(name, spec, expansion)
                logger.debug(
                    "dependency_activated",
                    package_id=pending.package_id,
                    dependency=name,
                    target=spec.package_id,
                    kind=kind,
                    features=list(request),
                )
                children.append(_PendingResolution(spec.package_id, request, path, name))

            stack.extend(reversed(children))

        merged = merge_activations(activations)

        logger.info(
            "features_resolved",
            root=package_id,
            activations=len(activations),
            packages=len(merged),
        )

        return ResolutionResult(
            root=package_id,
            activations=activations,
            merged=merged,
            metadata={
                'total_activations': len(activations),
                'total_packages': len(merged),
                'dependency_kinds': list(self.dependency_kinds),
                'root_dependency_kinds': list(self.root_dependency_kinds),
            }
        )


def resolve(
    graph: Mapping[str, CrateConfig],
    package_id: str,
    requested_features: Sequence[str] = (),
    dependency_kinds: Optional[Sequence[str]] = None,
) -> Tuple[ActivationList, MergedMap]:
    """Resolve from a root package, returning (Activation List, Merged Map)."""
    result = FeatureResolver(graph, dependency_kinds).resolve(package_id, requested_features)
    return result.activations, result.merged


def list_package_features(graph, package_id, requested_features=(), dependency_kinds=None) -> ActivationList:
    return resolve(graph, package_id, requested_features, dependency_kinds)[0]


def merge_package_features(graph, package_id, requested_features=(), dependency_kinds=None) -> MergedMap:
    return resolve(graph, package_id, requested_features, dependency_kinds)[1]
