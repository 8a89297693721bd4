"""Crate graph data model (package ids, crate configs, dependency specs)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Dependency kind names as they appear in crate configs
NORMAL = "dependencies"
BUILD = "buildDependencies"
DEV = "devDependencies"

DEPENDENCY_KIND_ALIASES = {
    "dependencies": NORMAL,
    "buildDependencies": BUILD,
    "build_dependencies": BUILD,
    "devDependencies": DEV,
    "dev_dependencies": DEV,
}


class GraphSchemaError(ValueError):
    pass


class DanglingReferenceError(ValueError):
    """A dependency edge (or the requested root) names a package id absent from the graph."""

    def __init__(
        self,
        package_id: str,
        dependency_path: Sequence[str] = (),
        dependency_name: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.package_id = package_id
        self.dependency_path = list(dependency_path)
        self.dependency_name = dependency_name
        if message is None:
            message = f"Package not found: {package_id!r}"
            if dependency_name is not None:
                message += f" (dependency {dependency_name!r})"
            if self.dependency_path:
                message += f", dependency path: {' -> '.join(self.dependency_path)}"
        super().__init__(message)


# -----------------------------
# Model
# -----------------------------

@dataclass(frozen=True)
class DependencySpec:
    package_id: str
    optional: bool = False
    uses_default_features: bool = True
    features: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CrateConfig:
    """
    One resolved package+version of the crate graph.

    `dependency_groups` maps a dependency kind (e.g. "dependencies",
    "buildDependencies") to its specs keyed by local dependency name,
    both in declaration order.
    """
    crate_name: str = ""
    features: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    dependency_groups: Dict[str, Dict[str, DependencySpec]] = field(default_factory=dict)

    def dependencies(self, kind: str = NORMAL) -> Dict[str, DependencySpec]:
        return self.dependency_groups.get(kind, {})

    def kinds(self) -> List[str]:
        return list(self.dependency_groups.keys())


CrateGraph = Dict[str, CrateConfig]


@dataclass(frozen=True)
class FeatureReference:
    """
    Parsed entry of a feature definition.

    kind is one of:
      - "feature": plain name (local feature or optional dependency's implicit feature)
      - "dependency": "dep:name", explicit optional-dependency marker
      - "dependency_feature": "dep/feat", activates dep and requests feat on it
      - "weak_dependency_feature": "dep?/feat", requests feat only if dep is active anyway
    """
    kind: str
    name: str
    dependency_feature: Optional[str] = None


def parse_feature_reference(reference: str) -> FeatureReference:
    if reference.startswith("dep:"):
        return FeatureReference("dependency", reference[len("dep:"):])
    if "/" in reference:
        dep_name, feature = reference.split("/", 1)
        if dep_name.endswith("?"):
            return FeatureReference("weak_dependency_feature", dep_name[:-1], feature)
        return FeatureReference("dependency_feature", dep_name, feature)
    return FeatureReference("feature", reference)


# -----------------------------
# Parsing (raw mappings -> model)
# -----------------------------

def _string_list(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise GraphSchemaError(f"{where} must be a list of strings, got {value!r}")
    return tuple(value)


def _flag(raw: Mapping[str, Any], keys: Sequence[str], default: bool, where: str) -> bool:
    for key in keys:
        if key in raw:
            value = raw[key]
            if not isinstance(value, bool):
                raise GraphSchemaError(f"{where}.{key} must be a boolean, got {value!r}")
            return value
    return default


def parse_dependency_spec(raw: Any, where: str = "dependency") -> DependencySpec:
    """
    Normalize a dependency spec to the full record shape.

    Args:
        raw: Either a bare package id string or a mapping with
             package_id/packageId, optional, uses_default_features/usesDefaultFeatures
             and features keys
        where: Location used in error messages

    Returns:
        DependencySpec
    """
    if isinstance(raw, DependencySpec):
        return raw
    if isinstance(raw, str):
        return DependencySpec(package_id=raw)
    if not isinstance(raw, Mapping):
        raise GraphSchemaError(f"{where} must be a package id or a mapping, got {raw!r}")

    package_id = raw.get("package_id", raw.get("packageId"))
    if not isinstance(package_id, str) or not package_id:
        raise GraphSchemaError(f"{where} is missing 'package_id'")

    return DependencySpec(
        package_id=package_id,
        optional=_flag(raw, ("optional",), False, where),
        uses_default_features=_flag(
            raw, ("uses_default_features", "usesDefaultFeatures"), True, where
        ),
        features=_string_list(raw.get("features"), f"{where}.features"),
    )


def parse_crate_config(raw: Any, package_id: str = "") -> CrateConfig:
    """
    Parse one crate config mapping.

    Dependency groups keep the order in which they are declared; snake_case
    kind names are normalized to their camelCase form.
    """
    if isinstance(raw, CrateConfig):
        return raw
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise GraphSchemaError(f"Crate config for {package_id!r} must be a mapping")

    raw_features = raw.get("features") or {}
    if not isinstance(raw_features, Mapping):
        raise GraphSchemaError(f"{package_id}.features must be a mapping")
    features = {
        str(name): _string_list(refs, f"{package_id}.features.{name}")
        for name, refs in raw_features.items()
    }

    dependency_groups: Dict[str, Dict[str, DependencySpec]] = {}
    for key, group in raw.items():
        kind = DEPENDENCY_KIND_ALIASES.get(key)
        if kind is None:
            continue
        group = group or {}
        if not isinstance(group, Mapping):
            raise GraphSchemaError(f"{package_id}.{key} must be a mapping")
        specs = dependency_groups.setdefault(kind, {})
        for dep_name, dep_raw in group.items():
            specs[str(dep_name)] = parse_dependency_spec(dep_raw, f"{package_id}.{key}.{dep_name}")

    return CrateConfig(
        crate_name=str(raw.get("crateName", raw.get("crate_name", package_id))),
        features=features,
        dependency_groups=dependency_groups,
    )


def parse_crate_graph(raw: Mapping[str, Any]) -> CrateGraph:
    if not isinstance(raw, Mapping):
        raise GraphSchemaError("Crate graph must be a mapping of package id to crate config")
    return {str(pid): parse_crate_config(cfg, str(pid)) for pid, cfg in raw.items()}


def get_crate(graph: Mapping[str, CrateConfig], package_id: str,
              dependency_path: Sequence[str] = (),
              dependency_name: Optional[str] = None) -> CrateConfig:
    crate = graph.get(package_id)
    if crate is None:
        raise DanglingReferenceError(package_id, dependency_path, dependency_name)
    return crate
