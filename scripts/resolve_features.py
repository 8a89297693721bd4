#!/usr/bin/env python3
"""Resolve package features for a root package of a crate graph."""
import sys
import json
import argparse
from pathlib import Path

import yaml

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.graph.loader import CrateGraphLoader
from src.graph.model import DanglingReferenceError, GraphSchemaError
from src.logging_config import configure_logging, get_logger
from src.resolution import DependencyDepthError, FeatureResolver
from src.utils import Config

logger = get_logger(__name__)


def _split(value):
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute per-edge and merged feature sets for a crate graph."
    )
    parser.add_argument(
        "graph",
        type=str,
        help="Crate graph file (YAML or JSON)"
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Root package id (default: 'root' entry of the graph file)"
    )
    parser.add_argument(
        "--features",
        type=str,
        default=None,
        help='Comma-separated features requested on the root (e.g. "default,serde")'
    )
    parser.add_argument(
        "--kinds",
        type=str,
        default=None,
        help=f"Comma-separated dependency kinds, in walk order (default: {','.join(Config.DEPENDENCY_KINDS)})"
    )
    parser.add_argument(
        "--root-kinds",
        type=str,
        default=None,
        help="Comma-separated dependency kinds walked on the root only (default: --kinds)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON"
    )
    parser.add_argument(
        "--merged-only",
        action="store_true",
        help="Only print the merged per-package feature sets"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help=f"Log level (default: {Config.LOG_LEVEL})"
    )
    return parser


def main(argv=None) -> int:
    """Load the crate graph, resolve features and print the result."""
    args = build_parser().parse_args(argv)
    configure_logging(log_level=args.log_level)

    try:
        loader = CrateGraphLoader(args.graph)
        graph = loader.load()

        root = args.root or loader.root
        if not root:
            print("❌ No root package given (use --root or a 'root' entry in the graph file)", file=sys.stderr)
            return 1
        features = _split(args.features)
        if features is None:
            features = loader.features

        resolver = FeatureResolver(
            graph,
            dependency_kinds=_split(args.kinds),
            root_dependency_kinds=_split(args.root_kinds),
        )
        result = resolver.resolve(root, features)
    except (DanglingReferenceError, GraphSchemaError, DependencyDepthError, OSError, yaml.YAMLError) as e:
        logger.error("resolution_failed", error=str(e), error_type=type(e).__name__)
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if args.json:
        output = {"merged": result.merged}
        if not args.merged_only:
            output["list"] = [record.to_dict() for record in result.activations]
        print(json.dumps(output, indent=2))
        return 0

    if not args.merged_only:
        print("=" * 80)
        print(f"ACTIVATIONS ({result.metadata['total_activations']})")
        print("=" * 80)
        for record in result.activations:
            print(f"{record.package_id:40} | {', '.join(record.features) or '-'}")

    print("\n" + "=" * 80)
    print(f"MERGED ({result.metadata['total_packages']} packages)")
    print("=" * 80)
    for package_id, package_features in result.merged.items():
        print(f"{package_id:40} | {', '.join(package_features) or '-'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
