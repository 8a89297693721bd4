"""
Package feature resolution.

This package provides:
- Feature expansion to closure on a single package
- Dependency walking that records per-edge feature activations
- Merging of activations into one feature set per package id
"""

from .expander import FeatureExpansion, expand, expand_features
from .walker import (
    ActivationRecord,
    DependencyDepthError,
    FeatureResolver,
    ResolutionResult,
    list_package_features,
    merge_activations,
    merge_package_features,
    resolve,
)

__all__ = [
    'ActivationRecord',
    'DependencyDepthError',
    'FeatureExpansion',
    'FeatureResolver',
    'ResolutionResult',
    'expand',
    'expand_features',
    'list_package_features',
    'merge_activations',
    'merge_package_features',
    'resolve',
]
