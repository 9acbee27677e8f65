"""Storage row loading package."""

from housing_availability.transformers.claim_transformer import ClaimTransformer
from housing_availability.transformers.hierarchy_transformer import (
    HierarchyLoadError,
    HierarchyTransformer,
)

__all__ = [
    "ClaimTransformer",
    "HierarchyTransformer",
    "HierarchyLoadError",
]
