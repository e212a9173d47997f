from __future__ import annotations

from .metrics import (
    build_discovered_vault,
    build_vault_info,
    compute_metrics,
    derive_auto_add_threshold,
    evaluate_threshold,
    share_price,
)

__all__ = [
    "build_discovered_vault",
    "build_vault_info",
    "compute_metrics",
    "derive_auto_add_threshold",
    "evaluate_threshold",
    "share_price",
]
