from __future__ import annotations

from .formatter import (
    format_auto_add,
    format_check_results,
    format_discovered,
    format_status,
    print_json,
)

__all__ = [
    "format_auto_add",
    "format_check_results",
    "format_discovered",
    "format_status",
    "print_json",
]
