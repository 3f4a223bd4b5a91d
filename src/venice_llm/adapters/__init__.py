"""Vendor adapters."""

from venice_llm.adapters.base import VendorAdapter
from venice_llm.adapters.venice_adapter import VeniceAdapter

__all__ = [
    "VendorAdapter",
    "VeniceAdapter",
]
