"""
Storage Module - Persistence of the full state tree.

The core never depends on storage succeeding. Storage observes the
store through a subscription (autosave) or is called explicitly.
"""

from .state_storage import StateStorage, default_export_name

__all__ = ["StateStorage", "default_export_name"]
