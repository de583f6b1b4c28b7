"""Storage module for the document capture core.

This module contains the entry store and its durable JSON codec, the
blob storage for images and files, and the single-writer owner that
serializes store mutations.
"""

from .blob_storage import BlobStorage
from .entry_codec import encode_entries, decode_entries, entry_to_dict, entry_from_dict
from .entry_store import EntryStore, merge_text
from .store_owner import StoreOwner

__all__ = [
    "BlobStorage",
    "encode_entries",
    "decode_entries",
    "entry_to_dict",
    "entry_from_dict",
    "EntryStore",
    "merge_text",
    "StoreOwner"
]
