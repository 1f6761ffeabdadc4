"""
doorflow_sync.storage - Local member and team persistence

JSON-file stores standing in for the CRM database.
"""

from doorflow_sync.storage.json_store import JsonStore, StorageError
from doorflow_sync.storage.members import DuplicateMemberError, MemberStore
from doorflow_sync.storage.teams import TeamStore

__all__ = [
    "JsonStore",
    "StorageError",
    "MemberStore",
    "DuplicateMemberError",
    "TeamStore",
]
