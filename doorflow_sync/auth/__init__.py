"""
doorflow_sync.auth - OAuth2 connection to DoorFlow
"""

from doorflow_sync.auth.doorflow_auth import (
    AuthenticationError,
    DoorFlowAuth,
    FileTokenStorage,
    StoredTokens,
)

__all__ = ["AuthenticationError", "DoorFlowAuth", "FileTokenStorage", "StoredTokens"]
