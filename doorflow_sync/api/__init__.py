"""
doorflow_sync.api - DoorFlow REST API client
"""

from doorflow_sync.api.doorflow_api import (
    DoorFlowAPI,
    DoorFlowAPIError,
    NotAuthenticatedError,
)

__all__ = ["DoorFlowAPI", "DoorFlowAPIError", "NotAuthenticatedError"]
