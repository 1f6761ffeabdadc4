"""
doorflow_sync.sync - Member to DoorFlow person synchronization
"""
