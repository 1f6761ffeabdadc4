"""
doorflow_sync - Sync CRM members to DoorFlow people

Matches local members to DoorFlow access-control people by email, creates
missing people, and keeps DoorFlow group assignments in line with local teams.
"""

__version__ = "0.1.0"
