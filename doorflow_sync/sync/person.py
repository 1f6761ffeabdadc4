"""
Person data model for DoorFlow people records.

Provides a normalized Person representation with methods for:
- Converting from DoorFlow API person responses
- Generating the email matching key used against local members
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from doorflow_sync.utils import normalize_email


@dataclass
class Person:
    """
    A person in the DoorFlow access-control directory.

    Attributes:
        id: DoorFlow's unique person ID
        email: Email address, may be missing
        first_name: Person's first name
        last_name: Person's last name
        group_ids: DoorFlow groups the person belongs to
        system_id: External-system back-reference (the CRM member id)
        enabled: Whether the person's access is enabled

    Usage:
        person = Person.from_api_response(api_response)
        key = person.matching_key()
    """

    id: int
    email: str | None = None
    first_name: str = ""
    last_name: str = ""
    group_ids: list[int] = field(default_factory=list)
    system_id: str | None = None
    enabled: bool = True
    telephone: str | None = None
    department: str | None = None
    job_title: str | None = None
    notes: str | None = None
    custom_1: str | None = None

    @classmethod
    def from_api_response(cls, person_data: dict[str, Any]) -> Person:
        """
        Create a Person from a DoorFlow API response.

        Args:
            person_data: Dictionary from the DoorFlow people endpoint

        Returns:
            Person instance populated from the API response

        Example API response structure::

            {
                'id': 10,
                'first_name': 'Alice',
                'last_name': 'Smith',
                'email': 'alice.smith@example.com',
                'system_id': 'member-001',
                'enabled': True,
                'groups': [{'id': 5, 'name': 'Engineering'}],
            }
        """
        group_ids = person_data.get("group_ids")
        if group_ids is None:
            group_ids = [
                g["id"] for g in person_data.get("groups") or [] if "id" in g
            ]

        return cls(
            id=person_data["id"],
            email=person_data.get("email"),
            first_name=person_data.get("first_name") or "",
            last_name=person_data.get("last_name") or "",
            group_ids=list(group_ids),
            system_id=person_data.get("system_id"),
            enabled=person_data.get("enabled", True),
            telephone=person_data.get("telephone"),
            department=person_data.get("department"),
            job_title=person_data.get("job_title"),
            notes=person_data.get("notes"),
            custom_1=person_data.get("custom_1"),
        )

    @property
    def display_name(self) -> str:
        """Full name for display."""
        return f"{self.first_name} {self.last_name}".strip()

    def matching_key(self) -> str:
        """Lower-cased email, empty when the person has no email."""
        return normalize_email(self.email)
