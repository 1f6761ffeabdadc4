"""
Member and Team data models for the local CRM side of the sync.

Provides normalized Member and Team representations with methods for:
- Converting to/from the camelCase JSON records kept in the local store
- Generating the email matching key used against DoorFlow people
- Converting a member into DoorFlow person fields for creation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from doorflow_sync.utils import normalize_email


class MembershipType(str, Enum):
    """Membership tier, stored in the DoorFlow custom_1 field."""

    STANDARD = "standard"
    PREMIUM = "premium"

    @classmethod
    def parse(cls, value: str | MembershipType | None) -> MembershipType:
        """
        Parse a membership type, defaulting to STANDARD when empty.

        Raises:
            ValueError: If the value is not a known membership type
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.STANDARD
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Invalid membership type '{value}'. Must be one of: {valid}"
            ) from None


@dataclass
class Member:
    """
    A member in the local CRM.

    Attributes:
        id: Opaque unique identifier assigned at creation
        first_name: Member's first name (DoorFlow first_name)
        last_name: Member's last name (DoorFlow last_name)
        email: Email address, the sole matching key against DoorFlow
        phone: Phone number (DoorFlow telephone)
        department: Department (DoorFlow department)
        job_title: Job title (DoorFlow job_title)
        notes: Free-form notes (DoorFlow notes)
        organisation_id: DoorFlow organisation reference
        membership_type: Membership tier (DoorFlow custom_1)
        team_ids: Teams this member belongs to
        doorflow_person_id: Linked DoorFlow person, None when not yet linked
        created_at: ISO timestamp of creation
        updated_at: ISO timestamp of last update

    Usage:
        member = Member.from_dict(record)
        key = member.matching_key()
        fields = member.to_person_fields(group_ids=[5])
    """

    id: str
    first_name: str
    last_name: str
    email: str = ""
    phone: str | None = None
    department: str | None = None
    job_title: str | None = None
    notes: str | None = None
    organisation_id: int | None = None
    membership_type: MembershipType = MembershipType.STANDARD
    team_ids: list[str] = field(default_factory=list)
    doorflow_person_id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    # JSON key for each attribute, matching the on-disk member records
    JSON_KEYS = {
        "id": "id",
        "first_name": "firstName",
        "last_name": "lastName",
        "email": "email",
        "phone": "phone",
        "department": "department",
        "job_title": "jobTitle",
        "notes": "notes",
        "organisation_id": "organisationId",
        "membership_type": "membershipType",
        "team_ids": "teamIds",
        "doorflow_person_id": "doorflowPersonId",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Member:
        """
        Create a Member from a stored JSON record.

        Args:
            data: Dictionary using camelCase keys (firstName, teamIds, ...)

        Returns:
            Member instance populated from the record
        """
        return cls(
            id=data.get("id", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email") or "",
            phone=data.get("phone"),
            department=data.get("department"),
            job_title=data.get("jobTitle"),
            notes=data.get("notes"),
            organisation_id=data.get("organisationId"),
            membership_type=MembershipType.parse(data.get("membershipType")),
            team_ids=list(data.get("teamIds") or []),
            doorflow_person_id=data.get("doorflowPersonId"),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the camelCase JSON record kept in the local store.

        Optional fields that are unset are omitted, except doorflowPersonId
        which is always written so the link state is explicit.
        """
        record: dict[str, Any] = {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }
        optional = {
            "phone": self.phone,
            "department": self.department,
            "jobTitle": self.job_title,
            "notes": self.notes,
            "organisationId": self.organisation_id,
        }
        record.update({k: v for k, v in optional.items() if v is not None})
        record["membershipType"] = self.membership_type.value
        record["teamIds"] = list(self.team_ids)
        record["doorflowPersonId"] = self.doorflow_person_id
        record["createdAt"] = self.created_at
        record["updatedAt"] = self.updated_at
        return record

    @property
    def display_name(self) -> str:
        """Full name for display."""
        return f"{self.first_name} {self.last_name}".strip()

    def matching_key(self) -> str:
        """
        Lower-cased email used to look up the DoorFlow person.

        Returns:
            Normalized email, or an empty string when the member has none
        """
        return normalize_email(self.email)

    def is_linked(self) -> bool:
        """Check if the member is linked to a DoorFlow person."""
        return self.doorflow_person_id is not None

    def to_person_fields(
        self, group_ids: list[int] | None = None, image_base64: str | None = None
    ) -> dict[str, Any]:
        """
        Build DoorFlow person fields for creating this member remotely.

        Args:
            group_ids: DoorFlow groups derived from team membership
            image_base64: Encoded photo, if one exists for the member

        Returns:
            Dictionary in DoorFlow person input format (snake_case)

        Note:
            - custom_1 carries the membership type
            - system_id carries the member id for reverse lookups
        """
        fields: dict[str, Any] = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email or None,
            "telephone": self.phone or None,
            "department": self.department or None,
            "job_title": self.job_title or None,
            "notes": self.notes or None,
            "organisation_id": self.organisation_id or None,
            "custom_1": self.membership_type.value,
            "enabled": True,
            "system_id": self.id,
        }
        if group_ids:
            fields["group_ids"] = list(group_ids)
        if image_base64:
            fields["image_base64"] = image_base64
        return fields

    def __repr__(self) -> str:
        return (
            f"Member(id={self.id!r}, name={self.display_name!r}, "
            f"email={self.email!r}, doorflow_person_id={self.doorflow_person_id!r})"
        )


@dataclass
class Team:
    """
    A team in the local CRM, optionally mapped to one DoorFlow group.

    When a member belongs to a mapped team they are assigned to the
    team's DoorFlow group.
    """

    id: str
    name: str
    description: str | None = None
    doorflow_group_id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    JSON_KEYS = {
        "id": "id",
        "name": "name",
        "description": "description",
        "doorflow_group_id": "doorflowGroupId",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Team:
        """Create a Team from a stored JSON record."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description"),
            doorflow_group_id=data.get("doorflowGroupId"),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON record kept in the local store."""
        record: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            record["description"] = self.description
        record["doorflowGroupId"] = self.doorflow_group_id
        record["createdAt"] = self.created_at
        record["updatedAt"] = self.updated_at
        return record

    def is_mapped(self) -> bool:
        """Check if the team is mapped to a DoorFlow group."""
        return self.doorflow_group_id is not None
