"""
Member storage backed by a JSON file.

Simulates the CRM member database. Members are linked to DoorFlow people
through their doorflow_person_id field.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from doorflow_sync.storage.json_store import JsonStore, StorageError, utc_now_iso
from doorflow_sync.sync.member import Member, MembershipType
from doorflow_sync.utils import normalize_email

logger = logging.getLogger(__name__)

MEMBERS_FILE = "members.json"

# Fields callers may not change through update()
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

# Optional fields accepted by create()
OPTIONAL_CREATE_FIELDS = frozenset(
    {"phone", "department", "job_title", "notes", "organisation_id", "doorflow_person_id"}
)


class DuplicateMemberError(Exception):
    """Raised when a member with the same email already exists."""

    pass


SAMPLE_MEMBERS: list[dict[str, Any]] = [
    {
        "id": "member-001",
        "firstName": "Alice",
        "lastName": "Smith",
        "email": "alice.smith@example.com",
        "phone": "+1-555-0101",
        "department": "Engineering",
        "jobTitle": "Senior Developer",
        "notes": "Team lead for the mobile app project",
        "membershipType": "premium",
        "teamIds": ["team-001"],
    },
    {
        "id": "member-002",
        "firstName": "Bob",
        "lastName": "Johnson",
        "email": "bob.johnson@example.com",
        "phone": "+1-555-0102",
        "department": "Sales",
        "jobTitle": "Account Executive",
        "membershipType": "standard",
        "teamIds": ["team-002"],
    },
    {
        "id": "member-003",
        "firstName": "Carol",
        "lastName": "Williams",
        "email": "carol.williams@example.com",
        "phone": "+1-555-0103",
        "department": "Engineering",
        "jobTitle": "DevOps Engineer",
        "notes": "On-call rotation lead",
        "membershipType": "premium",
        "teamIds": ["team-001", "team-003"],
    },
    {
        "id": "member-004",
        "firstName": "Eva",
        "lastName": "Martinez",
        "email": "eva.martinez@example.com",
        "department": "Operations",
        "jobTitle": "Office Manager",
        "membershipType": "standard",
        "teamIds": [],
    },
]


class MemberStore:
    """
    CRUD access to CRM members.

    Usage:
        store = MemberStore(data_dir / "members.json")
        members = store.load_all()
        store.link(member.id, 42)

    Note:
        Every operation reads the whole file; updates rewrite it. Two
        processes writing the same file at once can lose updates.
    """

    def __init__(self, path: Path | str):
        self._store = JsonStore(path)

    @classmethod
    def in_dir(cls, data_dir: Path) -> "MemberStore":
        """Create a store using the default file name inside data_dir."""
        return cls(Path(data_dir) / MEMBERS_FILE)

    @property
    def path(self) -> Path:
        return self._store.path

    def load_all(self) -> list[Member]:
        """
        Load all members in file order.

        Raises:
            StorageError: If the file is corrupt or a record cannot be parsed
        """
        members = []
        for record in self._store.read_records():
            try:
                members.append(Member.from_dict(record))
            except (ValueError, TypeError, AttributeError) as e:
                record_id = record.get("id") if isinstance(record, dict) else None
                raise StorageError(
                    f"Invalid member record {record_id!r} in {self.path}: {e}"
                ) from e
        return members

    def _save_all(self, members: list[Member]) -> None:
        self._store.write_records([m.to_dict() for m in members])

    def get(self, member_id: str) -> Optional[Member]:
        """Get a member by id."""
        return next((m for m in self.load_all() if m.id == member_id), None)

    def get_by_email(self, email: str) -> Optional[Member]:
        """Get a member by email, compared case-insensitively."""
        key = normalize_email(email)
        if not key:
            return None
        return next((m for m in self.load_all() if m.matching_key() == key), None)

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        membership_type: MembershipType | str = MembershipType.STANDARD,
        team_ids: list[str] | None = None,
        **fields: Any,
    ) -> Member:
        """
        Create a new member with a generated id and timestamps.

        Args:
            first_name: Required first name
            last_name: Required last name
            email: Required email, must be unique (case-insensitive)
            membership_type: standard or premium
            team_ids: Teams the member belongs to
            **fields: Optional phone, department, job_title, notes,
                      organisation_id, doorflow_person_id

        Returns:
            The created Member

        Raises:
            ValueError: If a required field is empty or a field is unknown
            DuplicateMemberError: If the email is already in use
        """
        if not first_name or not last_name or not email:
            raise ValueError("first_name, last_name and email are required")

        unknown = set(fields) - OPTIONAL_CREATE_FIELDS
        if unknown:
            raise ValueError(f"Unknown member fields: {', '.join(sorted(unknown))}")

        members = self.load_all()
        key = normalize_email(email)
        if any(m.matching_key() == key for m in members):
            raise DuplicateMemberError(f"A member with email {email} already exists")

        now = utc_now_iso()
        member = Member(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            email=email,
            membership_type=MembershipType.parse(membership_type),
            team_ids=list(team_ids or []),
            created_at=now,
            updated_at=now,
            **fields,
        )
        members.append(member)
        self._save_all(members)

        logger.debug(f"Created member {member.id} ({member.email})")
        return member

    def update(self, member_id: str, **fields: Any) -> Optional[Member]:
        """
        Update fields of an existing member.

        Args:
            member_id: Member to update
            **fields: Attribute names of Member (snake_case) and new values

        Returns:
            The updated Member, or None if no member has that id

        Raises:
            ValueError: If a field is unknown or immutable
            DuplicateMemberError: If the new email belongs to another member
        """
        invalid = (set(fields) - set(Member.JSON_KEYS)) | (
            set(fields) & IMMUTABLE_FIELDS
        )
        if invalid:
            raise ValueError(
                f"Cannot update member fields: {', '.join(sorted(invalid))}"
            )

        members = self.load_all()
        index = next((i for i, m in enumerate(members) if m.id == member_id), None)
        if index is None:
            return None

        member = members[index]

        if "email" in fields:
            key = normalize_email(fields["email"])
            if key != member.matching_key() and any(
                m.matching_key() == key for m in members if m.id != member_id
            ):
                raise DuplicateMemberError(
                    f"A member with email {fields['email']} already exists"
                )

        if "membership_type" in fields:
            fields["membership_type"] = MembershipType.parse(fields["membership_type"])
        if "team_ids" in fields:
            fields["team_ids"] = list(fields["team_ids"] or [])

        for name, value in fields.items():
            setattr(member, name, value)
        member.updated_at = utc_now_iso()

        members[index] = member
        self._save_all(members)
        return member

    def delete(self, member_id: str) -> bool:
        """
        Delete a member.

        Returns:
            True if deleted, False if not found
        """
        members = self.load_all()
        remaining = [m for m in members if m.id != member_id]
        if len(remaining) == len(members):
            return False
        self._save_all(remaining)
        logger.debug(f"Deleted member {member_id}")
        return True

    def linked(self) -> list[Member]:
        """Members linked to a DoorFlow person."""
        return [m for m in self.load_all() if m.is_linked()]

    def unlinked(self) -> list[Member]:
        """Members not yet linked to DoorFlow."""
        return [m for m in self.load_all() if not m.is_linked()]

    def in_team(self, team_id: str) -> list[Member]:
        """Members belonging to a team."""
        return [m for m in self.load_all() if team_id in m.team_ids]

    def link(self, member_id: str, doorflow_person_id: int) -> Optional[Member]:
        """Link a member to a DoorFlow person."""
        return self.update(member_id, doorflow_person_id=doorflow_person_id)

    def unlink(self, member_id: str) -> Optional[Member]:
        """Remove a member's DoorFlow link."""
        return self.update(member_id, doorflow_person_id=None)

    def reset(self) -> list[Member]:
        """Restore the sample members, without DoorFlow links."""
        now = utc_now_iso()
        members = [
            Member.from_dict({**record, "createdAt": now, "updatedAt": now})
            for record in SAMPLE_MEMBERS
        ]
        self._save_all(members)
        return members

    def __repr__(self) -> str:
        return f"MemberStore(path={str(self.path)!r})"
