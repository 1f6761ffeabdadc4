"""
Team storage backed by a JSON file.

Teams are mapped to DoorFlow groups: a member of a mapped team is
assigned to that team's DoorFlow group.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from doorflow_sync.storage.json_store import JsonStore, StorageError, utc_now_iso
from doorflow_sync.sync.member import Team

logger = logging.getLogger(__name__)

TEAMS_FILE = "teams.json"

UPDATABLE_FIELDS = frozenset({"name", "description", "doorflow_group_id"})

SAMPLE_TEAMS: list[dict[str, Any]] = [
    {
        "id": "team-001",
        "name": "Engineering",
        "description": "Software development team",
    },
    {
        "id": "team-002",
        "name": "Sales",
        "description": "Sales and business development",
    },
    {
        "id": "team-003",
        "name": "Operations",
        "description": "Operations and support",
    },
]


class TeamStore:
    """
    CRUD access to CRM teams and their DoorFlow group mappings.

    Usage:
        store = TeamStore(data_dir / "teams.json")
        store.map_to_group("team-001", 5)
        store.mapped()
    """

    def __init__(self, path: Path | str):
        self._store = JsonStore(path)

    @classmethod
    def in_dir(cls, data_dir: Path) -> "TeamStore":
        """Create a store using the default file name inside data_dir."""
        return cls(Path(data_dir) / TEAMS_FILE)

    @property
    def path(self) -> Path:
        return self._store.path

    def load_all(self) -> list[Team]:
        """Load all teams in file order."""
        try:
            return [Team.from_dict(r) for r in self._store.read_records()]
        except (TypeError, AttributeError) as e:
            raise StorageError(f"Invalid team record in {self.path}: {e}") from e

    def _save_all(self, teams: list[Team]) -> None:
        self._store.write_records([t.to_dict() for t in teams])

    def get(self, team_id: str) -> Optional[Team]:
        """Get a team by id."""
        return next((t for t in self.load_all() if t.id == team_id), None)

    def create(
        self,
        name: str,
        description: str | None = None,
        doorflow_group_id: int | None = None,
    ) -> Team:
        """
        Create a new team with a generated id and timestamps.

        Raises:
            ValueError: If the name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Team name cannot be empty")

        now = utc_now_iso()
        team = Team(
            id=str(uuid.uuid4()),
            name=name,
            description=(description or "").strip() or None,
            doorflow_group_id=doorflow_group_id,
            created_at=now,
            updated_at=now,
        )
        teams = self.load_all()
        teams.append(team)
        self._save_all(teams)
        return team

    def update(self, team_id: str, **fields: Any) -> Optional[Team]:
        """
        Update name, description or doorflow_group_id of a team.

        Returns:
            The updated Team, or None if not found

        Raises:
            ValueError: If a field is not updatable or the name is empty
        """
        invalid = set(fields) - UPDATABLE_FIELDS
        if invalid:
            raise ValueError(f"Cannot update team fields: {', '.join(sorted(invalid))}")

        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValueError("Team name cannot be empty")
        if "description" in fields:
            fields["description"] = (fields["description"] or "").strip() or None

        teams = self.load_all()
        team = next((t for t in teams if t.id == team_id), None)
        if team is None:
            return None

        for name, value in fields.items():
            setattr(team, name, value)
        team.updated_at = utc_now_iso()
        self._save_all(teams)
        return team

    def delete(self, team_id: str) -> bool:
        """
        Delete a team.

        Returns:
            True if deleted, False if not found
        """
        teams = self.load_all()
        remaining = [t for t in teams if t.id != team_id]
        if len(remaining) == len(teams):
            return False
        self._save_all(remaining)
        return True

    def mapped(self) -> list[Team]:
        """Teams mapped to a DoorFlow group."""
        return [t for t in self.load_all() if t.is_mapped()]

    def unmapped(self) -> list[Team]:
        """Teams not yet mapped to a DoorFlow group."""
        return [t for t in self.load_all() if not t.is_mapped()]

    def map_to_group(self, team_id: str, doorflow_group_id: int) -> Optional[Team]:
        """Map a team to a DoorFlow group."""
        return self.update(team_id, doorflow_group_id=doorflow_group_id)

    def unmap(self, team_id: str) -> Optional[Team]:
        """Remove a team's DoorFlow group mapping."""
        return self.update(team_id, doorflow_group_id=None)

    def reset(self) -> list[Team]:
        """Restore the sample teams, without DoorFlow group mappings."""
        now = utc_now_iso()
        teams = [
            Team.from_dict({**record, "createdAt": now, "updatedAt": now})
            for record in SAMPLE_TEAMS
        ]
        self._save_all(teams)
        return teams

    def __repr__(self) -> str:
        return f"TeamStore(path={str(self.path)!r})"
