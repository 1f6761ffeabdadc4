"""
Sync engine for one-way CRM member to DoorFlow person synchronization.

Matches local members to DoorFlow people by email, repairs links to people
deleted in DoorFlow, optionally creates missing people, and pushes
team-derived group assignments and member photos.

Runs are sequential and take a single snapshot of DoorFlow people at the
start. The local store has no locking: callers must not run two syncs
against the same store at once.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from doorflow_sync.api.doorflow_api import DoorFlowAPI, DoorFlowAPIError
from doorflow_sync.storage.json_store import StorageError
from doorflow_sync.storage.members import MemberStore
from doorflow_sync.storage.teams import TeamStore
from doorflow_sync.sync.groups import build_team_group_map, resolve_group_ids
from doorflow_sync.sync.member import Member
from doorflow_sync.sync.person import Person
from doorflow_sync.sync.photo import load_member_photo_base64

logger = logging.getLogger(__name__)


@dataclass
class SyncMatch:
    """A member paired with its DoorFlow person (None for dry-run creations)."""

    member: Member
    person_id: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        return {"member": self.member.to_dict(), "personId": self.person_id}


@dataclass
class SyncFailure:
    """A member whose DoorFlow person could not be created."""

    member: Member
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"member": self.member.to_dict(), "error": self.error}


@dataclass
class SyncStats:
    """
    Statistics from a sync operation.

    Tracks side effects that do not change a member's outcome bucket.
    """

    members_processed: int = 0
    people_in_doorflow: int = 0
    people_without_email: int = 0
    duplicate_remote_emails: int = 0
    stale_links_cleared: int = 0
    links_written: int = 0
    remote_updates: int = 0
    remote_update_failures: int = 0
    photos_attached: int = 0


@dataclass
class SyncResult:
    """
    Result of a sync operation.

    Every processed member lands in exactly one of the four buckets.
    """

    # Members linked to an existing DoorFlow person (already or by email)
    matched: list[SyncMatch] = field(default_factory=list)

    # Members for which a DoorFlow person was created (or would be, in dry run)
    created: list[SyncMatch] = field(default_factory=list)

    # Members with no email match, creation not requested
    unmatched: list[Member] = field(default_factory=list)

    # Members whose DoorFlow person creation failed
    errors: list[SyncFailure] = field(default_factory=list)

    dry_run: bool = False

    stats: SyncStats = field(default_factory=SyncStats)

    @property
    def total(self) -> int:
        """Number of members across all buckets."""
        return (
            len(self.matched) + len(self.created) + len(self.unmatched) + len(self.errors)
        )

    def has_errors(self) -> bool:
        """Check if any member failed to sync."""
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form: matched, created, unmatched, errors."""
        return {
            "matched": [m.to_dict() for m in self.matched],
            "created": [c.to_dict() for c in self.created],
            "unmatched": [m.to_dict() for m in self.unmatched],
            "errors": [e.to_dict() for e in self.errors],
        }

    def summary(self) -> str:
        """
        Generate a human-readable summary of the sync result.

        Returns:
            Multi-line summary string
        """
        created_label = "Would create" if self.dry_run else "Created"
        lines = [
            "Sync Summary:",
            f"  Members processed: {self.total}",
            f"  DoorFlow people: {self.stats.people_in_doorflow}",
            "",
            f"  Matched: {len(self.matched)}",
            f"  {created_label}: {len(self.created)}",
            f"  Unmatched: {len(self.unmatched)}",
            f"  Errors: {len(self.errors)}",
        ]

        if self.stats.stale_links_cleared:
            lines.append(
                f"  Stale links cleared: {self.stats.stale_links_cleared}"
            )
        if self.stats.remote_update_failures:
            lines.append(
                f"  Group/photo updates failed: {self.stats.remote_update_failures}"
            )
        if self.stats.duplicate_remote_emails:
            lines.append(
                f"  Duplicate DoorFlow emails: {self.stats.duplicate_remote_emails}"
            )

        return "\n".join(lines)


class SyncEngine:
    """
    Synchronize CRM members to DoorFlow people.

    Attributes:
        api: DoorFlow API client
        members: Local member store
        teams: Local team store
        photo_dir: Directory searched for member photos (None disables photos)

    Usage:
        engine = SyncEngine(api, member_store, team_store, photo_dir=photos)
        result = engine.synchronize(create_missing=True, dry_run=True)
        print(result.summary())
    """

    def __init__(
        self,
        api: DoorFlowAPI,
        members: MemberStore,
        teams: TeamStore,
        photo_dir: Optional[Path] = None,
    ):
        self.api = api
        self.members = members
        self.teams = teams
        self.photo_dir = photo_dir

    def synchronize(
        self, create_missing: bool = False, dry_run: bool = False
    ) -> SyncResult:
        """
        Reconcile all local members against DoorFlow people.

        Args:
            create_missing: Create DoorFlow people for members with no match
            dry_run: Report outcomes without writing locally or remotely

        Returns:
            SyncResult with matched, created, unmatched and errors buckets

        Raises:
            NotAuthenticatedError: If DoorFlow rejects the people listing
            DoorFlowAPIError: If the people listing fails otherwise
        """
        members = self.members.load_all()
        team_group_map = build_team_group_map(self.teams.load_all())

        # Listing failures abort the whole run
        people = [Person.from_api_response(p) for p in self.api.list_all_people()]

        result = SyncResult(dry_run=dry_run)
        result.stats.people_in_doorflow = len(people)

        people_ids = {p.id for p in people}
        people_by_email = self._index_by_email(people, result.stats)

        logger.info(
            f"Syncing {len(members)} members against {len(people)} DoorFlow people "
            f"(create_missing={create_missing}, dry_run={dry_run})"
        )

        for member in members:
            result.stats.members_processed += 1

            if member.is_linked():
                if member.doorflow_person_id in people_ids:
                    result.matched.append(SyncMatch(member, member.doorflow_person_id))
                    continue

                # Person was deleted in DoorFlow: unlink, then try to rematch
                logger.info(
                    f"DoorFlow person {member.doorflow_person_id} for member "
                    f"{member.id} no longer exists, unlinking"
                )
                result.stats.stale_links_cleared += 1
                if not dry_run:
                    self.members.unlink(member.id)
                member = replace(member, doorflow_person_id=None)

            self._sync_unlinked(
                member, people_by_email, team_group_map, result, create_missing, dry_run
            )

        logger.info(
            f"Sync finished: matched={len(result.matched)}, "
            f"created={len(result.created)}, unmatched={len(result.unmatched)}, "
            f"errors={len(result.errors)}"
        )
        return result

    def _index_by_email(
        self, people: list[Person], stats: SyncStats
    ) -> dict[str, Person]:
        """
        Build the lower-cased email index.

        People without an email are left out. If two people share an email
        the later one wins.
        """
        index: dict[str, Person] = {}
        for person in people:
            key = person.matching_key()
            if not key:
                stats.people_without_email += 1
                continue
            if key in index:
                stats.duplicate_remote_emails += 1
                logger.warning(
                    f"DoorFlow people {index[key].id} and {person.id} share email "
                    f"{key}; using {person.id}"
                )
            index[key] = person
        return index

    def _sync_unlinked(
        self,
        member: Member,
        people_by_email: dict[str, Person],
        team_group_map: dict[str, int],
        result: SyncResult,
        create_missing: bool,
        dry_run: bool,
    ) -> None:
        """Match an unlinked member by email, or create/skip it."""
        key = member.matching_key()
        person = people_by_email.get(key) if key else None
        group_ids = resolve_group_ids(member.team_ids, team_group_map)

        if person is not None:
            if not dry_run:
                self.members.link(member.id, person.id)
                result.stats.links_written += 1
                self._push_match_update(member, person.id, group_ids, result.stats)
            result.matched.append(
                SyncMatch(replace(member, doorflow_person_id=person.id), person.id)
            )
            return

        if not create_missing:
            result.unmatched.append(member)
            return

        if dry_run:
            result.created.append(SyncMatch(member, None))
            return

        try:
            person_id = self._create_person(member, group_ids, result.stats)
            self.members.link(member.id, person_id)
            result.stats.links_written += 1
        except (DoorFlowAPIError, StorageError) as e:
            logger.error(f"Failed to create DoorFlow person for {member.email}: {e}")
            result.errors.append(
                SyncFailure(member, str(e) or "Failed to create person")
            )
            return

        result.created.append(
            SyncMatch(replace(member, doorflow_person_id=person_id), person_id)
        )

    def _create_person(
        self, member: Member, group_ids: list[int], stats: SyncStats
    ) -> int:
        """Create the DoorFlow person for a member and return its id."""
        photo = load_member_photo_base64(member, self.photo_dir)
        person = self.api.create_person(member.to_person_fields(group_ids, photo))

        person_id = person.get("id") if isinstance(person, dict) else None
        if person_id is None:
            raise DoorFlowAPIError("DoorFlow did not return an id for the new person")

        if photo:
            stats.photos_attached += 1
        logger.info(f"Created DoorFlow person {person_id} for member {member.id}")
        return person_id

    def _push_match_update(
        self,
        member: Member,
        person_id: int,
        group_ids: list[int],
        stats: SyncStats,
    ) -> None:
        """
        Push groups and photo to a newly matched person.

        Skipped when there is nothing to send. Failures are logged only:
        the member stays matched.
        """
        photo = load_member_photo_base64(member, self.photo_dir)
        if not group_ids and not photo:
            return

        fields: dict[str, Any] = {}
        if group_ids:
            fields["group_ids"] = group_ids
        if photo:
            fields["image_base64"] = photo

        try:
            self.api.update_person(person_id, fields)
        except DoorFlowAPIError as e:
            stats.remote_update_failures += 1
            logger.error(f"Failed to update person {person_id}: {e}")
            return

        stats.remote_updates += 1
        if photo:
            stats.photos_attached += 1

    def __repr__(self) -> str:
        return (
            f"SyncEngine(api={self.api!r}, members={self.members!r}, "
            f"teams={self.teams!r})"
        )
