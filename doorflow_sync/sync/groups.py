"""
Team to DoorFlow group resolution.

A team maps to at most one DoorFlow group; a member's effective groups are
the union of the groups mapped by all of their teams. Resolution is pure
and recomputed on demand. GroupAssigner pushes the resolved groups to
DoorFlow when membership or mappings change outside a full sync.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional

from doorflow_sync.api.doorflow_api import DoorFlowAPIError
from doorflow_sync.sync.member import Member, Team

if TYPE_CHECKING:
    from doorflow_sync.api.doorflow_api import DoorFlowAPI
    from doorflow_sync.storage.members import MemberStore
    from doorflow_sync.storage.teams import TeamStore

logger = logging.getLogger(__name__)


def build_team_group_map(teams: Iterable[Team]) -> dict[str, int]:
    """
    Map team id to DoorFlow group id for every mapped team.

    Args:
        teams: Teams to index

    Returns:
        Dictionary of team id -> group id; unmapped teams are left out
    """
    return {t.id: t.doorflow_group_id for t in teams if t.doorflow_group_id is not None}


def resolve_group_ids(
    team_ids: Iterable[str], team_group_map: dict[str, int]
) -> list[int]:
    """
    Resolve a member's teams to DoorFlow group ids.

    Unknown and unmapped team ids are dropped. Two teams mapped to the
    same group contribute it once; order follows the first team naming it.

    Args:
        team_ids: The member's team ids
        team_group_map: Output of build_team_group_map()

    Returns:
        Deduplicated list of group ids
    """
    group_ids: list[int] = []
    for team_id in team_ids or []:
        group_id = team_group_map.get(team_id)
        if group_id is not None and group_id not in group_ids:
            group_ids.append(group_id)
    return group_ids


class GroupAssigner:
    """
    Push team-derived group assignments for already-linked members.

    Used when a member's teams change, or a team's group mapping changes,
    so DoorFlow reflects the change without waiting for a full sync.

    Usage:
        assigner = GroupAssigner(api, member_store, team_store)
        assigner.sync_member_groups(member)
        assigner.sync_team_members("team-001")
    """

    def __init__(self, api: DoorFlowAPI, members: MemberStore, teams: TeamStore):
        self.api = api
        self.members = members
        self.teams = teams

    def sync_member_groups(
        self, member: Member, team_group_map: Optional[dict[str, int]] = None
    ) -> Optional[list[int]]:
        """
        Replace a linked member's DoorFlow groups with their team groups.

        An empty list is pushed too, so leaving every mapped team removes
        the person from those groups.

        Args:
            member: Member whose teams changed
            team_group_map: Precomputed map, loaded from the team store if omitted

        Returns:
            The group ids pushed, or None if the member is not linked

        Raises:
            DoorFlowAPIError: If the update fails
        """
        if not member.is_linked():
            logger.debug(f"Member {member.id} is not linked, skipping group push")
            return None

        if team_group_map is None:
            team_group_map = build_team_group_map(self.teams.load_all())

        group_ids = resolve_group_ids(member.team_ids, team_group_map)
        self.api.update_person(member.doorflow_person_id, {"group_ids": group_ids})
        logger.info(
            f"Synced person {member.doorflow_person_id} to groups: "
            f"[{', '.join(str(g) for g in group_ids)}]"
        )
        return group_ids

    def sync_team_members(self, team_id: str) -> int:
        """
        Push groups for every linked member of a team.

        Per-member failures are logged and skipped.

        Args:
            team_id: Team whose group mapping changed

        Returns:
            Number of members whose groups were pushed
        """
        team_group_map = build_team_group_map(self.teams.load_all())
        team_members = [m for m in self.members.in_team(team_id) if m.is_linked()]

        synced_count = 0
        for member in team_members:
            try:
                self.sync_member_groups(member, team_group_map)
                synced_count += 1
            except DoorFlowAPIError as e:
                logger.error(f"Failed to sync member {member.id} to DoorFlow: {e}")

        logger.info(
            f"Team {team_id} group mapping changed, synced {synced_count} "
            f"of {len(team_members)} members to DoorFlow"
        )
        return synced_count
