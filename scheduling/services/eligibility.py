# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: coach eligibility per discipline.

A coach can run a discipline when they coach a team of that discipline, list it
among their sports, or belong to a team of that discipline. Matching is
case-insensitive through ``discipline_key``.
"""

from typing import Optional

from scheduling.core.logging import get_logger
from scheduling.models.domain import Person, Team, discipline_key

logger = get_logger(__name__)


class EligibilityResolver:
    def __init__(self, directory):
        self._directory = directory

    def eligible_coaches(self, discipline: str,
                         retain_coach_id: Optional[str] = None) -> list[Person]:
        """Coaches eligible for ``discipline``, team coaches first.

        ``retain_coach_id`` is the coach already assigned to a session being
        edited; they stay in the result even if they no longer qualify.
        """
        teams = self._directory.list_teams()
        coaches = self._directory.list_coaches()
        eligible = _match(discipline_key(discipline), teams, coaches)

        if retain_coach_id and retain_coach_id not in eligible:
            retained = next((c for c in coaches if c.id == retain_coach_id), None)
            if retained is None:
                retained = self._directory.get_person(retain_coach_id)
            if retained is not None:
                eligible[retained.id] = retained

        logger.debug("Eligibility resolved discipline=%s coaches=%d",
                     discipline, len(eligible))
        return list(eligible.values())

    def eligible_coach_ids(self, discipline: str,
                           retain_coach_id: Optional[str] = None) -> set[str]:
        ids = {c.id for c in self.eligible_coaches(discipline, retain_coach_id)}
        if retain_coach_id:
            ids.add(retain_coach_id)
        return ids

    def available_disciplines(self) -> list[str]:
        """Disciplines that currently have at least one eligible coach."""
        teams = self._directory.list_teams()
        coaches = self._directory.list_coaches()
        coach_ids = {c.id for c in coaches}
        team_by_id = {t.id: t for t in teams}

        found: dict[str, str] = {}
        for team in teams:
            if team.coach_id in coach_ids:
                _remember(found, team.discipline)
        for coach in coaches:
            for sport in coach.sports:
                _remember(found, sport)
            own_team = team_by_id.get(coach.team_id) if coach.team_id else None
            if own_team is not None:
                _remember(found, own_team.discipline)
        return [found[key] for key in sorted(found)]


def _match(key: str, teams: list[Team], coaches: list[Person]) -> dict[str, Person]:
    if not key:
        return {}
    coach_by_id = {c.id: c for c in coaches}
    team_key = {t.id: t.discipline_key for t in teams}
    eligible: dict[str, Person] = {}

    for team in teams:
        if team.coach_id and team.discipline_key == key:
            coach = coach_by_id.get(team.coach_id)
            if coach is not None:
                eligible.setdefault(coach.id, coach)

    for coach in coaches:
        own_team_key = team_key.get(coach.team_id) if coach.team_id else None
        if key in coach.sport_keys or own_team_key == key:
            eligible.setdefault(coach.id, coach)
    return eligible


def _remember(found: dict[str, str], discipline: str) -> None:
    key = discipline_key(discipline)
    if key:
        found.setdefault(key, discipline.strip())
