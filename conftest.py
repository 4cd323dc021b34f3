# type: ignore
"""
Shared fixtures: temp SQLite store and an in-memory member directory.
The environment is set before any scheduling module reads settings.
"""
import os
import tempfile
from datetime import date

_DB_DIR = tempfile.mkdtemp(prefix="scheduling-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'service.db')}"
os.environ["INIT_SCHEMA"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest

from scheduling.core.database import build_engine, init_schema
from scheduling.models.domain import Person, Team
from scheduling.repositories import EventRepository, TrainingRepository
from scheduling.services import lifecycle
from scheduling.services.capacity import CapacityGate
from scheduling.services.eligibility import EligibilityResolver
from scheduling.services.event_service import EventService
from scheduling.services.training_service import TrainingService

TODAY = date(2026, 6, 1)
FUTURE = "2026-06-20"
PAST = "2026-05-01"


class FakeDirectory:
    """Member directory double with the DirectoryClient interface."""

    def __init__(self, people=(), teams=()):
        self.people = {p.id: p for p in people}
        self.teams = {t.id: t for t in teams}

    def get_person(self, person_id):
        return self.people.get(person_id)

    def get_team(self, team_id):
        return self.teams.get(team_id)

    def list_teams(self):
        return list(self.teams.values())

    def list_coaches(self):
        return [p for p in self.people.values() if p.is_coach]


def coach(cid, sports=(), team_id=None):
    return Person(id=cid, role="Coach", sports=list(sports), team_id=team_id)


def athlete(aid, team_id=None):
    return Person(id=aid, role="Athlete", team_id=team_id)


def club_directory():
    """coach-1 lists Football, coach-2 swims, coach-3 is on the basketball team,
    coach-4 coaches the football team. team-x has a coach unknown to the directory."""
    people = [
        coach("coach-1", sports=["Football"]),
        coach("coach-2", sports=["swimming", "Swimming "]),
        coach("coach-3", team_id="team-b"),
        coach("coach-4", sports=["Tennis"]),
    ] + [athlete(f"athlete-{i}") for i in range(1, 21)]
    teams = [
        Team(id="team-f", discipline="Football", coach_id="coach-4"),
        Team(id="team-b", discipline=" Basketball", coach_id=None),
        Team(id="team-x", discipline="Rugby", coach_id="ghost"),
    ]
    return FakeDirectory(people, teams)


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'scheduling.db'}")
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def directory():
    return club_directory()


@pytest.fixture
def training_repo(engine):
    return TrainingRepository(engine)


@pytest.fixture
def event_repo(engine):
    return EventRepository(engine)


@pytest.fixture
def training_gate(training_repo):
    return CapacityGate(training_repo, lifecycle.TRAINING, max_retries=3, today=lambda: TODAY)


@pytest.fixture
def event_gate(event_repo):
    return CapacityGate(event_repo, lifecycle.EVENT, max_retries=3, today=lambda: TODAY)


@pytest.fixture
def eligibility(directory):
    return EligibilityResolver(directory)


@pytest.fixture
def training_service(training_repo, training_gate, eligibility, directory):
    return TrainingService(training_repo, training_gate, eligibility, directory)


@pytest.fixture
def event_service(event_repo, event_gate, directory):
    return EventService(event_repo, event_gate, directory)


@pytest.fixture
def make_training(training_service):
    def _make(capacity=2, discipline="Football", coach_id="coach-1", day=FUTURE):
        return training_service.create_training(
            discipline=discipline, coach_id=coach_id, location="Main pitch",
            date=day, time="18:00", duration="90 min", max_capacity=capacity,
        )
    return _make


@pytest.fixture
def make_event(event_service):
    def _make(capacity=2, event_type="Tournament", day=FUTURE):
        return event_service.create_event(
            title="Spring Cup", event_type=event_type, date=day, time="10:00",
            location="Stadium", capacity=capacity,
        )
    return _make
