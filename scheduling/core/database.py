# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine factory and schema bootstrap."""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from scheduling.core.config import settings
from scheduling.core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS training_sessions (
        id            VARCHAR(36)  PRIMARY KEY,
        title         VARCHAR(255),
        discipline    VARCHAR(100) NOT NULL,
        coach_id      VARCHAR(64)  NOT NULL,
        location      VARCHAR(255) NOT NULL,
        date          VARCHAR(10)  NOT NULL,
        time          VARCHAR(5)   NOT NULL,
        duration      VARCHAR(50)  NOT NULL,
        max_capacity  INTEGER      NOT NULL CHECK (max_capacity >= 1),
        status        VARCHAR(20)  NOT NULL DEFAULT 'Scheduled',
        notes         TEXT,
        created_at    VARCHAR(40)  NOT NULL,
        updated_at    VARCHAR(40)  NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS training_attendance (
        id            VARCHAR(36)  PRIMARY KEY,
        training_id   VARCHAR(36)  NOT NULL REFERENCES training_sessions (id),
        athlete_id    VARCHAR(64)  NOT NULL,
        status        VARCHAR(20)  NOT NULL,
        created_at    VARCHAR(40)  NOT NULL,
        updated_at    VARCHAR(40)  NOT NULL,
        CONSTRAINT uq_training_attendance_pair UNIQUE (training_id, athlete_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        id            VARCHAR(36)  PRIMARY KEY,
        title         VARCHAR(255) NOT NULL,
        description   TEXT,
        type          VARCHAR(20)  NOT NULL,
        date          VARCHAR(10)  NOT NULL,
        time          VARCHAR(5)   NOT NULL,
        location      VARCHAR(255) NOT NULL,
        capacity      INTEGER      NOT NULL CHECK (capacity >= 1),
        status        VARCHAR(20)  NOT NULL DEFAULT 'Upcoming',
        created_at    VARCHAR(40)  NOT NULL,
        updated_at    VARCHAR(40)  NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS event_participants (
        id            VARCHAR(36)  PRIMARY KEY,
        event_id      VARCHAR(36)  NOT NULL REFERENCES events (id),
        user_id       VARCHAR(64)  NOT NULL,
        result        VARCHAR(255),
        created_at    VARCHAR(40)  NOT NULL,
        updated_at    VARCHAR(40)  NOT NULL,
        CONSTRAINT uq_event_participants_pair UNIQUE (event_id, user_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_training_sessions_date ON training_sessions (date)",
    "CREATE INDEX IF NOT EXISTS ix_events_date ON events (date)",
)


def build_engine(url: str) -> Engine:
    """Create an engine; pool sizing only applies to server databases."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


def init_schema(target: Engine) -> None:
    """Create tables and indexes if they do not exist yet."""
    with target.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Schema ready statements=%d", len(SCHEMA_STATEMENTS))


engine = build_engine(settings.DATABASE_URL)
