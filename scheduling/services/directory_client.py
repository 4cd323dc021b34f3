# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the member/team directory service (read only)."""
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from scheduling.core.config import settings
from scheduling.core.errors import DirectoryUnavailable
from scheduling.core.logging import get_logger
from scheduling.models.domain import Person, Team

logger = get_logger(__name__)


def _unwrap(payload: Any) -> Any:
    # The member service answers {"success", "message", "data"}
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class DirectoryClient:
    def __init__(self, base_url: str = None, timeout: float = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self._base_url = (base_url or settings.MEMBER_SERVICE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.DIRECTORY_TIMEOUT
        self._transport = transport

    def get_person(self, person_id: str) -> Optional[Person]:
        data = self._get(f"/api/v1/members/{person_id}")
        return self._parse(Person, data) if data is not None else None

    def get_team(self, team_id: str) -> Optional[Team]:
        data = self._get(f"/api/v1/teams/{team_id}")
        return self._parse(Team, data) if data is not None else None

    def list_teams(self) -> list[Team]:
        return [self._parse(Team, t) for t in self._get("/api/v1/teams") or []]

    def list_coaches(self) -> list[Person]:
        people = self._get("/api/v1/members", params={"role": "Coach"}) or []
        return [p for p in (self._parse(Person, item) for item in people) if p.is_coach]

    # ── Private ────────────────────────────────────────────────────────

    def _get(self, path: str, params: dict = None) -> Any:
        """GET a directory resource; ``None`` on 404, fatal on transport errors."""
        try:
            with httpx.Client(base_url=self._base_url, timeout=self._timeout,
                              transport=self._transport) as client:
                resp = client.get(path, params=params)
                if resp.status_code == 404:
                    return None
                resp.raise_for_status()
                return _unwrap(resp.json())
        except httpx.HTTPError as exc:
            logger.warning("Member directory unreachable path=%s error=%s", path, exc)
            raise DirectoryUnavailable(f"Member directory unavailable: {exc}") from exc

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.warning("Rejected malformed directory record model=%s", model.__name__)
            raise DirectoryUnavailable(
                f"Member directory returned a malformed {model.__name__}"
            ) from exc
