"""
Client for the minecraft-mp.com vote API.

Both queries are read-only and never raise: transport errors, non-2xx
responses and payloads of the wrong shape all come back as a
``FetchFailure`` so a bad poll only skips the current cycle.
"""

import asyncio
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx

from votebot.config import SyncSettings
from votebot.data_models.votes import (
    FetchFailure,
    FetchFailureReason,
    FetchResult,
    FetchSuccess,
    StandingsSnapshot,
    VoteEvent,
    VoterStanding,
)
from votebot.utils.logger import setup_logger

log = setup_logger(__name__)


def current_period(now: datetime) -> str:
    """Reporting window key for the month containing ``now``, e.g. "202406"."""
    return f"{now.year}{now.month:02d}"


class MalformedPayload(ValueError):
    pass


def _parse_vote_count(value: Any) -> int:
    # The API reports totals as numeric strings
    if isinstance(value, bool):
        raise MalformedPayload(f"invalid vote count {value!r}")
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise MalformedPayload(f"invalid vote count {value!r}")
    if count < 0:
        raise MalformedPayload(f"negative vote count {count}")
    return count


def _parse_ordinal(value: Any) -> float:
    if isinstance(value, bool):
        raise MalformedPayload(f"invalid vote timestamp {value!r}")
    try:
        ordinal = float(value)
    except (TypeError, ValueError):
        raise MalformedPayload(f"invalid vote timestamp {value!r}")
    # Ordinals must be totally ordered
    if not math.isfinite(ordinal):
        raise MalformedPayload(f"non-finite vote timestamp {value!r}")
    return ordinal


def _require_nickname(entry: Dict[str, Any]) -> str:
    nickname = entry.get("nickname")
    if not isinstance(nickname, str) or not nickname:
        raise MalformedPayload(f"entry without nickname: {entry!r}")
    return nickname


def _require_list(payload: Any, key: str) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        raise MalformedPayload("expected a JSON object")
    entries = payload.get(key)
    if not isinstance(entries, list):
        raise MalformedPayload(f"missing '{key}' list")
    for entry in entries:
        if not isinstance(entry, dict):
            raise MalformedPayload(f"'{key}' entry is not an object")
    return entries


def parse_standings(payload: Any) -> StandingsSnapshot:
    """Validate a voters payload into a standings snapshot."""
    entries = _require_list(payload, "voters")
    standings = [
        VoterStanding(nickname=_require_nickname(entry), vote_count=_parse_vote_count(entry.get("votes")))
        for entry in entries
    ]
    label = payload.get("name")
    return StandingsSnapshot(standings=standings, entity_label=label if isinstance(label, str) and label else None)


def parse_events(payload: Any) -> List[VoteEvent]:
    """Validate a votes payload into vote events."""
    entries = _require_list(payload, "votes")
    events = []
    for entry in entries:
        nickname = entry.get("nickname")
        if not isinstance(nickname, str) or not nickname:
            # Unmatchable against any standing
            log.warning(f"Skipping vote log entry without nickname: {entry!r}")
            continue
        occurred_at = entry.get("date")
        events.append(VoteEvent(
            nickname=nickname,
            occurred_at=occurred_at if isinstance(occurred_at, str) else '',
            epoch_ordinal=_parse_ordinal(entry.get("timestamp")),
        ))
    return events


class VoteProviderClient:
    """
    Minimal wrapper around httpx.AsyncClient for the two vote queries.
    """

    def __init__(
        self,
        server_key: str,
        base_url: str,
        response_format: str = "json",
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.server_key = server_key
        self.base_url = base_url
        self.response_format = response_format
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "VoteProviderClient":
        return cls(
            server_key=settings.server_key,
            base_url=settings.api_url,
            response_format=settings.response_format,
            timeout=settings.fetch_timeout,
        )

    # ────────────────────────────────────────────────────────
    # Public queries
    # ────────────────────────────────────────────────────────
    async def fetch_standings(self, period: str) -> FetchResult[StandingsSnapshot]:
        """Current vote totals per voter for the given month."""
        return await self._fetch("voters", {"month": period}, parse_standings)

    async def fetch_events(self) -> FetchResult[List[VoteEvent]]:
        """Raw timestamped vote log."""
        return await self._fetch("votes", {}, parse_events)

    async def fetch_all(
        self, period: str
    ) -> Tuple[FetchResult[StandingsSnapshot], FetchResult[List[VoteEvent]]]:
        """Issue both queries concurrently and wait for both."""
        standings, events = await asyncio.gather(
            self.fetch_standings(period),
            self.fetch_events(),
        )
        return standings, events

    async def _fetch(self, element: str, extra_params: Dict[str, str], parse) -> FetchResult:
        params = {
            "object": "servers",
            "element": element,
            "key": self.server_key,
            **extra_params,
            "format": self.response_format,
        }

        try:
            resp = await self._client.get(self.base_url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            log.error(
                f"Failed to fetch vote {element}: "
                f"{e.response.status_code} {e.response.reason_phrase}"
            )
            return FetchFailure(FetchFailureReason.HTTP_STATUS, str(e.response.status_code))
        except httpx.HTTPError as e:
            log.error(f"Failed to fetch vote {element}: {e!r}")
            return FetchFailure(FetchFailureReason.NETWORK, str(e))
        except ValueError as e:
            log.error(f"Vote {element} response is not valid JSON: {e}")
            return FetchFailure(FetchFailureReason.MALFORMED, str(e))

        try:
            value = parse(payload)
        except MalformedPayload as e:
            log.error(f"Vote {element} response has unexpected shape: {e}")
            return FetchFailure(FetchFailureReason.MALFORMED, str(e))

        log.debug(f"Fetched vote {element}")
        return FetchSuccess(value)

    # ────────────────────────────────────────────────────────
    # Lifecycle
    # ────────────────────────────────────────────────────────
    async def close(self) -> None:
        await self._client.aclose()
