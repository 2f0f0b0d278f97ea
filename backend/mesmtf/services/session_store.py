"""
Session Persistence Adapter

Writes a finished diagnosis session to the record store as an append-only
audit entry: one session row plus one linkage row per matched symptom. The
store is never read back during evaluation.
"""

import asyncio
import functools
import logging

from mesmtf.config import PERSIST_TIMEOUT_SECONDS, SESSIONS_TABLE, SESSION_SYMPTOMS_TABLE
from mesmtf.errors import PersistenceError
from mesmtf.models.diagnosis import DiagnosisSession
from mesmtf.services.supabase_client import get_client

logger = logging.getLogger(__name__)

# Extra wait on top of the client request timeout before the caller gives up
BACKSTOP_GRACE_SECONDS = 1.0


def session_record(session: DiagnosisSession) -> dict:
    """Flatten a session into the session table row."""
    request = session.request
    top = session.results[0] if session.results else None
    return {
        "id": session.session_id,
        "symptoms": list(dict.fromkeys(request.selected_symptoms)),
        "symptom_severity": {s: obs.severity.value for s, obs in request.observations.items()},
        "symptom_duration": {s: obs.duration.value for s, obs in request.observations.items()},
        "risk_factors": dict(request.risk_factors),
        "patient_age": request.patient_age,
        "results": [r.model_dump(mode="json", by_alias=True) for r in session.results],
        "top_diagnosis": top.disease if top else None,
        "confidence_level": top.confidence_percentage if top else None,
        "requires_lab_tests": session.any_requires_lab_tests,
        "created_at": session.created_at.isoformat(),
    }


def symptom_links(session: DiagnosisSession) -> list[dict]:
    """One linkage row per distinct symptom matched by any reported disease."""
    matched: dict[str, None] = {}
    for result in session.results:
        for symptom in result.matching_symptoms:
            matched.setdefault(symptom)
    return [
        {"session_id": session.session_id, "symptom_name": symptom}
        for symptom in matched
    ]


class SessionStore:
    """Persists sessions through a Supabase client (or anything exposing the same table API)."""

    def __init__(self, client=None, grace: float = BACKSTOP_GRACE_SECONDS):
        self._client = client
        self._grace = grace

    @property
    def client(self):
        return self._client if self._client is not None else get_client()

    def persist(self, session: DiagnosisSession) -> str:
        """Write the session and its symptom links. Returns the session id."""
        client = self.client
        if client is None:
            raise PersistenceError("Record store is not configured")

        try:
            client.table(SESSIONS_TABLE).insert(session_record(session)).execute()
            links = symptom_links(session)
            if links:
                client.table(SESSION_SYMPTOMS_TABLE).insert(links).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to record session {session.session_id}: {e}") from e

        return session.session_id

    async def persist_with_timeout(
        self,
        session: DiagnosisSession,
        timeout: float = PERSIST_TIMEOUT_SECONDS,
    ) -> str:
        """persist() in a worker thread.

        The record store client enforces ``timeout`` on each request, so a
        slow insert raises inside persist() and nothing is written. Waiting
        is also capped at ``timeout`` plus a grace period in case the client
        does not honour it; a write that completes after that is logged.
        """
        loop = asyncio.get_running_loop()
        write = loop.run_in_executor(None, self.persist, session)
        try:
            return await asyncio.wait_for(asyncio.shield(write), timeout + self._grace)
        except asyncio.TimeoutError as e:
            write.add_done_callback(functools.partial(_log_late_write, session.session_id))
            raise PersistenceError(
                f"Recording session {session.session_id} timed out after {timeout}s"
            ) from e

    async def record(self, session: DiagnosisSession) -> bool:
        """Best-effort persistence: failures are logged, never raised."""
        try:
            await self.persist_with_timeout(session)
        except PersistenceError as e:
            logger.warning("Session not durably recorded: %s", e)
            return False
        logger.info("Recorded diagnosis session %s", session.session_id)
        return True


def _log_late_write(session_id: str, write: asyncio.Future) -> None:
    if write.cancelled() or write.exception() is not None:
        return
    logger.warning("Session %s was recorded after its timeout was reported", session_id)


session_store = SessionStore()
