# ===========================================================
# audit/recorder.py
# ===========================================================
"""
Fire-and-forget audit recording.

``AuditRecorder.record()`` never raises and never blocks the caller on the
sink: with ``audit_async`` enabled the signal is sent from a single
background worker, otherwise inline. Either way receiver failures are only
logged.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Optional
import logging

from django.db import connection

from .signals import audit_event

logger = logging.getLogger("audit")


@dataclass(frozen=True)
class RequestMeta:
    ip_address: Optional[str] = None
    user_agent: str = ""

    @classmethod
    def from_request(cls, request):
        if request is None:
            return cls()
        meta = getattr(request, "META", {})
        return cls(
            ip_address=meta.get("REMOTE_ADDR") or None,
            user_agent=(meta.get("HTTP_USER_AGENT") or "")[:255],
        )


@dataclass(frozen=True)
class AuditEvent:
    action: str
    resource_type: str
    actor_id: Optional[int] = None
    resource_id: str = ""
    details: dict = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: str = ""


class AuditRecorder:

    def __init__(self, config):
        self._executor = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="audit")
            if config.audit_async
            else None
        )

    @property
    def is_async(self):
        return self._executor is not None

    def record(
        self,
        action: str,
        resource_type: str,
        actor_id: Optional[int] = None,
        resource_id: Any = None,
        details: Optional[dict] = None,
        meta: Optional[RequestMeta] = None,
    ) -> None:
        meta = meta or RequestMeta()
        event = AuditEvent(
            action=action,
            resource_type=resource_type,
            actor_id=actor_id,
            resource_id="" if resource_id is None else str(resource_id),
            details=details or {},
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
        )
        if self._executor is None:
            self._dispatch(event)
            return
        try:
            self._executor.submit(self._dispatch_in_worker, event)
        except RuntimeError:
            logger.error(f"[Audit] Executor unavailable, dropped {event.action} event")

    def _dispatch(self, event):
        try:
            results = audit_event.send_robust(sender=self.__class__, event=event)
        except Exception:
            logger.exception(f"[Audit] Failed to dispatch {event.action} event")
            return
        for receiver, result in results:
            if isinstance(result, Exception):
                logger.error(
                    f"[Audit] {getattr(receiver, '__name__', receiver)} failed for "
                    f"{event.action} {event.resource_type}:{event.resource_id}: {result}"
                )

    def _dispatch_in_worker(self, event):
        try:
            self._dispatch(event)
        finally:
            # Worker threads own their connection.
            connection.close()

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
