"""Audit sink interface.

The audit store itself is owned by another service; the core only emits
append-only structured records.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

audit_logger = logging.getLogger("audit")


@dataclass(frozen=True)
class AuditRecord:
    actor_id: str
    action: str
    target: str
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditSink(ABC):
    """Accepts append-only audit records."""

    @abstractmethod
    def record(
        self,
        actor_id: str,
        action: str,
        target: str,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


class LoggingAuditSink(AuditSink):
    """Writes one record per call to the ``audit`` logger."""

    def record(
        self,
        actor_id: str,
        action: str,
        target: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        audit_logger.info(
            "%s %s by %s",
            action,
            target,
            actor_id,
            extra={
                "audit_actor": actor_id,
                "audit_action": action,
                "audit_target": target,
                "audit_metadata": metadata or {},
            },
        )


class RecordingAuditSink(AuditSink):
    """Keeps records in memory."""

    def __init__(self) -> None:
        self.records: list[AuditRecord] = []

    def record(
        self,
        actor_id: str,
        action: str,
        target: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.records.append(AuditRecord(actor_id, action, target, dict(metadata or {})))

    def actions(self) -> list[str]:
        return [r.action for r in self.records]
