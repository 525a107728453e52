"""Audit logging for MCP Server.

Records every policy and dispatch decision as one structured event on the
diagnostic stream. Captures: timestamp, operation, project, outcome, reason.
"""

import sys
from typing import Optional

from shared.logging import get_audit_logger
from shared.models import AuditEntry

logger = get_audit_logger()


class AuditLogger:
    """
    Audit logger for MCP decisions.

    Records are written synchronously, in decision order, and are not kept
    in memory afterwards. Records bypass the log level filter. Recording
    never raises: a failure to write an audit line must not block the
    response.
    """

    def create_entry(
        self,
        operation: str,
        project_id: Optional[str],
        allowed: bool,
        reason: str
    ) -> AuditEntry:
        """Create an audit entry for one decision."""
        return AuditEntry(
            operation=operation,
            project_id=project_id or "unknown",
            allowed=allowed,
            reason=reason,
        )

    def record(
        self,
        operation: str,
        project_id: Optional[str],
        allowed: bool,
        reason: str
    ) -> None:
        """
        Record one decision.

        Args:
            operation: Tool name as requested
            project_id: Extracted project identifier, if any
            allowed: Whether the call may proceed
            reason: Why
        """
        try:
            entry = self.create_entry(operation, project_id, allowed, reason)
            # "timestamp" is reserved for the structlog processor
            logger.info(
                "audit",
                recorded_at=entry.timestamp.isoformat(),
                **entry.model_dump(mode="json", exclude={"timestamp"}),
            )
        except Exception as e:
            try:
                print(f"[AUDIT] write failed: {e!r}", file=sys.stderr)
            except Exception:
                pass
