"""Decision audit trail for classification sessions.

Each classification session appends to ``decisions.log`` in the audit
directory, one JSON object per line:

    {"timestamp": ..., "session_id": ..., "seq": 3,
     "event_type": "decision", "details": {"verdict": "drop", ...}}

``seq`` numbers the records of one session from 1, so a session's
records can be told apart and ordered even when several sessions append
to the same file.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from netsieve.core.constants import AuditEventType
from netsieve.core.exceptions import AuditLogError
from netsieve.core.models import Decision, RequestEvent


AUDIT_LOG_NAME = "decisions.log"


def _file_handler(log_path: Path) -> logging.Handler:
    try:
        handler = logging.FileHandler(str(log_path), mode="a", encoding="utf-8")
    except OSError as e:
        raise AuditLogError(f"Failed to open audit log {log_path}: {e}") from e
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


class DecisionAuditLogger:
    """Append-only JSON Lines record of the decisions made in one session.

    Usable as a context manager; the file is closed on exit.

    Example:
        >>> with DecisionAuditLogger("s-1", Path("./audit")) as audit:
        ...     audit.log_decision(event, classifier.explain(event))
    """

    def __init__(self, session_id: str, audit_dir: Path) -> None:
        """
        Raises:
            AuditLogError: If the audit directory or log file cannot be created.
        """
        self.session_id = session_id
        self.log_path = Path(audit_dir) / AUDIT_LOG_NAME
        self._seq = 0

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AuditLogError(
                f"Failed to create audit directory {audit_dir}: {e}"
            ) from e

        # Records must not reach the console handlers on the root logger
        self._logger = logging.getLogger(f"netsieve.audit.{session_id}")
        self._logger.propagate = False
        self._logger.setLevel(logging.INFO)
        self._logger.handlers.clear()
        self._logger.addHandler(_file_handler(self.log_path))

    def __enter__(self) -> "DecisionAuditLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def records_written(self) -> int:
        return self._seq

    def log_event(
        self,
        event_type: AuditEventType,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Append one record.

        Raises:
            AuditLogError: If the record cannot be serialized or written.
        """
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": self.session_id,
            "seq": self._seq + 1,
            "event_type": event_type.value,
            "details": details or {},
        }

        try:
            line = json.dumps(record, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise AuditLogError(
                f"Audit record for {event_type.value} is not serializable: {e}"
            ) from e

        try:
            self._logger.info(line)
        except OSError as e:
            raise AuditLogError(f"Failed to write to {self.log_path}: {e}") from e

        self._seq += 1

    def log_decision(self, event: RequestEvent, decision: Decision) -> None:
        """Record the verdict and deciding rule for one event."""
        self.log_event(
            AuditEventType.DECISION,
            {
                "verdict": "keep" if decision.kept else "drop",
                "rule": decision.rule.value,
                "method": event.method,
                "url": event.url,
                "status": event.status,
                "duration_ms": event.resolved_duration_ms,
            },
        )

    def close(self) -> None:
        handlers = list(self._logger.handlers)
        self._logger.handlers.clear()
        for handler in handlers:
            handler.close()
