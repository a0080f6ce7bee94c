"""Advisory failure channel for best-effort side effects.

Audit-log writes, last-access stamps and the auto-activation on a verified
emergency code must never fail the operation they accompany. Their failures
are reported here instead of being discarded, so operators see them in the
logs and tests can assert on them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvisoryFailure:
    operation: str
    error: BaseException
    context: dict = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AdvisoryReporter:
    """Logs advisory failures at WARNING with the traceback attached."""

    def report(self, operation: str, error: BaseException, **context: object) -> None:
        logger.warning(
            "Best-effort %s failed (%s): %s",
            operation,
            ", ".join(f"{k}={v}" for k, v in sorted(context.items())) or "no context",
            error,
            exc_info=(type(error), error, error.__traceback__),
        )


class RecordingAdvisoryReporter(AdvisoryReporter):
    """Keeps every reported failure in memory in addition to logging it."""

    def __init__(self) -> None:
        self.failures: list[AdvisoryFailure] = []

    def report(self, operation: str, error: BaseException, **context: object) -> None:
        super().report(operation, error, **context)
        self.failures.append(AdvisoryFailure(operation, error, dict(context)))

    def operations(self) -> list[str]:
        return [f.operation for f in self.failures]
