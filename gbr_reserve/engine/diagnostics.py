"""Calculation diagnostics.

A ``Diagnostics`` object is handed explicitly to every engine call that wants
tracing or needs to surface non-fatal anomalies (a clamped rate, a tax table
that is not monotone). There is no module-level debug switch: two callers can
calculate side by side with different settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from gbr_reserve.core.logging import get_logger


@dataclass(frozen=True)
class CalculationWarning:
    """Non-fatal anomaly detected during a calculation.

    Attributes:
        code: Stable machine-readable identifier (e.g. "marginal_rate_capped").
        message: Human-readable explanation.
        context: Values that triggered the warning, stringified.
    """

    code: str
    message: str
    context: dict[str, str] = field(default_factory=dict)


class Diagnostics:
    """Collects warnings and optionally traces intermediate values."""

    def __init__(
        self,
        *,
        debug: bool = False,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.debug = debug
        self._logger = logger or get_logger("gbr_reserve.engine")
        self._warnings: list[CalculationWarning] = []

    @property
    def warnings(self) -> tuple[CalculationWarning, ...]:
        return tuple(self._warnings)

    def trace(self, event: str, **fields: object) -> None:
        """Log an intermediate value when debug tracing is enabled."""
        if self.debug:
            self._logger.debug(event, **fields)

    def warn(self, code: str, message: str, **fields: object) -> CalculationWarning:
        """Record and log a warning."""
        warning = CalculationWarning(
            code=code,
            message=message,
            context={key: str(value) for key, value in fields.items()},
        )
        self._warnings.append(warning)
        self._logger.warning(code, detail=message, **fields)
        return warning
