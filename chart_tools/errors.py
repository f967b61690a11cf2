"""Exception taxonomy for chart computation."""

from __future__ import annotations


class ChartToolsError(Exception):
    """Base class for every failure surfaced by chart_tools."""


class InvalidTimezone(ChartToolsError):
    """The IANA zone identifier is not known to the zone database."""

    def __init__(self, zone: str) -> None:
        super().__init__(f"Unknown timezone: {zone!r}")
        self.zone = zone


class ComputationError(ChartToolsError):
    """A required body or the house frame could not be computed."""


class OptionalBodyUnavailable(ComputationError):
    """A roster body failed; the chart is still produced without it."""

    def __init__(self, body: str, reason: str) -> None:
        super().__init__(f"{body} unavailable: {reason}")
        self.body = body
        self.reason = reason


class SolverDivergence(ChartToolsError):
    """The return solver used its whole iteration budget without converging."""

    def __init__(self, residual: float, iterations: int) -> None:
        super().__init__(
            f"Return solver did not converge after {iterations} iterations "
            f"(residual {residual:.6f}°)"
        )
        self.residual = residual
        self.iterations = iterations
