"""Exception taxonomy for the observing engine."""


class AstrosyoError(Exception):
    """Base exception for Astrosyo errors."""


class InputContractViolation(AstrosyoError, ValueError):
    """Raised when a caller hands the engine malformed input.

    Covers out-of-range positions, empty or length-mismatched forecast series,
    missing or unknown time zones and naive datetimes. Never coerced, never
    swallowed by the engine.
    """


class ForecastUnavailable(AstrosyoError):
    """Raised when the forecast provider cannot be reached or answers badly."""
