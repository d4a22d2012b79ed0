"""Topocentric altitude of equatorial coordinates for an observer and instant.

Sidereal time follows the low-precision GMST expression (good to a fraction of
a second over decades); catalog coordinates are used as given, without
precession or nutation, which keeps altitudes within a few tenths of a degree
of full ephemeris reductions.
"""

from __future__ import annotations

import datetime as dt
import math
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from astrosyo.domain import GeoPosition, RefractionMode
from astrosyo.errors import InputContractViolation
from astrosyo.numeric import is_finite_number

J2000_JD = 2451545.0


def resolve_instant(timestamp: str, timezone: str | None) -> dt.datetime:
    """Interpret a forecast wall-clock string as local time in `timezone`.

    Returns an aware UTC datetime. A timestamp carrying its own UTC offset is
    converted directly; otherwise the zone is required and must be known.
    """
    try:
        parsed = dt.datetime.fromisoformat(timestamp)
    except (TypeError, ValueError) as exc:
        raise InputContractViolation(f"Unparseable timestamp: {timestamp!r}") from exc

    if parsed.tzinfo is None:
        if not timezone or not timezone.strip():
            raise InputContractViolation(
                f"Timestamp {timestamp!r} has no offset and no time zone was supplied"
            )
        try:
            tz = ZoneInfo(timezone.strip())
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InputContractViolation(f"Unknown time zone: {timezone!r}") from exc
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(dt.timezone.utc)


def _require_aware(instant: dt.datetime) -> dt.datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise InputContractViolation("Instant must be timezone-aware")
    return instant.astimezone(dt.timezone.utc)


def julian_date(instant: dt.datetime) -> float:
    """Julian date of an aware datetime."""
    utc = _require_aware(instant)
    year = utc.year
    month = utc.month
    day = utc.day + (
        utc.hour + (utc.minute + (utc.second + utc.microsecond / 1e6) / 60.0) / 60.0
    ) / 24.0
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5


def gmst_deg(instant: dt.datetime) -> float:
    """Greenwich mean sidereal time in degrees, [0, 360)."""
    d = julian_date(instant) - J2000_JD
    gmst_hours = (18.697374558 + 24.06570982441908 * d) % 24.0
    return (gmst_hours * 15.0) % 360.0


def local_sidereal_time_deg(instant: dt.datetime, longitude_deg: float) -> float:
    """Local mean sidereal time in degrees for an east-positive longitude."""
    return (gmst_deg(instant) + longitude_deg) % 360.0


def refraction_deg(altitude_deg: float, mode: RefractionMode | str = RefractionMode.NORMAL) -> float:
    """Refraction lift (degrees) to add to a geometric altitude.

    "normal" uses Saemundsson's bulk formula, holding the argument at -1 deg
    below the horizon and tapering the correction to zero at the nadir.
    """
    mode = _coerce_mode(mode)
    if mode is RefractionMode.NONE:
        return 0.0
    if altitude_deg < -90.0 or altitude_deg > 90.0:
        return 0.0
    hd = max(altitude_deg, -1.0)
    refr = (1.02 / math.tan(math.radians(hd + 10.3 / (hd + 5.11)))) / 60.0
    if altitude_deg < -1.0:
        refr *= (altitude_deg + 90.0) / 89.0
    return refr


def altitude(
    position: GeoPosition,
    instant: dt.datetime,
    ra_deg: float,
    dec_deg: float,
    refraction: RefractionMode | str = RefractionMode.NORMAL,
) -> float:
    """Apparent altitude (degrees) of (ra_deg, dec_deg) seen from `position` at `instant`."""
    if not isinstance(position, GeoPosition):
        raise InputContractViolation(f"Expected GeoPosition, got {type(position).__name__}")
    if not (is_finite_number(ra_deg) and is_finite_number(dec_deg)):
        raise InputContractViolation(f"Non-finite coordinates: ra={ra_deg!r} dec={dec_deg!r}")
    if not -90.0 <= dec_deg <= 90.0:
        raise InputContractViolation(f"Declination out of range: {dec_deg}")
    mode = _coerce_mode(refraction)

    lst = local_sidereal_time_deg(instant, position.longitude)
    ha = math.radians((lst - ra_deg) % 360.0)
    lat = math.radians(position.latitude)
    dec = math.radians(dec_deg)
    sin_alt = math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(ha)
    alt = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))
    return alt + refraction_deg(alt, mode)


def _coerce_mode(mode: RefractionMode | str) -> RefractionMode:
    try:
        return RefractionMode(mode)
    except ValueError as exc:
        raise InputContractViolation(f"Unknown refraction mode: {mode!r}") from exc
