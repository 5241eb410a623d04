"""Parsing of ISO 8601 instants and date-range bounds."""

from datetime import date, datetime, time, timedelta, timezone

from buildops.services.errors import ValidationFailedError


def parse_instant(value: datetime | str, field: str = "date") -> datetime:
    """Parse an ISO 8601 instant into an aware UTC datetime.

    Naive values (no offset) are taken as UTC. A trailing ``Z`` is accepted.

    Raises:
        ValidationFailedError: If the value is not a valid ISO 8601 instant
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationFailedError(f"{field} must be a valid ISO 8601 datetime") from e
    else:
        raise ValidationFailedError(f"{field} must be a valid ISO 8601 datetime")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _is_date_only(value: str) -> bool:
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def parse_range_bounds(
    start_from: datetime | str | None,
    start_to: datetime | str | None,
) -> tuple[datetime | None, datetime | None, bool]:
    """Parse an optional ``[from, to]`` filter on period start dates.

    A date-only upper bound such as ``2024-12-31`` covers that whole day, so
    it is turned into an exclusive bound at the next midnight.

    Returns:
        (lower bound, upper bound, whether the upper bound is inclusive)

    Raises:
        ValidationFailedError: If a bound is malformed or ``from`` is after ``to``
    """
    lower = parse_instant(start_from, "from") if start_from is not None else None

    upper = None
    upper_inclusive = True
    if start_to is not None:
        if isinstance(start_to, str) and _is_date_only(start_to):
            day = date.fromisoformat(start_to.strip())
            upper = datetime.combine(day + timedelta(days=1), time.min, tzinfo=timezone.utc)
            upper_inclusive = False
        else:
            upper = parse_instant(start_to, "to")

    if lower is not None and upper is not None and lower > upper:
        raise ValidationFailedError("from must not be after to")

    return lower, upper, upper_inclusive


__all__ = ["parse_instant", "parse_range_bounds"]
