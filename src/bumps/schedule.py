"""Pure bump scheduling rules shared by activation and the scheduler tick.

Nothing here touches the database: callers load the ORM rows, convert them
with ``ScheduleState.from_model`` / ``AdState.from_model``, and write the
returned states back with ``apply_to``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

from src.errors import BumpValidationError
from src.models.base import utcnow
from src.models.vehicle_ad import PROMOTION_BOOSTED, PROMOTION_NONE

_INT_PATTERN = re.compile(r"^\s*[+-]?\d+\s*$")

__all__ = [
    "AdState",
    "ScheduleState",
    "advance_schedule",
    "deactivate_schedule",
    "parse_positive_int",
    "parse_start_at",
    "plan_activation",
    "utcnow",
]


@dataclass(frozen=True)
class ScheduleState:
    remaining_bumps: int
    interval_hours: int
    next_bump_time: Optional[datetime] = None
    last_bump_time: Optional[datetime] = None
    is_active: bool = True

    @classmethod
    def from_model(cls, schedule) -> "ScheduleState":
        return cls(
            remaining_bumps=schedule.remaining_bumps,
            interval_hours=schedule.interval_hours,
            next_bump_time=schedule.next_bump_time,
            last_bump_time=schedule.last_bump_time,
            is_active=schedule.is_active,
        )

    def apply_to(self, schedule) -> None:
        schedule.remaining_bumps = self.remaining_bumps
        schedule.interval_hours = self.interval_hours
        schedule.next_bump_time = self.next_bump_time
        schedule.last_bump_time = self.last_bump_time
        schedule.is_active = self.is_active


@dataclass(frozen=True)
class AdState:
    promotion: int
    bumped_at: datetime

    @classmethod
    def from_model(cls, ad) -> "AdState":
        return cls(promotion=ad.promotion, bumped_at=ad.created_at)

    def apply_to(self, ad) -> None:
        ad.promotion = self.promotion
        ad.created_at = self.bumped_at


def advance_schedule(
    schedule: ScheduleState, ad: AdState, now: datetime
) -> Tuple[ScheduleState, AdState]:
    """Apply one bump at ``now``.

    The ad's freshness timestamp moves to ``now`` and one bump is consumed.
    When that was the last bump the ad loses its promotion and the schedule
    goes inactive; otherwise the next bump is due ``interval_hours`` later.
    """
    remaining = max(schedule.remaining_bumps - 1, 0)

    bumped_ad = replace(ad, bumped_at=now)
    if remaining == 0:
        bumped_ad = replace(bumped_ad, promotion=PROMOTION_NONE)
        next_bump_time = None
    else:
        next_bump_time = now + timedelta(hours=schedule.interval_hours)

    advanced = replace(
        schedule,
        remaining_bumps=remaining,
        last_bump_time=now,
        next_bump_time=next_bump_time,
        is_active=remaining > 0,
    )
    return advanced, bumped_ad


def deactivate_schedule(schedule: ScheduleState) -> ScheduleState:
    return replace(schedule, is_active=False, remaining_bumps=0, next_bump_time=None)


def plan_activation(
    ad: AdState,
    remaining_bumps: int,
    interval_hours: int,
    start_at: Optional[datetime],
    now: datetime,
    promote_on_schedule: bool = True,
) -> Tuple[ScheduleState, AdState, bool]:
    """Work out the schedule and ad state for a new activation.

    Returns ``(schedule, ad, immediate)``. Without ``start_at``, or with one
    at or before ``now``, the first bump is applied right away.
    """
    first_bump_time = now if start_at is None else start_at
    immediate = start_at is None or first_bump_time <= now

    pending = ScheduleState(
        remaining_bumps=remaining_bumps,
        interval_hours=interval_hours,
        next_bump_time=first_bump_time,
        last_bump_time=None,
        is_active=True,
    )

    if immediate:
        schedule, new_ad = advance_schedule(pending, ad, now)
        promotion = PROMOTION_BOOSTED if schedule.remaining_bumps > 0 else PROMOTION_NONE
        return schedule, replace(new_ad, promotion=promotion), True

    if promote_on_schedule:
        ad = replace(ad, promotion=PROMOTION_BOOSTED)
    return pending, ad, False


def parse_positive_int(value: Any, field: str, maximum: Optional[int] = None) -> int:
    """Accept ints, integral floats and digit strings in ``1..maximum``."""
    parsed = None
    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    elif isinstance(value, str) and _INT_PATTERN.match(value):
        parsed = int(value)

    if parsed is None or parsed <= 0:
        raise BumpValidationError(f"{field} must be a positive integer")
    if maximum is not None and parsed > maximum:
        raise BumpValidationError(f"{field} must not exceed {maximum}")
    return parsed


def parse_start_at(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 ``startAt`` into naive UTC, or None when absent."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise BumpValidationError("Invalid startAt datetime")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise BumpValidationError("Invalid startAt datetime") from None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
