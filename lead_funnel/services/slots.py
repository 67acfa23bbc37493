import datetime
import logging
from typing import List, Optional

from lead_funnel.shared.constants import BCH_COUNSELLOR, LUMINAIRE_COUNSELLOR
from lead_funnel.shared.enums import LeadCategory

logger = logging.getLogger(__name__)

FIRST_HOUR = 10
LAST_HOUR = 20
BREAK_HOUR = 14
MIN_ADVANCE_HOURS = 2
# The booking calendar shows today and the six days after it.
CALENDAR_DAYS = 7

# The Luminaire counsellor only takes these hours, and never on Sunday.
LUMINAIRE_HOURS = frozenset([11, 12, 13, 16, 17, 18, 19, 20])

# ISO dates from the slots endpoint, long en-US dates from the booking page.
_DATE_FORMATS = ("%Y-%m-%d", "%A, %B %d, %Y")


def counsellor_for(category: Optional[LeadCategory]) -> str:
    """Counsellor shown on the booking step for a category."""
    if category == LeadCategory.BCH:
        return BCH_COUNSELLOR
    return LUMINAIRE_COUNSELLOR


def format_slot(hour: int) -> str:
    if hour == 12:
        return "12 PM"
    if hour > 12:
        return f"{hour - 12} PM"
    return f"{hour} AM"


def parse_slot_date(value: Optional[str]) -> Optional[datetime.date]:
    if not value:
        return None
    for date_format in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(value.strip(), date_format).date()
        except ValueError:
            continue
    return None


def available_slots(
    category: Optional[LeadCategory],
    day: datetime.date,
    now: datetime.datetime,
) -> List[str]:
    """
    Lists the bookable slot labels for a day.

    Args:
        category: The lead category; decides which counsellor's hours apply.
        day: The day being booked.
        now: Current local time of the booking office.

    Returns:
        Slot labels in chronological order, e.g. ["10 AM", "11 AM"]. Empty
        when the day is in the past, outside the calendar, or fully blocked.
    """
    today = now.date()
    if day < today or day >= today + datetime.timedelta(days=CALENDAR_DAYS):
        return []

    counsellor = counsellor_for(category)
    if counsellor == LUMINAIRE_COUNSELLOR and day.weekday() == 6:
        return []

    min_hour = now.hour + MIN_ADVANCE_HOURS if day == today else FIRST_HOUR

    slots = []
    for hour in range(FIRST_HOUR, LAST_HOUR + 1):
        if hour == BREAK_HOUR or hour < min_hour:
            continue
        if counsellor == LUMINAIRE_COUNSELLOR and hour not in LUMINAIRE_HOURS:
            continue
        slots.append(format_slot(hour))

    logger.debug(f"{len(slots)} slots available for {counsellor} on {day.isoformat()}.")
    return slots


def is_slot_available(
    category: Optional[LeadCategory],
    selected_date: Optional[str],
    selected_slot: Optional[str],
    now: datetime.datetime,
) -> bool:
    """Whether a picked date and slot is one available_slots would offer."""
    day = parse_slot_date(selected_date)
    if day is None or not selected_slot:
        return False
    return selected_slot.strip() in available_slots(category, day, now)
