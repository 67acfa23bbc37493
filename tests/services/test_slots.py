import datetime

from lead_funnel.services.slots import (
    available_slots,
    counsellor_for,
    format_slot,
    is_slot_available,
    parse_slot_date,
)
from lead_funnel.shared.enums import LeadCategory

# A Monday.
MONDAY = datetime.date(2026, 10, 19)
NOW = datetime.datetime(2026, 10, 16, 9, 0)


class TestAvailableSlots:
    def test_bch_full_day(self):
        slots = available_slots(LeadCategory.BCH, MONDAY, NOW)
        assert slots == [
            "10 AM",
            "11 AM",
            "12 PM",
            "1 PM",
            "3 PM",
            "4 PM",
            "5 PM",
            "6 PM",
            "7 PM",
            "8 PM",
        ]

    def test_luminaire_hours(self):
        slots = available_slots(LeadCategory.LUM_L1, MONDAY, NOW)
        assert slots == ["11 AM", "12 PM", "1 PM", "4 PM", "5 PM", "6 PM", "7 PM", "8 PM"]

    def test_luminaire_has_no_sunday_slots(self):
        sunday = datetime.date(2026, 10, 18)
        assert available_slots(LeadCategory.LUM_L2, sunday, NOW) == []
        assert available_slots(LeadCategory.BCH, sunday, NOW) != []

    def test_today_needs_two_hours_notice(self):
        now = datetime.datetime(2026, 10, 19, 15, 30)
        assert available_slots(LeadCategory.BCH, MONDAY, now) == ["5 PM", "6 PM", "7 PM", "8 PM"]

    def test_only_the_seven_day_calendar_is_open(self):
        assert available_slots(LeadCategory.BCH, NOW.date() - datetime.timedelta(days=1), NOW) == []
        assert available_slots(LeadCategory.BCH, NOW.date() + datetime.timedelta(days=7), NOW) == []
        assert available_slots(LeadCategory.BCH, NOW.date() + datetime.timedelta(days=6), NOW) != []

    def test_masters_uses_luminaire_calendar(self):
        assert counsellor_for(LeadCategory.MASTERS_L1) == "Karthik Lakshman"
        assert counsellor_for(LeadCategory.BCH) == "Viswanathan"
        assert counsellor_for(None) == "Karthik Lakshman"


class TestFormatSlot:
    def test_labels(self):
        assert format_slot(10) == "10 AM"
        assert format_slot(12) == "12 PM"
        assert format_slot(16) == "4 PM"


class TestIsSlotAvailable:
    def test_offered_slot(self):
        assert is_slot_available(LeadCategory.BCH, "2026-10-19", "10 AM", NOW)

    def test_long_date_format(self):
        assert is_slot_available(LeadCategory.LUM_L1, "Monday, October 19, 2026", "4 PM", NOW)

    def test_luminaire_sunday_is_refused(self):
        assert not is_slot_available(LeadCategory.LUM_L1, "2026-10-18", "11 AM", NOW)

    def test_hour_outside_counsellor_calendar_is_refused(self):
        assert not is_slot_available(LeadCategory.LUM_L2, "2026-10-19", "10 AM", NOW)
        assert not is_slot_available(LeadCategory.BCH, "2026-10-19", "2 PM", NOW)

    def test_unparseable_or_missing_values_are_refused(self):
        assert not is_slot_available(LeadCategory.BCH, "next monday", "10 AM", NOW)
        assert not is_slot_available(LeadCategory.BCH, "2026-10-19", None, NOW)
        assert parse_slot_date(None) is None
