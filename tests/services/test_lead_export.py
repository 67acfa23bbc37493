from unittest.mock import Mock

from lead_funnel.config import settings
from lead_funnel.records.builder import build_session_record
from lead_funnel.services.lead_export import (
    SHEET_COLUMNS,
    record_to_row,
    write_lead_to_sheet,
)
from lead_funnel.shared.enums import LeadCategory
from lead_funnel.shared.schemas import FlowState, LeadProfile
from lead_funnel.shared.state import FlowStep


def _record():
    profile = LeadProfile.from_answers(
        {
            "formFillerType": "parent",
            "currentGrade": "11",
            "scholarshipRequirement": "partial_scholarship",
            "targetGeographies": ["UK", "Rest of World"],
            "selectedDate": "2026-10-20",
            "selectedSlot": "4 PM",
        }
    )
    state = FlowState(
        sessionId="sheet-session",
        currentStep=FlowStep.SUBMITTED,
        leadCategory=LeadCategory.LUM_L2,
        stepCompleted=3,
        isSubmitted=True,
    )
    return build_session_record(profile, state, 200, "test", "v8.0")


class TestRecordToRow:
    def test_row_follows_sheet_columns(self):
        row = record_to_row(_record())
        cells = dict(zip(SHEET_COLUMNS, row))

        assert len(row) == len(SHEET_COLUMNS)
        assert cells["sessionId"] == "sheet-session"
        assert cells["targetGeographies"] == "Rest of World, UK"
        assert cells["counselorAssigned"] == "Karthik Lakshman"
        assert cells["isQualifiedLead"] == "TRUE"
        assert cells["studentFirstName"] == ""
        assert cells["totalTimeSpent"] == "200"


class TestWriteLeadToSheet:
    def test_skipped_without_service(self, monkeypatch):
        monkeypatch.setattr(settings, "GOOGLE_SHEET_ID_EXPORT", "sheet-id")
        assert write_lead_to_sheet(_record(), None) is False

    def test_appends_row(self, monkeypatch):
        monkeypatch.setattr(settings, "GOOGLE_SHEET_ID_EXPORT", "sheet-id")
        service = Mock()
        worksheet = service.get_worksheet.return_value

        assert write_lead_to_sheet(_record(), service) is True
        service.get_worksheet.assert_called_once_with(
            "sheet-id", settings.GOOGLE_SHEET_WORKSHEET_NAME
        )
        service.append_row.assert_called_once()
        assert service.append_row.call_args.args[0] is worksheet

    def test_missing_worksheet(self, monkeypatch):
        monkeypatch.setattr(settings, "GOOGLE_SHEET_ID_EXPORT", "sheet-id")
        service = Mock()
        service.get_worksheet.return_value = None
        assert write_lead_to_sheet(_record(), service) is False
        service.append_row.assert_not_called()

    def test_append_failure_is_reported(self, monkeypatch):
        monkeypatch.setattr(settings, "GOOGLE_SHEET_ID_EXPORT", "sheet-id")
        service = Mock()
        service.append_row.side_effect = RuntimeError("quota exceeded")
        assert write_lead_to_sheet(_record(), service) is False
