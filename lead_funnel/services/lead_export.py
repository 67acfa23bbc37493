import logging
from typing import List, Optional

from lead_funnel.config import settings
from lead_funnel.services.google_sheets import GoogleSheetsService
from lead_funnel.shared.schemas import SessionRecord

logger = logging.getLogger(__name__)

# Column order of the LEADS worksheet.
SHEET_COLUMNS = (
    "sessionId",
    "environment",
    "formVersion",
    "formFillerType",
    "studentFirstName",
    "studentLastName",
    "parentName",
    "email",
    "phoneNumber",
    "currentGrade",
    "curriculumType",
    "gpaValue",
    "percentageValue",
    "schoolName",
    "scholarshipRequirement",
    "targetGeographies",
    "partialFundingApproach",
    "selectedDate",
    "selectedSlot",
    "counselorAssigned",
    "leadCategory",
    "isQualifiedLead",
    "funnelStage",
    "totalTimeSpent",
)


def record_to_row(record: SessionRecord) -> List[str]:
    """Flattens a record into sheet cells; missing values become empty cells."""
    data = record.model_dump(mode="json")
    row = []
    for column in SHEET_COLUMNS:
        value = data.get(column)
        if value is None:
            row.append("")
        elif isinstance(value, list):
            row.append(", ".join(value))
        elif isinstance(value, bool):
            row.append("TRUE" if value else "FALSE")
        else:
            row.append(str(value))
    return row


def write_lead_to_sheet(
    record: SessionRecord, sheets_service: Optional[GoogleSheetsService]
) -> bool:
    """Appends one row for a submitted lead to the export worksheet."""
    if not sheets_service or not settings.GOOGLE_SHEET_ID_EXPORT:
        logger.warning(
            f"Google Sheets export is not configured; skipping export for session {record.sessionId}."
        )
        return False

    worksheet = sheets_service.get_worksheet(
        settings.GOOGLE_SHEET_ID_EXPORT, settings.GOOGLE_SHEET_WORKSHEET_NAME
    )
    if not worksheet:
        logger.error(
            f"Could not access worksheet '{settings.GOOGLE_SHEET_WORKSHEET_NAME}' for lead export."
        )
        return False

    try:
        sheets_service.append_row(worksheet, record_to_row(record))
        logger.info(f"Exported session {record.sessionId} to Google Sheets.")
        return True
    except Exception as e:
        logger.error(
            f"Failed to export session {record.sessionId} to Google Sheets: {e}",
            exc_info=True,
        )
        return False
