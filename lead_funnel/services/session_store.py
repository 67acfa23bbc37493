import logging
import time
from typing import Optional, Tuple

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lead_funnel.database import models
from lead_funnel.flow.controller import start_session
from lead_funnel.shared.enums import FunnelStage
from lead_funnel.shared.schemas import FlowState, LeadProfile, SessionRecord

logger = logging.getLogger(__name__)


def _column_values(record: SessionRecord) -> dict:
    """Maps record fields to form_sessions columns that keep their value on null."""
    data = record.model_dump(mode="json")
    return {
        "environment": data["environment"],
        "form_version": data["formVersion"],
        "form_filler_type": data["formFillerType"],
        "student_first_name": data["studentFirstName"],
        "student_last_name": data["studentLastName"],
        "current_grade": data["currentGrade"],
        "phone_number": data["phoneNumber"],
        "curriculum_type": data["curriculumType"],
        "grade_format": data["gradeFormat"],
        "gpa_value": data["gpaValue"],
        "percentage_value": data["percentageValue"],
        "school_name": data["schoolName"],
        "scholarship_requirement": data["scholarshipRequirement"],
        "target_geographies": data["targetGeographies"] or None,
        "parent_name": data["parentName"],
        "parent_email": data["email"],
        "selected_date": data["selectedDate"],
        "selected_slot": data["selectedSlot"],
        "counselor_assigned": data["counselorAssigned"],
        "lead_category": data["leadCategory"],
    }


async def load_session(db: AsyncSession, session_id: str) -> Optional[models.FormSession]:
    result = await db.execute(
        select(models.FormSession).where(models.FormSession.session_id == session_id)
    )
    return result.scalar_one_or_none()


def restore_session(row: models.FormSession) -> Tuple[LeadProfile, FlowState]:
    """Rebuilds the profile and flow state stored on a row."""
    profile = LeadProfile.model_validate(row.profile or {})
    if row.flow_state:
        flow_state = FlowState.model_validate(row.flow_state)
    else:
        flow_state = start_session(row.session_id)
    return profile, flow_state


def elapsed_seconds(row: models.FormSession, now: Optional[float] = None) -> float:
    if row.started_at is None:
        return 0
    now = time.time() if now is None else now
    return max(now - row.started_at, 0)


async def create_session(
    db: AsyncSession, flow_state: FlowState, environment: str
) -> models.FormSession:
    row = models.FormSession(
        session_id=flow_state.sessionId,
        environment=environment,
        started_at=time.time(),
        current_step=flow_state.currentStep.value,
        page_completed=flow_state.stepCompleted,
        funnel_stage=FunnelStage.INITIAL_CAPTURE.value,
        profile={},
        flow_state=flow_state.model_dump(mode="json"),
        triggered_events=[],
    )
    db.add(row)
    await db.commit()
    logger.info(f"Created form session {flow_state.sessionId}.")
    return row


async def claim_submission(db: AsyncSession, session_id: str) -> bool:
    """
    Atomically flags a session as submitted.

    Only the first caller gets True; concurrent or repeated submissions of
    the same session get False. The change is not committed here, so the
    caller's checkpoint commits together with it.
    """
    result = await db.execute(
        update(models.FormSession)
        .where(
            models.FormSession.session_id == session_id,
            or_(
                models.FormSession.is_submitted.is_(False),
                models.FormSession.is_submitted.is_(None),
            ),
        )
        .values(is_submitted=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def upsert_session(
    db: AsyncSession,
    record: SessionRecord,
    profile: LeadProfile,
    flow_state: FlowState,
    triggered_events: Optional[list[str]] = None,
) -> models.FormSession:
    """
    Saves a checkpoint for a session.

    Non-null record values overwrite stored ones and nulls keep what is
    already stored, page_completed never decreases and funnel_stage always
    reflects the latest checkpoint. Saving the same record twice leaves the
    row unchanged apart from updated_at.
    """
    row = await load_session(db, record.sessionId)
    if row is None:
        row = models.FormSession(
            session_id=record.sessionId, started_at=time.time(), triggered_events=[]
        )
        db.add(row)

    for column, value in _column_values(record).items():
        if value is not None:
            setattr(row, column, value)

    row.page_completed = max(row.page_completed or 0, record.stepCompleted)
    row.funnel_stage = record.funnelStage.value
    row.is_qualified_lead = record.isQualifiedLead
    row.is_counselling_booked = record.counsellingSlotPicked
    row.is_submitted = record.isSubmitted
    row.current_step = record.currentStep.value
    row.total_time_spent = record.totalTimeSpent
    row.profile = profile.model_dump(mode="json")
    row.flow_state = flow_state.model_dump(mode="json")

    if triggered_events:
        row.triggered_events = [*(row.triggered_events or []), *triggered_events]

    await db.commit()
    logger.info(
        f"Saved checkpoint for session {record.sessionId}: step={record.currentStep.value}, "
        f"category={record.leadCategory.value if record.leadCategory else None}, "
        f"funnel_stage={record.funnelStage.value}"
    )
    return row


async def mark_abandoned(
    db: AsyncSession, session_id: str, time_spent: int
) -> Optional[models.FormSession]:
    """
    Flags a session as abandoned. Submitted sessions are left untouched.
    Returns None when the session does not exist.
    """
    row = await load_session(db, session_id)
    if row is None:
        return None
    if row.is_submitted:
        logger.info(f"Session {session_id} is already submitted; not marking abandoned.")
        return row

    row.funnel_stage = FunnelStage.ABANDONED.value
    row.total_time_spent = max(time_spent, 0)
    await db.commit()
    logger.info(f"Funnel abandonment tracked for session {session_id}.")
    return row
