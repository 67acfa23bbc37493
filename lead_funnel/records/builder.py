import json
import logging
from decimal import Decimal
from typing import Optional

from lead_funnel.categorization.categorizer import (
    check_category_consistency,
    get_counselor_assignment,
    is_qualified_lead,
)
from lead_funnel.config import settings
from lead_funnel.shared.constants import COUNSELLING_CATEGORIES, LUMINAIRE_COUNSELLOR
from lead_funnel.shared.enums import FunnelStage
from lead_funnel.shared.schemas import FlowState, LeadProfile, SessionRecord

logger = logging.getLogger(__name__)


def _decimal_to_str(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    return format(value.normalize(), "f")


def derive_funnel_stage(step_completed: float, is_qualified: bool) -> FunnelStage:
    if step_completed <= 1:
        return FunnelStage.INITIAL_CAPTURE
    if is_qualified:
        return FunnelStage.COUNSELING_BOOKED
    return FunnelStage.CONTACT_SUBMITTED


def build_session_record(
    profile: LeadProfile,
    flow_state: FlowState,
    elapsed_seconds: float,
    environment: Optional[str] = None,
    form_version: Optional[str] = None,
) -> SessionRecord:
    """
    Assembles the outbound record for a checkpoint.

    The builder reads no clock and no global mutable state, so identical
    inputs always produce an identical record. Fields the submitter has not
    answered yet are present with a null value.

    Args:
        profile: Answers collected so far.
        flow_state: The state after the step's decision.
        elapsed_seconds: Seconds since the session started.
        environment: Deployment label; defaults to settings.ENVIRONMENT.
        form_version: Form version label; defaults to settings.FORM_VERSION.

    Returns:
        The SessionRecord for the persistence and webhook sinks.
    """
    category = flow_state.leadCategory
    is_qualified = is_qualified_lead(category)

    if category is not None:
        errors, warnings = check_category_consistency(profile, category)
        if errors or warnings:
            logger.warning(
                f"Lead category consistency check for session {flow_state.sessionId}: "
                f"errors={errors}, warnings={warnings}"
            )

    books_counselling = category in COUNSELLING_CATEGORIES
    slot_picked = books_counselling and bool(
        profile.selectedDate and profile.selectedSlot
    )
    counselor = get_counselor_assignment(category)
    if counselor is None and slot_picked:
        # Masters bookings are taken by the Luminaire counsellor.
        counselor = LUMINAIRE_COUNSELLOR

    return SessionRecord(
        sessionId=flow_state.sessionId,
        environment=environment or settings.ENVIRONMENT,
        formVersion=form_version or settings.FORM_VERSION,
        formFillerType=profile.formFillerType,
        studentFirstName=profile.studentFirstName,
        studentLastName=profile.studentLastName,
        parentName=profile.parentName,
        email=profile.email,
        phoneNumber=profile.phoneNumber,
        currentGrade=profile.currentGrade,
        curriculumType=profile.curriculumType,
        gradeFormat=profile.gradeFormat,
        gpaValue=_decimal_to_str(profile.gpaValue),
        percentageValue=_decimal_to_str(profile.percentageValue),
        schoolName=profile.schoolName,
        scholarshipRequirement=profile.scholarshipRequirement,
        targetGeographies=sorted(profile.targetGeographies, key=lambda g: g.value),
        applicationPreparation=profile.applicationPreparation,
        targetUniversities=profile.targetUniversities,
        supportLevel=profile.supportLevel,
        intake=profile.intake,
        graduationStatus=profile.graduationStatus,
        workExperience=profile.workExperience,
        entranceExam=profile.entranceExam,
        examScore=profile.examScore,
        fieldOfStudy=profile.fieldOfStudy,
        partialFundingApproach=profile.partialFundingApproach,
        strongProfileIntent=profile.strongProfileIntent,
        selectedDate=profile.selectedDate if books_counselling else None,
        selectedSlot=profile.selectedSlot if books_counselling else None,
        counsellingSlotPicked=slot_picked,
        counselorAssigned=counselor,
        leadCategory=category,
        currentStep=flow_state.currentStep,
        stepCompleted=flow_state.stepCompleted,
        isSubmitted=flow_state.isSubmitted,
        isQualifiedLead=is_qualified,
        funnelStage=derive_funnel_stage(flow_state.stepCompleted, is_qualified),
        totalTimeSpent=max(int(elapsed_seconds), 0),
    )


def serialize_session_record(record: SessionRecord) -> bytes:
    """Canonical JSON encoding: sorted keys, compact separators, UTF-8."""
    return json.dumps(
        record.model_dump(mode="json"),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
