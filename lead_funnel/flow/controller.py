"""
Form flow state machine.

Every reducer takes the current FlowState and the merged LeadProfile and
returns a FlowDecision. A decision with accepted=False carries the state it
was given, unchanged: calls on a submitted session or on the wrong step are
no-ops so the front end can safely double-fire.
"""
import logging
from typing import Optional

from lead_funnel.categorization.categorizer import (
    categorize,
    is_extended_nurture_candidate,
    is_qualified_lead,
    is_spam_lead,
    recategorize_after_extended_nurture,
    would_student_qualify_as_parent,
)
from lead_funnel.shared.constants import COUNSELLING_CATEGORIES
from lead_funnel.shared.enums import EventTrigger, FormFillerType, Grade, LeadCategory
from lead_funnel.shared.schemas import AnalyticsFact, FlowDecision, FlowState, LeadProfile
from lead_funnel.shared.state import AcademicVariant, FlowStep

logger = logging.getLogger(__name__)


def start_session(session_id: str) -> FlowState:
    return FlowState(sessionId=session_id)


def _rejected(state: FlowState, action: str) -> FlowDecision:
    reason = "already submitted" if state.isSubmitted else f"at {state.currentStep.value}"
    logger.info(f"Ignoring {action} for session {state.sessionId}: {reason}.")
    return FlowDecision(accepted=False, state=state)


def _fact(
    trigger: EventTrigger, profile: LeadProfile, category: Optional[LeadCategory]
) -> AnalyticsFact:
    is_student = profile.formFillerType == FormFillerType.STUDENT
    return AnalyticsFact(
        eventTrigger=trigger,
        leadCategory=category,
        formFillerType=profile.formFillerType,
        isSpam=is_spam_lead(profile),
        isQualified=is_qualified_lead(category),
        wouldQualifyAsParent=is_student and would_student_qualify_as_parent(profile),
    )


def _advance(
    state: FlowState,
    step: FlowStep,
    category: Optional[LeadCategory],
    completed: float,
    **changes,
) -> FlowState:
    return state.model_copy(
        update={
            "currentStep": step,
            "leadCategory": category,
            "stepCompleted": max(state.stepCompleted, completed),
            "isSubmitted": step == FlowStep.SUBMITTED,
            **changes,
        }
    )


def complete_step1(state: FlowState, profile: LeadProfile) -> FlowDecision:
    """
    Routes the submitter after the initial capture page.

    Grade 7 or below is dropped and submitted at once. Everyone else moves
    to the academic details page, in its masters variant for masters
    applicants. A provisional category is computed from whatever answers are
    already present.
    """
    if state.isSubmitted or state.currentStep != FlowStep.STEP_1:
        return _rejected(state, "step 1 completion")

    completed = FlowStep.STEP_1.number

    if profile.currentGrade == Grade.SEVEN_OR_BELOW:
        new_state = _advance(state, FlowStep.SUBMITTED, LeadCategory.DROP, completed)
        return FlowDecision(
            accepted=True,
            state=new_state,
            submit=True,
            analytics=_fact(EventTrigger.STEP1_COMPLETE, profile, LeadCategory.DROP),
        )

    variant = (
        AcademicVariant.MASTERS
        if profile.currentGrade == Grade.MASTERS
        else AcademicVariant.REGULAR
    )
    category = categorize(profile)
    new_state = _advance(
        state,
        FlowStep.STEP_2_ACADEMIC,
        category,
        completed,
        academicVariant=variant,
    )
    return FlowDecision(
        accepted=True,
        state=new_state,
        analytics=_fact(EventTrigger.STEP1_COMPLETE, profile, category),
    )


def complete_step2(state: FlowState, profile: LeadProfile) -> FlowDecision:
    """
    Categorizes the lead from scratch and routes it after academic details.

    Students are always submitted here. Parent-filled grade 11-12 nurture
    leads go to the extended nurture step, other nurture leads are
    submitted, and every counselling category goes to slot booking. Both
    non-terminal routes show the evaluation animation first.
    """
    if state.isSubmitted or state.currentStep != FlowStep.STEP_2_ACADEMIC:
        return _rejected(state, "step 2 completion")

    completed = FlowStep.STEP_2_ACADEMIC.number
    category = categorize(profile)
    analytics = _fact(EventTrigger.STEP2_COMPLETE, profile, category)

    if profile.formFillerType == FormFillerType.STUDENT:
        next_step = FlowStep.SUBMITTED
    elif is_extended_nurture_candidate(profile, category):
        next_step = FlowStep.STEP_2_5_EXTENDED_NURTURE
    elif category in COUNSELLING_CATEGORIES:
        next_step = FlowStep.STEP_3_COUNSELLING
    else:
        next_step = FlowStep.SUBMITTED

    new_state = _advance(state, next_step, category, completed)
    return FlowDecision(
        accepted=True,
        state=new_state,
        submit=new_state.isSubmitted,
        showEvaluation=not new_state.isSubmitted,
        analytics=analytics,
    )


def complete_extended_nurture(state: FlowState, profile: LeadProfile) -> FlowDecision:
    if state.isSubmitted or state.currentStep != FlowStep.STEP_2_5_EXTENDED_NURTURE:
        return _rejected(state, "extended nurture completion")

    current = state.leadCategory or LeadCategory.NURTURE
    category = recategorize_after_extended_nurture(profile, current)
    next_step = (
        FlowStep.SUBMITTED
        if category == LeadCategory.NURTURE
        else FlowStep.STEP_3_COUNSELLING
    )
    new_state = _advance(
        state, next_step, category, FlowStep.STEP_2_5_EXTENDED_NURTURE.number
    )
    return FlowDecision(
        accepted=True,
        state=new_state,
        submit=new_state.isSubmitted,
        analytics=_fact(EventTrigger.EXTENDED_NURTURE_COMPLETE, profile, category),
    )


def complete_counselling(state: FlowState, profile: LeadProfile) -> FlowDecision:
    """Submits the lead once a counselling date and slot have been picked."""
    if state.isSubmitted or state.currentStep != FlowStep.STEP_3_COUNSELLING:
        return _rejected(state, "counselling completion")

    if not (profile.selectedDate and profile.selectedSlot):
        logger.info(
            f"Counselling completion for session {state.sessionId} has no slot selected."
        )
        return FlowDecision(accepted=False, state=state)

    new_state = _advance(
        state,
        FlowStep.SUBMITTED,
        state.leadCategory,
        FlowStep.STEP_3_COUNSELLING.number,
    )
    return FlowDecision(
        accepted=True,
        state=new_state,
        submit=True,
        analytics=_fact(EventTrigger.STEP3_COMPLETE, profile, state.leadCategory),
    )


def go_back(state: FlowState) -> FlowDecision:
    """
    Returns from academic details to the first page. The profile is kept as
    is; the category will be recomputed on the next advance.
    """
    if state.isSubmitted or state.currentStep != FlowStep.STEP_2_ACADEMIC:
        return _rejected(state, "back navigation")

    new_state = state.model_copy(update={"currentStep": FlowStep.STEP_1})
    return FlowDecision(accepted=True, state=new_state)
