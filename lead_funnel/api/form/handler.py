import datetime
import enum
import logging
from typing import Any, Mapping, Optional, Tuple

from lead_funnel.flow.controller import (
    complete_counselling,
    complete_extended_nurture,
    complete_step1,
    complete_step2,
    go_back,
)
from lead_funnel.services.slots import is_slot_available
from lead_funnel.shared.schemas import FlowDecision, FlowState, LeadProfile

logger = logging.getLogger(__name__)


class FormAction(str, enum.Enum):
    STEP_1 = "step_1"
    STEP_2 = "step_2"
    EXTENDED_NURTURE = "extended_nurture"
    COUNSELLING = "counselling"
    BACK = "back"


_REDUCERS = {
    FormAction.STEP_1: complete_step1,
    FormAction.STEP_2: complete_step2,
    FormAction.EXTENDED_NURTURE: complete_extended_nurture,
    FormAction.COUNSELLING: complete_counselling,
    FormAction.BACK: lambda state, profile: go_back(state),
}


def handle_form_action(
    action: FormAction,
    current_state: FlowState,
    profile: LeadProfile,
    answers: Mapping[str, Any],
    now: Optional[datetime.datetime] = None,
) -> Tuple[FlowDecision, LeadProfile]:
    """
    Applies one submitted step to a session.

    Args:
        action: Which step the client submitted.
        current_state: The stored flow state of the session.
        profile: The stored answers of the session.
        answers: The answers sent with this step; None values are ignored.
        now: Current local time, used to check counselling slots. Defaults
            to the system clock.

    Returns:
        A tuple containing:
        - The reducer's decision.
        - The profile to store: the merged answers when the step was
          accepted, otherwise the stored profile unchanged.
    """
    merged = profile.merge(answers)
    decision = _REDUCERS[action](current_state, merged)
    if not decision.accepted:
        return decision, profile

    if action == FormAction.COUNSELLING and not is_slot_available(
        current_state.leadCategory,
        merged.selectedDate,
        merged.selectedSlot,
        now or datetime.datetime.now(),
    ):
        logger.info(
            f"Session {current_state.sessionId}: slot {merged.selectedSlot!r} on "
            f"{merged.selectedDate!r} is not bookable."
        )
        return FlowDecision(accepted=False, state=current_state), profile

    logger.info(
        f"Session {current_state.sessionId}: {action.value} moved "
        f"{current_state.currentStep.value} -> {decision.state.currentStep.value}"
    )
    return decision, merged
