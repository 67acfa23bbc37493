"""
Meta Pixel event names for the classification facts of a step.

The flow only reports what it decided (an AnalyticsFact); this module turns
that into the campaign event names the ads account is configured with. The
names carry an environment suffix so staging traffic never pollutes the
production audiences.
"""
import logging
from typing import List, Optional

from lead_funnel.config import settings
from lead_funnel.shared.enums import EventTrigger, FormFillerType, LeadCategory
from lead_funnel.shared.schemas import AnalyticsFact

logger = logging.getLogger(__name__)

_CATEGORY_TAGS = {
    LeadCategory.BCH: "bch",
    LeadCategory.LUM_L1: "lum_l1",
    LeadCategory.LUM_L2: "lum_l2",
}

_STAGE_SUFFIXES = {
    EventTrigger.STEP1_COMPLETE: "page_1_continue",
    EventTrigger.STEP2_COMPLETE: "page_2_submit",
}


def event_name(base: str, environment: Optional[str] = None) -> str:
    environment = environment or settings.ENVIRONMENT
    return f"{settings.META_PIXEL_EVENT_PREFIX}_{base}_{environment}"


def _classification_events(fact: AnalyticsFact) -> List[str]:
    events = []
    if fact.formFillerType == FormFillerType.PARENT:
        if fact.isSpam:
            events.append("spam_prnt")
        else:
            events.append("prnt_event")
            if fact.isQualified:
                events.extend(["qualfd_prnt", "qualfd_prnt_page_1_continue"])
            else:
                events.append("disqualfd_prnt")
    elif fact.formFillerType == FormFillerType.STUDENT:
        events.append("stdnt")
        if fact.isSpam:
            events.extend(["spam_stdnt", "disqualfd_stdnt"])
        elif fact.wouldQualifyAsParent:
            events.extend(["qualfd_stdnt", "qualfd_stdnt_page_1_continue"])
        else:
            events.append("disqualfd_stdnt")
    return events


def _settles_category(fact: AnalyticsFact) -> bool:
    """
    Classification events fire once, on the step whose category is final:
    academic details for most leads, the first page for dropped ones.
    """
    if fact.eventTrigger == EventTrigger.STEP2_COMPLETE:
        return True
    return (
        fact.eventTrigger == EventTrigger.STEP1_COMPLETE
        and fact.leadCategory == LeadCategory.DROP
    )


def _stage_events(fact: AnalyticsFact, stage: str) -> List[str]:
    events = [stage]
    tag = _CATEGORY_TAGS.get(fact.leadCategory)
    if tag:
        events.append(f"{tag}_{stage}")
    # Stage 1 qualified events are part of the classification set.
    if stage != "page_1_continue":
        if fact.formFillerType == FormFillerType.PARENT and fact.isQualified:
            events.append(f"qualfd_prnt_{stage}")
        if fact.formFillerType == FormFillerType.STUDENT and fact.wouldQualifyAsParent:
            events.append(f"qualfd_stdnt_{stage}")
    return events


def events_for(
    fact: Optional[AnalyticsFact], submitted: bool, environment: Optional[str] = None
) -> List[str]:
    """
    Lists the pixel events a step fires.

    Args:
        fact: Classification facts of the accepted step, or None.
        submitted: Whether the step finished the form.
        environment: Suffix for the names; defaults to settings.ENVIRONMENT.
    """
    if fact is None:
        return []

    bases = []
    if _settles_category(fact):
        bases.extend(_classification_events(fact))
    stage = _STAGE_SUFFIXES.get(fact.eventTrigger)
    if stage:
        bases.extend(_stage_events(fact, stage))
    if submitted:
        bases.extend(_stage_events(fact, "form_complete"))

    names = [event_name(base, environment) for base in bases]
    logger.debug(f"Pixel events for {fact.eventTrigger.value}: {names}")
    return names
