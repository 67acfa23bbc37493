"""
Deterministic lead categorization.

Rules are evaluated as a priority list and the first match wins. Any answer
the rules cannot interpret simply fails to match; no rule raises.
"""
import logging
from typing import Optional

from lead_funnel.shared.constants import (
    BCH_COUNSELLOR,
    BCH_GRADES,
    EXTENDED_NURTURE_GRADES,
    LUMINAIRE_COUNSELLOR,
    LUMINAIRE_GEOGRAPHIES,
    QUALIFIED_CATEGORIES,
    SPAM_GPA_VALUE,
    SPAM_PERCENTAGE_VALUE,
)
from lead_funnel.shared.enums import (
    ApplicationPreparation,
    FormFillerType,
    Geography,
    Grade,
    LeadCategory,
    PartialFundingApproach,
    ScholarshipRequirement,
    TargetUniversities,
)
from lead_funnel.shared.schemas import LeadProfile

logger = logging.getLogger(__name__)

_OPTIONAL_OR_PARTIAL = frozenset(
    {ScholarshipRequirement.OPTIONAL, ScholarshipRequirement.PARTIAL}
)
_MASTERS_L2_TARGETS = frozenset(
    {TargetUniversities.TOP_50_100, TargetUniversities.PARTNER_UNIVERSITY}
)
_FUNDING_APPROACHES_FOR_LUM_L2 = frozenset(
    {
        PartialFundingApproach.ACCEPT_LOANS,
        PartialFundingApproach.AFFORDABLE_ALTERNATIVES,
    }
)


def is_spam_lead(profile: LeadProfile) -> bool:
    """A perfect GPA or percentage is treated as a junk submission."""
    return (
        profile.gpaValue is not None and profile.gpaValue == SPAM_GPA_VALUE
    ) or (
        profile.percentageValue is not None
        and profile.percentageValue == SPAM_PERCENTAGE_VALUE
    )


def is_qualified_lead(category: Optional[LeadCategory]) -> bool:
    return category in QUALIFIED_CATEGORIES


def get_counselor_assignment(category: Optional[LeadCategory]) -> Optional[str]:
    """Returns the counsellor recorded against a qualified lead, if any."""
    if category == LeadCategory.BCH:
        return BCH_COUNSELLOR
    if category in (LeadCategory.LUM_L1, LeadCategory.LUM_L2):
        return LUMINAIRE_COUNSELLOR
    return None


def _label(value) -> str:
    return getattr(value, "value", str(value))


def _targets_luminaire_geography(profile: LeadProfile) -> bool:
    return bool(profile.targetGeographies & LUMINAIRE_GEOGRAPHIES)


def _segment_category(profile: LeadProfile) -> Optional[LeadCategory]:
    """
    Applies the grade based BCH and Luminaire rules. Returns None when no
    segment rule matches.
    """
    grade = profile.currentGrade
    scholarship = profile.scholarshipRequirement

    # BCH
    if grade in BCH_GRADES and scholarship in _OPTIONAL_OR_PARTIAL:
        return LeadCategory.BCH
    if (
        grade == Grade.ELEVEN
        and scholarship in _OPTIONAL_OR_PARTIAL
        and Geography.US in profile.targetGeographies
    ):
        return LeadCategory.BCH

    # Luminaire L1
    if scholarship == ScholarshipRequirement.OPTIONAL:
        if grade == Grade.ELEVEN and _targets_luminaire_geography(profile):
            return LeadCategory.LUM_L1
        if grade == Grade.TWELVE:
            return LeadCategory.LUM_L1

    # Luminaire L2
    if scholarship == ScholarshipRequirement.PARTIAL:
        if grade == Grade.ELEVEN and _targets_luminaire_geography(profile):
            return LeadCategory.LUM_L2
        if grade == Grade.TWELVE:
            return LeadCategory.LUM_L2

    return None


def _categorize_masters(profile: LeadProfile) -> LeadCategory:
    if (
        profile.applicationPreparation == ApplicationPreparation.UNDECIDED_NEED_HELP
        or profile.targetUniversities == TargetUniversities.UNSURE
    ):
        return LeadCategory.NURTURE
    if profile.targetUniversities == TargetUniversities.TOP_20_50:
        return LeadCategory.MASTERS_L1
    if profile.targetUniversities in _MASTERS_L2_TARGETS:
        return LeadCategory.MASTERS_L2
    return LeadCategory.NURTURE


def categorize(profile: LeadProfile) -> LeadCategory:
    """
    Maps a profile to exactly one lead category.

    Global overrides are checked first (student filler, spam, full
    scholarship outside masters), then the grade gates (grade 7 or below,
    masters), then the BCH and Luminaire segment rules. Anything left over
    is NURTURE.
    """
    if profile.formFillerType == FormFillerType.STUDENT:
        return LeadCategory.NURTURE

    if is_spam_lead(profile):
        return LeadCategory.NURTURE

    if (
        profile.scholarshipRequirement == ScholarshipRequirement.FULL
        and profile.currentGrade != Grade.MASTERS
    ):
        return LeadCategory.NURTURE

    if profile.currentGrade == Grade.SEVEN_OR_BELOW:
        return LeadCategory.DROP

    if profile.currentGrade == Grade.MASTERS:
        return _categorize_masters(profile)

    return _segment_category(profile) or LeadCategory.NURTURE


def is_extended_nurture_candidate(profile: LeadProfile, category: Optional[LeadCategory]) -> bool:
    """Parent-filled grade 11-12 nurture leads get a second chance to qualify."""
    return (
        category == LeadCategory.NURTURE
        and profile.formFillerType == FormFillerType.PARENT
        and profile.currentGrade in EXTENDED_NURTURE_GRADES
    )


def recategorize_after_extended_nurture(
    profile: LeadProfile, current: LeadCategory
) -> LeadCategory:
    """
    Re-evaluates a nurture lead using the extended nurture answers.

    Only NURTURE -> {NURTURE, LUM_L2} is legal here. Any other starting
    category is returned unchanged.
    """
    if not is_extended_nurture_candidate(profile, current):
        logger.warning(
            f"Re-categorization requested for a {_label(current)} lead "
            f"(filler={_label(profile.formFillerType)}, "
            f"grade={_label(profile.currentGrade)}); keeping it."
        )
        return current

    if profile.partialFundingApproach in _FUNDING_APPROACHES_FOR_LUM_L2:
        return LeadCategory.LUM_L2
    return LeadCategory.NURTURE


def would_student_qualify_as_parent(profile: LeadProfile) -> bool:
    """
    Whether a student-filled profile would have landed in a qualified segment
    had a parent filled it. Spam profiles never qualify.
    """
    if is_spam_lead(profile):
        return False
    return _segment_category(profile) is not None


def check_category_consistency(
    profile: LeadProfile, category: Optional[LeadCategory]
) -> tuple[list[str], list[str]]:
    """
    Cross-checks a category against the answers it was derived from.

    Returns:
        A tuple of (errors, warnings). Both lists are empty when the
        category is consistent with the profile.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if category is None:
        errors.append("Lead category is missing")
        return errors, warnings

    grade = profile.currentGrade
    if category in (LeadCategory.MASTERS_L1, LeadCategory.MASTERS_L2):
        if grade != Grade.MASTERS:
            errors.append(
                f'Masters category "{category.value}" requires currentGrade "masters", got: {_label(grade)}'
            )
    elif category == LeadCategory.DROP:
        if grade != Grade.SEVEN_OR_BELOW:
            errors.append(
                f'Drop category requires currentGrade "7_below", got: {_label(grade)}'
            )
    elif category in QUALIFIED_CATEGORIES:
        if grade in (Grade.MASTERS, Grade.SEVEN_OR_BELOW):
            warnings.append(
                f'Category "{category.value}" typically not used with grade "{grade.value}"'
            )

    if profile.formFillerType == FormFillerType.STUDENT and category not in (
        LeadCategory.NURTURE,
        LeadCategory.DROP,
    ):
        warnings.append(
            f'Student-filled forms typically result in "nurture", got: "{category.value}"'
        )

    return errors, warnings
