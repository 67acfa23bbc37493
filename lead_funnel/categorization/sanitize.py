import logging
from typing import Any, Optional

from lead_funnel.shared.enums import LeadCategory

logger = logging.getLogger(__name__)

_CATEGORIES_BY_VALUE = {category.value: category for category in LeadCategory}


def sanitize_lead_category(category: Any, context: str = "") -> Optional[LeadCategory]:
    """
    Normalizes a lead category coming from outside the categorizer
    (persisted rows, client payloads) to a member of LeadCategory.

    The value is trimmed and matched case-insensitively; underscores are
    accepted in place of hyphens. Unrecognized values are logged and
    reported as None.

    Args:
        category: The raw value, usually a string.
        context: A short label describing where the value came from, used in
            the diagnostic log line.

    Returns:
        The matching LeadCategory, or None when the value is empty or invalid.
    """
    if category is None or category == "":
        return None
    if isinstance(category, LeadCategory):
        return category

    normalized = str(category).strip().lower().replace("_", "-")
    match = _CATEGORIES_BY_VALUE.get(normalized)
    if match is None:
        logger.error(
            f"Invalid lead category {category!r}"
            + (f" ({context})" if context else "")
            + f". Valid categories: {', '.join(_CATEGORIES_BY_VALUE)}"
        )
    elif match.value != category:
        logger.warning(
            f"Lead category {category!r} normalized to {match.value!r}"
            + (f" ({context})" if context else "")
        )
    return match


def coerce_lead_category(category: Any, context: str = "") -> Optional[LeadCategory]:
    """
    Like sanitize_lead_category, but a non-empty invalid value falls back to
    NURTURE instead of None. Empty values stay None.
    """
    if category is None or category == "":
        return None
    return sanitize_lead_category(category, context) or LeadCategory.NURTURE
