import datetime
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from lead_funnel.categorization.sanitize import sanitize_lead_category
from lead_funnel.shared.schemas import SlotsResponse
from lead_funnel.services.slots import available_slots, counsellor_for

router = APIRouter(prefix="/counselling")
logger = logging.getLogger(__name__)


@router.get("/slots", response_model=SlotsResponse)
async def list_counselling_slots(date: str, category: Optional[str] = None):
    """
    Lists the bookable slots for a day. The category decides which
    counsellor's calendar applies.
    """
    try:
        day = datetime.date.fromisoformat(date)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date '{date}', expected YYYY-MM-DD.")

    lead_category = sanitize_lead_category(category, context="slots query")
    slots = available_slots(lead_category, day, datetime.datetime.now())
    return SlotsResponse(
        date=day.isoformat(), counsellor=counsellor_for(lead_category), slots=slots
    )
