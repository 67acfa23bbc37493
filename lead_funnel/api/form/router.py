import logging
import uuid
from typing import Any, Mapping, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lead_funnel.api.form.handler import FormAction, handle_form_action
from lead_funnel.config import settings
from lead_funnel.database.db import get_db
from lead_funnel.flow.controller import start_session
from lead_funnel.records.builder import build_session_record
from lead_funnel.services import pixel, session_store
from lead_funnel.services.google_sheets import GoogleSheetsService
from lead_funnel.services.lead_export import write_lead_to_sheet
from lead_funnel.services.slots import counsellor_for
from lead_funnel.services.webhook import send_registration
from lead_funnel.shared.schemas import (
    AbandonRequest,
    AbandonResponse,
    CounsellingRequest,
    CreateSessionRequest,
    ExtendedNurtureRequest,
    FlowDecision,
    FormStepResponse,
    SessionRecord,
    SessionRequest,
    SessionResponse,
    Step1Request,
    Step2Request,
)
from lead_funnel.shared.state import FlowStep

router = APIRouter(prefix="/form")
logger = logging.getLogger(__name__)


def _step_response(
    decision: FlowDecision, record: Optional[SessionRecord] = None
) -> FormStepResponse:
    state = decision.state
    if state.currentStep == FlowStep.STEP_3_COUNSELLING:
        counselor = counsellor_for(state.leadCategory)
    else:
        counselor = record.counselorAssigned if record else None
    return FormStepResponse(
        sessionId=state.sessionId,
        accepted=decision.accepted,
        currentStep=state.currentStep,
        leadCategory=state.leadCategory,
        isSubmitted=state.isSubmitted,
        showEvaluation=decision.showEvaluation,
        evaluationDelaySeconds=(
            settings.EVALUATION_DELAY_SECONDS if decision.showEvaluation else 0
        ),
        counselorAssigned=counselor,
    )


async def _run_step(
    action: FormAction,
    session_id: str,
    answers: Mapping[str, Any],
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession,
) -> FormStepResponse:
    row = await session_store.load_session(db, session_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found.")

    try:
        profile, flow_state = session_store.restore_session(row)
        decision, profile = handle_form_action(action, flow_state, profile, answers)
        if not decision.accepted:
            return _step_response(decision)

        if decision.submit and not await session_store.claim_submission(db, session_id):
            await db.rollback()
            logger.info(f"Session {session_id} was submitted by a concurrent request.")
            return _step_response(FlowDecision(accepted=False, state=decision.state))

        record = build_session_record(
            profile, decision.state, session_store.elapsed_seconds(row)
        )
        events = pixel.events_for(decision.analytics, decision.submit)
        await session_store.upsert_session(
            db, record, profile, decision.state, triggered_events=events
        )

        if decision.submit:
            sheets_service: Optional[GoogleSheetsService] = getattr(
                request.app.state, "sheets_service", None
            )
            background_tasks.add_task(send_registration, record)
            background_tasks.add_task(write_lead_to_sheet, record, sheets_service)

        return _step_response(decision, record)
    except Exception as e:
        logger.error(
            f"An unexpected error occurred while processing {action.value} for session {session_id}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred. Check server logs.",
        )


def _answers(payload: SessionRequest) -> dict:
    return payload.model_dump(exclude={"sessionId"}, exclude_none=True)


@router.post("/sessions", response_model=FormStepResponse)
async def create_form_session(
    payload: CreateSessionRequest, db: AsyncSession = Depends(get_db)
):
    """
    Starts a form session at the first step. Re-posting an existing
    sessionId returns the stored state instead of starting over.
    """
    session_id = payload.sessionId or str(uuid.uuid4())
    try:
        row = await session_store.load_session(db, session_id)
        if row is not None:
            _, flow_state = session_store.restore_session(row)
        else:
            flow_state = start_session(session_id)
            await session_store.create_session(db, flow_state, settings.ENVIRONMENT)
        return _step_response(FlowDecision(accepted=True, state=flow_state))
    except Exception as e:
        logger.error(f"Failed to create form session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred. Check server logs.",
        )


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_form_session(session_id: str, db: AsyncSession = Depends(get_db)):
    row = await session_store.load_session(db, session_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found.")
    profile, flow_state = session_store.restore_session(row)
    record = build_session_record(
        profile,
        flow_state,
        row.total_time_spent or 0,
        environment=row.environment,
        form_version=row.form_version,
    )
    return SessionResponse(flowState=flow_state, record=record)


@router.post("/step-1", response_model=FormStepResponse)
async def submit_step1(
    payload: Step1Request,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    return await _run_step(
        FormAction.STEP_1, payload.sessionId, _answers(payload), request, background_tasks, db
    )


@router.post("/step-2", response_model=FormStepResponse)
async def submit_step2(
    payload: Step2Request,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    return await _run_step(
        FormAction.STEP_2, payload.sessionId, _answers(payload), request, background_tasks, db
    )


@router.post("/extended-nurture", response_model=FormStepResponse)
async def submit_extended_nurture(
    payload: ExtendedNurtureRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    return await _run_step(
        FormAction.EXTENDED_NURTURE,
        payload.sessionId,
        _answers(payload),
        request,
        background_tasks,
        db,
    )


@router.post("/counselling", response_model=FormStepResponse)
async def submit_counselling(
    payload: CounsellingRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    return await _run_step(
        FormAction.COUNSELLING,
        payload.sessionId,
        _answers(payload),
        request,
        background_tasks,
        db,
    )


@router.post("/back", response_model=FormStepResponse)
async def go_back_to_step1(
    payload: SessionRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    return await _run_step(
        FormAction.BACK, payload.sessionId, {}, request, background_tasks, db
    )


@router.post("/abandon", response_model=AbandonResponse)
async def abandon_form(payload: AbandonRequest, db: AsyncSession = Depends(get_db)):
    """Called by the client when the submitter leaves the form unfinished."""
    row = await session_store.load_session(db, payload.sessionId)
    if row is None:
        raise HTTPException(
            status_code=404, detail=f"Session {payload.sessionId} not found."
        )
    time_spent = (
        payload.timeSpent
        if payload.timeSpent is not None
        else int(session_store.elapsed_seconds(row))
    )
    try:
        row = await session_store.mark_abandoned(db, payload.sessionId, time_spent)
    except Exception as e:
        logger.error(
            f"Failed to track abandonment for session {payload.sessionId}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred. Check server logs.",
        )
    return AbandonResponse(sessionId=payload.sessionId, funnelStage=row.funnel_stage)
