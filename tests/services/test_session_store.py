from lead_funnel.records.builder import build_session_record
from lead_funnel.services import session_store
from lead_funnel.shared.enums import FunnelStage, LeadCategory
from lead_funnel.shared.schemas import FlowState, LeadProfile
from lead_funnel.shared.state import FlowStep


def _checkpoint(session_id, profile, **state_fields):
    state = FlowState(sessionId=session_id, **state_fields)
    return build_session_record(profile, state, 10, "test", "v8.0"), state


class TestSessionStore:
    async def test_create_and_restore(self, db, session_id):
        await session_store.create_session(db, FlowState(sessionId=session_id), "test")

        row = await session_store.load_session(db, session_id)
        profile, state = session_store.restore_session(row)

        assert row.funnel_stage == FunnelStage.INITIAL_CAPTURE.value
        assert profile == LeadProfile()
        assert state.currentStep == FlowStep.STEP_1

    async def test_missing_session(self, db):
        assert await session_store.load_session(db, "does-not-exist") is None
        assert await session_store.mark_abandoned(db, "does-not-exist", 5) is None

    async def test_upsert_keeps_earlier_values(self, db, session_id):
        step1_profile = LeadProfile.from_answers(
            {"formFillerType": "parent", "studentFirstName": "Asha", "currentGrade": "12"}
        )
        record, state = _checkpoint(
            session_id,
            step1_profile,
            currentStep=FlowStep.STEP_2_ACADEMIC,
            leadCategory=LeadCategory.NURTURE,
            stepCompleted=1,
        )
        await session_store.upsert_session(db, record, step1_profile, state, ["adm_page_1_continue_test"])

        # A later checkpoint built from a profile missing the first name.
        step2_profile = LeadProfile.from_answers(
            {"formFillerType": "parent", "currentGrade": "12", "scholarshipRequirement": "scholarship_optional"}
        )
        record, state = _checkpoint(
            session_id,
            step2_profile,
            currentStep=FlowStep.STEP_3_COUNSELLING,
            leadCategory=LeadCategory.LUM_L1,
            stepCompleted=2,
        )
        row = await session_store.upsert_session(
            db, record, step2_profile, state, ["adm_page_2_submit_test"]
        )

        assert row.student_first_name == "Asha"
        assert row.scholarship_requirement == "scholarship_optional"
        assert row.lead_category == "lum-l1"
        assert row.page_completed == 2
        assert row.funnel_stage == FunnelStage.COUNSELING_BOOKED.value
        assert row.triggered_events == [
            "adm_page_1_continue_test",
            "adm_page_2_submit_test",
        ]

    async def test_page_completed_never_decreases(self, db, session_id):
        profile = LeadProfile.from_answers({"formFillerType": "parent", "currentGrade": "10"})
        record, state = _checkpoint(session_id, profile, stepCompleted=2)
        await session_store.upsert_session(db, record, profile, state)

        record, state = _checkpoint(session_id, profile, stepCompleted=1)
        row = await session_store.upsert_session(db, record, profile, state)
        assert row.page_completed == 2

    async def test_restore_round_trips_profile(self, db, session_id):
        profile = LeadProfile.from_answers(
            {
                "formFillerType": "parent",
                "currentGrade": "11",
                "gpaValue": "8.75",
                "targetGeographies": ["US", "UK"],
            }
        )
        record, state = _checkpoint(
            session_id,
            profile,
            currentStep=FlowStep.STEP_2_ACADEMIC,
            leadCategory=LeadCategory.NURTURE,
            stepCompleted=1,
        )
        await session_store.upsert_session(db, record, profile, state)

        row = await session_store.load_session(db, session_id)
        restored_profile, restored_state = session_store.restore_session(row)
        assert restored_profile == profile
        assert restored_state == state

    async def test_mark_abandoned(self, db, session_id):
        await session_store.create_session(db, FlowState(sessionId=session_id), "test")
        row = await session_store.mark_abandoned(db, session_id, 42)
        assert row.funnel_stage == FunnelStage.ABANDONED.value
        assert row.total_time_spent == 42

    async def test_submitted_session_is_not_abandoned(self, db, session_id):
        profile = LeadProfile.from_answers({"formFillerType": "student", "currentGrade": "9"})
        record, state = _checkpoint(
            session_id,
            profile,
            currentStep=FlowStep.SUBMITTED,
            leadCategory=LeadCategory.NURTURE,
            stepCompleted=2,
            isSubmitted=True,
        )
        await session_store.upsert_session(db, record, profile, state)

        row = await session_store.mark_abandoned(db, session_id, 42)
        assert row.funnel_stage == FunnelStage.CONTACT_SUBMITTED.value

    async def test_claim_submission_succeeds_once(self, db, session_id):
        await session_store.create_session(db, FlowState(sessionId=session_id), "test")

        assert await session_store.claim_submission(db, session_id) is True
        await db.commit()
        assert await session_store.claim_submission(db, session_id) is False
        assert await session_store.claim_submission(db, "does-not-exist") is False
