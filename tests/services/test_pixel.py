from lead_funnel.flow.controller import complete_step1, complete_step2, start_session
from lead_funnel.services.pixel import event_name, events_for
from lead_funnel.shared.enums import EventTrigger, FormFillerType, LeadCategory
from lead_funnel.shared.schemas import AnalyticsFact, LeadProfile


class TestPixelEvents:
    def test_event_name_has_environment_suffix(self):
        assert event_name("prnt_event", "staging") == "adm_prnt_event_staging"

    def test_page_1_before_category_is_known(self):
        fact = AnalyticsFact(
            eventTrigger=EventTrigger.STEP1_COMPLETE,
            leadCategory=LeadCategory.NURTURE,
            formFillerType=FormFillerType.PARENT,
        )
        assert events_for(fact, submitted=False, environment="staging") == [
            "adm_page_1_continue_staging",
        ]

    def test_dropped_parent_is_classified_on_page_1(self):
        fact = AnalyticsFact(
            eventTrigger=EventTrigger.STEP1_COMPLETE,
            leadCategory=LeadCategory.DROP,
            formFillerType=FormFillerType.PARENT,
        )
        assert events_for(fact, submitted=True, environment="prod") == [
            "adm_prnt_event_prod",
            "adm_disqualfd_prnt_prod",
            "adm_page_1_continue_prod",
            "adm_form_complete_prod",
        ]

    def test_qualified_parent_is_classified_on_page_2(self):
        fact = AnalyticsFact(
            eventTrigger=EventTrigger.STEP2_COMPLETE,
            leadCategory=LeadCategory.BCH,
            formFillerType=FormFillerType.PARENT,
            isQualified=True,
        )
        assert events_for(fact, submitted=False, environment="staging") == [
            "adm_prnt_event_staging",
            "adm_qualfd_prnt_staging",
            "adm_qualfd_prnt_page_1_continue_staging",
            "adm_page_2_submit_staging",
            "adm_bch_page_2_submit_staging",
            "adm_qualfd_prnt_page_2_submit_staging",
        ]

    def test_spam_student(self):
        fact = AnalyticsFact(
            eventTrigger=EventTrigger.STEP2_COMPLETE,
            leadCategory=LeadCategory.NURTURE,
            formFillerType=FormFillerType.STUDENT,
            isSpam=True,
        )
        assert events_for(fact, submitted=True, environment="prod") == [
            "adm_stdnt_prod",
            "adm_spam_stdnt_prod",
            "adm_disqualfd_stdnt_prod",
            "adm_page_2_submit_prod",
            "adm_form_complete_prod",
        ]

    def test_submitted_student_who_would_qualify(self):
        fact = AnalyticsFact(
            eventTrigger=EventTrigger.STEP2_COMPLETE,
            leadCategory=LeadCategory.NURTURE,
            formFillerType=FormFillerType.STUDENT,
            wouldQualifyAsParent=True,
        )
        assert events_for(fact, submitted=True, environment="prod") == [
            "adm_stdnt_prod",
            "adm_qualfd_stdnt_prod",
            "adm_qualfd_stdnt_page_1_continue_prod",
            "adm_page_2_submit_prod",
            "adm_qualfd_stdnt_page_2_submit_prod",
            "adm_form_complete_prod",
            "adm_qualfd_stdnt_form_complete_prod",
        ]

    def test_counselling_completion(self):
        fact = AnalyticsFact(
            eventTrigger=EventTrigger.STEP3_COMPLETE,
            leadCategory=LeadCategory.LUM_L2,
            formFillerType=FormFillerType.PARENT,
            isQualified=True,
        )
        assert events_for(fact, submitted=True, environment="prod") == [
            "adm_form_complete_prod",
            "adm_lum_l2_form_complete_prod",
            "adm_qualfd_prnt_form_complete_prod",
        ]

    def test_no_fact_no_events(self):
        assert events_for(None, submitted=True) == []


class TestPixelEventsFromFlow:
    def test_bch_parent_fires_each_classification_once(self, session_id):
        profile = LeadProfile.from_answers(
            {
                "formFillerType": "parent",
                "currentGrade": "10",
                "scholarshipRequirement": "scholarship_optional",
                "targetGeographies": ["US"],
            }
        )
        step1 = complete_step1(start_session(session_id), profile)
        step2 = complete_step2(step1.state, profile)
        assert step2.state.leadCategory == LeadCategory.BCH

        fired = events_for(step1.analytics, step1.submit, "test") + events_for(
            step2.analytics, step2.submit, "test"
        )
        assert "adm_qualfd_prnt_test" in fired
        assert "adm_disqualfd_prnt_test" not in fired
        assert fired.count("adm_prnt_event_test") == 1
