import enum


class FormFillerType(str, enum.Enum):
    PARENT = "parent"
    STUDENT = "student"


class Grade(str, enum.Enum):
    """
    The grade the student is currently in. Wire values match the values the
    form has always persisted.
    """

    SEVEN_OR_BELOW = "7_below"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    ELEVEN = "11"
    TWELVE = "12"
    MASTERS = "masters"


class ScholarshipRequirement(str, enum.Enum):
    OPTIONAL = "scholarship_optional"
    PARTIAL = "partial_scholarship"
    FULL = "full_scholarship"


class CurriculumType(str, enum.Enum):
    IB = "IB"
    IGCSE = "IGCSE"
    CBSE = "CBSE"
    ICSE = "ICSE"
    STATE_BOARDS = "State_Boards"
    OTHERS = "Others"


class GradeFormat(str, enum.Enum):
    GPA = "gpa"
    PERCENTAGE = "percentage"


class Geography(str, enum.Enum):
    US = "US"
    UK = "UK"
    REST_OF_WORLD = "Rest of World"
    NEED_GUIDANCE = "Need Guidance"


class ApplicationPreparation(str, enum.Enum):
    RESEARCHING_NOW = "researching_now"
    TAKEN_EXAMS_IDENTIFIED_UNIVERSITIES = "taken_exams_identified_universities"
    UNDECIDED_NEED_HELP = "undecided_need_help"


class TargetUniversities(str, enum.Enum):
    TOP_20_50 = "top_20_50"
    TOP_50_100 = "top_50_100"
    PARTNER_UNIVERSITY = "partner_university"
    UNSURE = "unsure"


class SupportLevel(str, enum.Enum):
    PERSONALIZED_GUIDANCE = "personalized_guidance"
    EXPLORING_OPTIONS = "exploring_options"
    SELF_GUIDED = "self_guided"
    PARTNER_UNIVERSITIES = "partner_universities"


class PartialFundingApproach(str, enum.Enum):
    """Answer collected on the extended nurture step for grade 11-12 parents."""

    ACCEPT_LOANS = "accept_loans"
    AFFORDABLE_ALTERNATIVES = "affordable_alternatives"
    DEFER_SCHOLARSHIPS = "defer_scholarships"
    ONLY_FULL_FUNDING = "only_full_funding"


class StrongProfileIntent(str, enum.Enum):
    YES = "yes"
    NO = "no"
    UNSURE = "unsure"


class LeadCategory(str, enum.Enum):
    """
    Closed set of follow-up segments. The values are the ones stored in
    existing rows and sent to the registration webhook.
    """

    BCH = "bch"
    LUM_L1 = "lum-l1"
    LUM_L2 = "lum-l2"
    MASTERS_L1 = "masters-l1"
    MASTERS_L2 = "masters-l2"
    NURTURE = "nurture"
    DROP = "drop"


class FunnelStage(str, enum.Enum):
    INITIAL_CAPTURE = "initial_capture"
    COUNSELING_BOOKED = "counseling_booked"
    CONTACT_SUBMITTED = "contact_submitted"
    ABANDONED = "abandoned"


class EventTrigger(str, enum.Enum):
    STEP1_COMPLETE = "step1_complete"
    STEP2_COMPLETE = "step2_complete"
    EXTENDED_NURTURE_COMPLETE = "extended_nurture_complete"
    STEP3_COMPLETE = "step3_complete"
