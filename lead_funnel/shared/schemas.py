import enum
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, FrozenSet, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lead_funnel.categorization.sanitize import coerce_lead_category
from lead_funnel.shared.enums import (
    ApplicationPreparation,
    CurriculumType,
    EventTrigger,
    FormFillerType,
    FunnelStage,
    Geography,
    Grade,
    GradeFormat,
    LeadCategory,
    PartialFundingApproach,
    ScholarshipRequirement,
    StrongProfileIntent,
    SupportLevel,
    TargetUniversities,
)
from lead_funnel.shared.state import AcademicVariant, FlowStep

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    db_connection: str


_PROFILE_ENUM_FIELDS: dict[str, Type[enum.Enum]] = {
    "formFillerType": FormFillerType,
    "currentGrade": Grade,
    "scholarshipRequirement": ScholarshipRequirement,
    "curriculumType": CurriculumType,
    "gradeFormat": GradeFormat,
    "applicationPreparation": ApplicationPreparation,
    "targetUniversities": TargetUniversities,
    "supportLevel": SupportLevel,
    "partialFundingApproach": PartialFundingApproach,
    "strongProfileIntent": StrongProfileIntent,
}

_PROFILE_DECIMAL_FIELDS = ("gpaValue", "percentageValue")


def _coerce_enum(enum_cls: Type[enum.Enum], value: Any, field: str) -> Any:
    if value is None or isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        for member in enum_cls:
            if member.value == raw or member.value.lower() == raw.lower():
                return member
    logger.warning(
        f"Unrecognized value {value!r} for {field}; treating it as unanswered."
    )
    return None


def _coerce_decimal(value: Any, field: str) -> Optional[Decimal]:
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, bool):
        logger.warning(f"Unrecognized value {value!r} for {field}; ignoring it.")
        return None
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning(f"Unrecognized value {value!r} for {field}; ignoring it.")
        return None


def _coerce_geographies(value: Any) -> FrozenSet[Geography]:
    if value is None:
        return frozenset()
    if isinstance(value, (str, Geography)):
        value = [value]
    geographies = set()
    for item in value:
        geography = _coerce_enum(Geography, item, "targetGeographies")
        if geography is not None:
            geographies.add(geography)
    return frozenset(geographies)


class LeadProfile(BaseModel):
    """
    Immutable snapshot of the answers collected so far.

    Every field is optional because answers arrive one step at a time.
    Values that are not members of their enum are coerced to None (or left
    out of targetGeographies) instead of failing, so the categorizer simply
    sees them as non-matching answers.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Routing answers
    formFillerType: Optional[FormFillerType] = None
    currentGrade: Optional[Grade] = None
    scholarshipRequirement: Optional[ScholarshipRequirement] = None
    curriculumType: Optional[CurriculumType] = None
    gradeFormat: Optional[GradeFormat] = None
    gpaValue: Optional[Decimal] = None
    percentageValue: Optional[Decimal] = None
    targetGeographies: FrozenSet[Geography] = frozenset()

    # Masters answers
    applicationPreparation: Optional[ApplicationPreparation] = None
    targetUniversities: Optional[TargetUniversities] = None
    supportLevel: Optional[SupportLevel] = None
    intake: Optional[str] = None
    graduationStatus: Optional[str] = None
    workExperience: Optional[str] = None
    entranceExam: Optional[str] = None
    examScore: Optional[str] = None
    fieldOfStudy: Optional[str] = None

    # Extended nurture answers
    partialFundingApproach: Optional[PartialFundingApproach] = None
    strongProfileIntent: Optional[StrongProfileIntent] = None

    # Contact details
    studentFirstName: Optional[str] = None
    studentLastName: Optional[str] = None
    parentName: Optional[str] = None
    email: Optional[str] = None
    phoneNumber: Optional[str] = None
    schoolName: Optional[str] = None

    # Counselling booking
    selectedDate: Optional[str] = None
    selectedSlot: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_answers(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        for field, enum_cls in _PROFILE_ENUM_FIELDS.items():
            if field in data:
                data[field] = _coerce_enum(enum_cls, data[field], field)
        for field in _PROFILE_DECIMAL_FIELDS:
            if field in data:
                data[field] = _coerce_decimal(data[field], field)
        if "targetGeographies" in data:
            data["targetGeographies"] = _coerce_geographies(data["targetGeographies"])
        return data

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "LeadProfile":
        """Builds a profile from loosely typed form answers."""
        return cls.model_validate(answers)

    def merge(self, answers: Mapping[str, Any]) -> "LeadProfile":
        """
        Returns a new profile with the given answers laid over this one.
        Answers that are None are ignored, so earlier data is never lost when
        a step is re-submitted.
        """
        updates = {key: value for key, value in answers.items() if value is not None}
        if not updates:
            return self
        return LeadProfile.model_validate({**self.model_dump(), **updates})


class FlowState(BaseModel):
    """
    Per-session state of the form flow. Reducers in lead_funnel.flow never
    mutate it; they return a replacement.
    """

    model_config = ConfigDict(frozen=True)

    sessionId: str
    currentStep: FlowStep = FlowStep.STEP_1
    academicVariant: Optional[AcademicVariant] = None
    leadCategory: Optional[LeadCategory] = None
    stepCompleted: float = 0
    isSubmitted: bool = False

    @field_validator("leadCategory", mode="before")
    @classmethod
    def sanitize_category(cls, v: Any) -> Any:
        return coerce_lead_category(v, context="flow state")


class AnalyticsFact(BaseModel):
    """The classification facts an outside tracker needs after a step."""

    model_config = ConfigDict(frozen=True)

    eventTrigger: EventTrigger
    leadCategory: Optional[LeadCategory] = None
    formFillerType: Optional[FormFillerType] = None
    isSpam: bool = False
    isQualified: bool = False
    wouldQualifyAsParent: bool = False


class FlowDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    accepted: bool
    state: FlowState
    submit: bool = False
    showEvaluation: bool = False
    analytics: Optional[AnalyticsFact] = None


class SessionRecord(BaseModel):
    """
    Outbound record sent to the session store at every checkpoint and to the
    registration webhook on final submission. Every key is always present.
    """

    model_config = ConfigDict(frozen=True)

    sessionId: str
    environment: str
    formVersion: str

    formFillerType: Optional[FormFillerType]
    studentFirstName: Optional[str]
    studentLastName: Optional[str]
    parentName: Optional[str]
    email: Optional[str]
    phoneNumber: Optional[str]
    currentGrade: Optional[Grade]
    curriculumType: Optional[CurriculumType]
    gradeFormat: Optional[GradeFormat]
    gpaValue: Optional[str]
    percentageValue: Optional[str]
    schoolName: Optional[str]
    scholarshipRequirement: Optional[ScholarshipRequirement]
    targetGeographies: list[Geography]

    applicationPreparation: Optional[ApplicationPreparation]
    targetUniversities: Optional[TargetUniversities]
    supportLevel: Optional[SupportLevel]
    intake: Optional[str]
    graduationStatus: Optional[str]
    workExperience: Optional[str]
    entranceExam: Optional[str]
    examScore: Optional[str]
    fieldOfStudy: Optional[str]

    partialFundingApproach: Optional[PartialFundingApproach]
    strongProfileIntent: Optional[StrongProfileIntent]

    selectedDate: Optional[str]
    selectedSlot: Optional[str]
    counsellingSlotPicked: bool
    counselorAssigned: Optional[str]

    leadCategory: Optional[LeadCategory]
    currentStep: FlowStep
    stepCompleted: float
    isSubmitted: bool
    isQualifiedLead: bool
    funnelStage: FunnelStage
    totalTimeSpent: int = Field(ge=0)


class CreateSessionRequest(BaseModel):
    sessionId: Optional[str] = Field(None, min_length=5, max_length=64)


class SessionRequest(BaseModel):
    sessionId: str = Field(..., min_length=5, max_length=64)


class Step1Request(SessionRequest):
    """Initial capture page. Enum answers are validated by LeadProfile."""

    formFillerType: Optional[str] = None
    studentFirstName: Optional[str] = None
    studentLastName: Optional[str] = None
    currentGrade: Optional[str] = None
    phoneNumber: Optional[str] = None
    parentName: Optional[str] = None
    email: Optional[str] = None


class Step2Request(SessionRequest):
    """Academic details, regular or masters variant."""

    curriculumType: Optional[str] = None
    gradeFormat: Optional[str] = None
    gpaValue: Optional[str] = None
    percentageValue: Optional[str] = None
    schoolName: Optional[str] = None
    scholarshipRequirement: Optional[str] = None
    targetGeographies: Optional[list[str]] = None
    parentName: Optional[str] = None
    email: Optional[str] = None

    applicationPreparation: Optional[str] = None
    targetUniversities: Optional[str] = None
    supportLevel: Optional[str] = None
    intake: Optional[str] = None
    graduationStatus: Optional[str] = None
    workExperience: Optional[str] = None
    entranceExam: Optional[str] = None
    examScore: Optional[str] = None
    fieldOfStudy: Optional[str] = None

    @model_validator(mode="after")
    def one_grade_value(self) -> "Step2Request":
        if self.gpaValue and self.percentageValue:
            raise ValueError("Provide either gpaValue or percentageValue, not both.")
        return self


class ExtendedNurtureRequest(SessionRequest):
    partialFundingApproach: Optional[str] = None
    strongProfileIntent: Optional[str] = None


class CounsellingRequest(SessionRequest):
    selectedDate: Optional[str] = None
    selectedSlot: Optional[str] = None
    parentName: Optional[str] = None
    email: Optional[str] = None


class AbandonRequest(SessionRequest):
    timeSpent: Optional[int] = Field(None, ge=0)


class FormStepResponse(BaseModel):
    sessionId: str
    accepted: bool
    currentStep: FlowStep
    leadCategory: Optional[LeadCategory] = None
    isSubmitted: bool = False
    showEvaluation: bool = False
    evaluationDelaySeconds: int = 0
    counselorAssigned: Optional[str] = None


class SessionResponse(BaseModel):
    flowState: FlowState
    record: SessionRecord


class AbandonResponse(BaseModel):
    sessionId: str
    funnelStage: FunnelStage


class SlotsResponse(BaseModel):
    date: str
    counsellor: str
    slots: list[str]
