import enum


class FlowStep(str, enum.Enum):
    """
    Defines the screens of the lead capture form.
    Each state represents the step the submitter is currently looking at.
    """

    # Initial state, personal details, grade and study preferences.
    STEP_1 = "step_1"
    # Academic details, regular or masters variant.
    STEP_2_ACADEMIC = "step_2"
    # Parents of grade 11-12 nurture leads are asked how they would fund studies.
    STEP_2_5_EXTENDED_NURTURE = "step_2_5"
    # Counselling slot booking for qualified leads.
    STEP_3_COUNSELLING = "step_3"
    # Terminal state, the lead has been submitted.
    SUBMITTED = "submitted"

    @property
    def number(self) -> float:
        """Position of the step in the form; not defined for SUBMITTED."""
        return _STEP_NUMBERS[self]


_STEP_NUMBERS = {
    FlowStep.STEP_1: 1,
    FlowStep.STEP_2_ACADEMIC: 2,
    FlowStep.STEP_2_5_EXTENDED_NURTURE: 2.5,
    FlowStep.STEP_3_COUNSELLING: 3,
}


class AcademicVariant(str, enum.Enum):
    REGULAR = "regular"
    MASTERS = "masters"
