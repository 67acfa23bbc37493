import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    func,
)

from lead_funnel.database.db import Base


class FormSession(Base):
    """
    One row per form session, upserted after every step.

    Column names follow the form_sessions table the form has always written
    to. The profile and flow_state columns hold the full answers and state
    so a session can be resumed.
    """

    __tablename__ = "form_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(64), unique=True, nullable=False, index=True)
    environment = Column(String(32), default="staging")
    form_version = Column(String(16))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Page 1: Student information
    form_filler_type = Column(String(16))
    student_first_name = Column(String(255))
    student_last_name = Column(String(255))
    current_grade = Column(String(16))
    phone_number = Column(String(32))

    # Academic information
    curriculum_type = Column(String(32))
    grade_format = Column(String(16))
    gpa_value = Column(String(16))
    percentage_value = Column(String(16))
    school_name = Column(String(255))
    scholarship_requirement = Column(String(32))
    target_geographies = Column(JSON)

    # Parent contact information
    parent_name = Column(String(255))
    parent_email = Column(String(255))

    # Counselling
    selected_date = Column(String(64))
    selected_slot = Column(String(32))
    counselor_assigned = Column(String(64))

    # System fields
    lead_category = Column(String(16))
    is_counselling_booked = Column(Boolean, default=False)
    funnel_stage = Column(String(32), default="initial_capture")
    is_qualified_lead = Column(Boolean, default=False)
    page_completed = Column(Float, default=0)
    current_step = Column(String(16))
    is_submitted = Column(Boolean, default=False)
    total_time_spent = Column(Integer, default=0)
    started_at = Column(Float)
    triggered_events = Column(JSON, default=list)

    profile = Column(JSON, default=dict)
    flow_state = Column(JSON)

    __table_args__ = (
        Index("idx_form_sessions_lead_category", "lead_category"),
        Index("idx_form_sessions_funnel_stage", "funnel_stage"),
        Index("idx_form_sessions_environment", "environment"),
    )
