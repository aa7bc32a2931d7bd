from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), default="", nullable=False)
    password_hash = Column(String(256), nullable=False)
    role = Column(String(32), default="USER", nullable=False)
    profile_type = Column(String(32), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    professional_profile = relationship(
        "ProfessionalProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    business_profile = relationship("BusinessProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    assessments = relationship("RiskAssessment", back_populates="user", cascade="all, delete-orphan")
    user_protocols = relationship("UserProtocol", back_populates="user", cascade="all, delete-orphan")
    registers = relationship("RiskRegister", back_populates="user", cascade="all, delete-orphan")
    exports = relationship("ReportExport", back_populates="user", cascade="all, delete-orphan")


class ProfessionalProfile(Base):
    __tablename__ = "professional_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    profession = Column(String(32), nullable=False)
    practice_areas_json = Column(Text, default="[]", nullable=False)
    years_experience = Column(Integer, nullable=True)
    jurisdiction = Column(String(8), default="AR", nullable=False)
    work_environment = Column(String(32), nullable=True)
    activities_json = Column(Text, default="[]", nullable=False)
    risk_exposure_json = Column(Text, default="[]", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="professional_profile")


class BusinessProfile(Base):
    __tablename__ = "business_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    business_type = Column(String(32), nullable=False)
    company_size = Column(String(32), nullable=True)
    revenue_range = Column(String(32), nullable=True)
    jurisdiction = Column(String(8), default="AR", nullable=False)
    business_activities_json = Column(Text, default="[]", nullable=False)
    risk_exposure_json = Column(Text, default="[]", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="business_profile")


class RiskAssessment(Base):
    __tablename__ = "risk_assessments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    profile_type = Column(String(32), nullable=False)
    profile_id = Column(Integer, nullable=True)
    title = Column(String(255), default="", nullable=False)
    status = Column(String(32), default="IN_PROGRESS", nullable=False)
    overall_risk_score = Column(Integer, default=0, nullable=False)
    risk_level = Column(String(16), default="low", nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="assessments")
    answers = relationship("AssessmentAnswer", back_populates="assessment", cascade="all, delete-orphan")


class AssessmentAnswer(Base):
    __tablename__ = "assessment_answers"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("risk_assessments.id"), nullable=False, index=True)
    question_id = Column(String(64), nullable=False)
    answer_json = Column(Text, default="null", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    assessment = relationship("RiskAssessment", back_populates="answers")


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    label = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    category = Column(String(64), default="General", nullable=False)
    order = Column(Integer, default=0, nullable=False)
    professions_json = Column(Text, default="[]", nullable=False)
    business_types_json = Column(Text, default="[]", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class RiskArea(Base):
    __tablename__ = "risk_areas"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    label = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    severity = Column(String(16), default="MEDIUM", nullable=False)
    examples_json = Column(Text, default="[]", nullable=False)
    order = Column(Integer, default=0, nullable=False)
    professions_json = Column(Text, default="[]", nullable=False)
    business_types_json = Column(Text, default="[]", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class Protocol(Base):
    __tablename__ = "protocols"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    type = Column(String(16), default="SYSTEM", nullable=False)
    category = Column(String(64), default="General", nullable=False, index=True)
    priority = Column(String(16), default="MEDIUM", nullable=False)
    content_json = Column(Text, default="{}", nullable=False)
    professions_json = Column(Text, default="[]", nullable=False)
    business_types_json = Column(Text, default="[]", nullable=False)
    jurisdictions_json = Column(Text, default="[]", nullable=False)
    estimated_days = Column(Integer, nullable=True)
    complexity = Column(String(16), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserProtocol(Base):
    __tablename__ = "user_protocols"
    __table_args__ = (Index("ix_user_protocols_user_protocol", "user_id", "protocol_id", unique=True),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    protocol_id = Column(Integer, ForeignKey("protocols.id"), nullable=False, index=True)
    status = Column(String(16), default="PENDING", nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    customizations_json = Column(Text, default="{}", nullable=False)
    assigned_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="user_protocols")
    protocol = relationship("Protocol")


class RiskScenario(Base):
    __tablename__ = "risk_scenarios"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    category = Column(String(64), default="General", nullable=False, index=True)
    likelihood = Column(String(16), default="POSSIBLE", nullable=False)
    impact = Column(String(16), default="MODERATE", nullable=False)
    risk_score = Column(Integer, default=9, nullable=False)
    triggers_json = Column(Text, default="[]", nullable=False)
    consequences_json = Column(Text, default="[]", nullable=False)
    mitigation_json = Column(Text, default="[]", nullable=False)
    business_types_json = Column(Text, default="[]", nullable=False)
    jurisdictions_json = Column(Text, default="[]", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class RiskRegister(Base):
    __tablename__ = "risk_registers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    profile_type = Column(String(32), nullable=True)
    profile_id = Column(Integer, nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    jurisdiction = Column(String(8), default="AR", nullable=False)
    status = Column(String(16), default="ACTIVE", nullable=False, index=True)
    last_reviewed_at = Column(DateTime, nullable=True)
    next_review_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="registers")
    risk_events = relationship("RiskEvent", back_populates="register", cascade="all, delete-orphan")


class RiskEvent(Base):
    __tablename__ = "risk_events"
    __table_args__ = (Index("ix_risk_events_register_inherent", "register_id", "inherent_risk"),)

    id = Column(Integer, primary_key=True, index=True)
    register_id = Column(Integer, ForeignKey("risk_registers.id"), nullable=False, index=True)
    scenario_id = Column(Integer, ForeignKey("risk_scenarios.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    category = Column(String(64), default="General", nullable=False, index=True)
    source_type = Column(String(16), default="MANUAL", nullable=False)
    identified_by = Column(String(255), default="", nullable=False)
    likelihood = Column(String(16), nullable=False)
    impact = Column(String(16), nullable=False)
    inherent_risk = Column(Integer, nullable=False)
    residual_likelihood = Column(String(16), nullable=True)
    residual_impact = Column(String(16), nullable=True)
    residual_risk = Column(Integer, nullable=True)
    priority = Column(String(16), nullable=False, index=True)
    status = Column(String(16), default="IDENTIFIED", nullable=False, index=True)
    treatment_strategy = Column(String(16), nullable=True)
    triggers_json = Column(Text, default="[]", nullable=False)
    consequences_json = Column(Text, default="[]", nullable=False)
    affected_assets_json = Column(Text, default="[]", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    register = relationship("RiskRegister", back_populates="risk_events")
    scenario = relationship("RiskScenario")
    controls = relationship("RiskControl", back_populates="risk_event", cascade="all, delete-orphan")
    treatment_plan = relationship(
        "TreatmentPlan", back_populates="risk_event", uselist=False, cascade="all, delete-orphan"
    )


class RiskControl(Base):
    __tablename__ = "risk_controls"

    id = Column(Integer, primary_key=True, index=True)
    risk_event_id = Column(Integer, ForeignKey("risk_events.id"), nullable=False, index=True)
    protocol_id = Column(Integer, ForeignKey("protocols.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    type = Column(String(16), nullable=False)
    category = Column(String(16), nullable=False)
    control_strength = Column(String(16), nullable=False)
    status = Column(String(16), default="PLANNED", nullable=False, index=True)
    owner = Column(String(255), nullable=True)
    review_frequency = Column(String(16), nullable=True)
    estimated_cost = Column(Float, nullable=True)
    estimated_effort = Column(String(16), nullable=True)
    implementation_date = Column(DateTime, nullable=True)
    last_reviewed_at = Column(DateTime, nullable=True)
    is_custom = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    risk_event = relationship("RiskEvent", back_populates="controls")
    protocol = relationship("Protocol")
    reviews = relationship(
        "ControlReview",
        back_populates="control",
        cascade="all, delete-orphan",
        order_by="ControlReview.review_date.desc()",
    )


class ControlReview(Base):
    __tablename__ = "control_reviews"

    id = Column(Integer, primary_key=True, index=True)
    control_id = Column(Integer, ForeignKey("risk_controls.id"), nullable=False, index=True)
    review_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    effectiveness = Column(Integer, nullable=False)
    notes = Column(Text, default="", nullable=False)
    reviewer = Column(String(255), default="", nullable=False)

    control = relationship("RiskControl", back_populates="reviews")


class TreatmentPlan(Base):
    __tablename__ = "treatment_plans"

    id = Column(Integer, primary_key=True, index=True)
    risk_event_id = Column(Integer, ForeignKey("risk_events.id"), unique=True, nullable=False, index=True)
    strategy = Column(String(16), nullable=False)
    justification = Column(Text, nullable=True)
    actions_json = Column(Text, default="[]", nullable=False)
    total_budget = Column(Float, nullable=True)
    timeline = Column(String(128), nullable=True)
    target_likelihood = Column(String(16), nullable=True)
    target_impact = Column(String(16), nullable=True)
    target_risk = Column(Integer, nullable=True)
    status = Column(String(16), default="DRAFT", nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    approved_by = Column(String(255), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    risk_event = relationship("RiskEvent", back_populates="treatment_plan")


class ReportExport(Base):
    __tablename__ = "report_exports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    register_id = Column(Integer, ForeignKey("risk_registers.id"), nullable=True)
    kind = Column(String(8), nullable=False)
    file_path = Column(String(1024), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="exports")
