"""
Scenario documents - Caller-side input for the command-line driver.

A scenario YAML file stands in for the persistent store: projects, people,
memberships, allocations, absences and deliverable assignments. Records are
validated with pydantic and converted into domain entities.
"""
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from secdelivery.config import ConfigurationError
from secdelivery.domain.entities import (
    AbsenceInterval,
    AllocationRecord,
    DeliverableAssignment,
    ProjectMembership,
    UserProfile,
)


class ProjectRecord(BaseModel):
    id: str
    title: str
    start_date: Optional[date] = None
    go_live: Optional[date] = None


class ProfileRecord(BaseModel):
    user_id: str
    first_name: str = ""
    last_name: str = ""
    primary_role: Optional[str] = None
    sfia_grade: Optional[int] = None
    workstream: Optional[str] = None
    disabled: bool = False

    def to_entity(self) -> UserProfile:
        return UserProfile(**self.model_dump())


class MembershipRecord(BaseModel):
    user_id: str
    project_id: str
    role: str = ""

    def to_entity(self) -> ProjectMembership:
        return ProjectMembership(**self.model_dump())


class AllocationRow(BaseModel):
    user_id: str
    project_id: str
    percentage: float = Field(ge=0)
    effective_at: Optional[datetime] = None

    @field_validator("effective_at", mode="before")
    @classmethod
    def _date_to_midnight(cls, value):
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, datetime.min.time())
        return value

    def to_entity(self) -> AllocationRecord:
        return AllocationRecord(**self.model_dump())


class AbsenceRecord(BaseModel):
    user_id: str
    start_date: date
    end_date: date
    absence_type: str = "annual_leave"

    def to_entity(self) -> AbsenceInterval:
        return AbsenceInterval(**self.model_dump())


class AssignmentRecord(BaseModel):
    project_id: str
    deliverable_name: str
    required: bool = True
    is_completed: bool = False
    effort_hours: float = 0.0
    due_date: Optional[date] = None
    owner_role: str = ""

    def to_entity(self) -> DeliverableAssignment:
        return DeliverableAssignment(**self.model_dump(exclude={"project_id"}))


class Scenario(BaseModel):
    """Everything the engine needs for one or more projects."""

    projects: List[ProjectRecord] = Field(default_factory=list)
    profiles: List[ProfileRecord] = Field(default_factory=list)
    memberships: List[MembershipRecord] = Field(default_factory=list)
    current_allocations: List[AllocationRow] = Field(default_factory=list)
    allocation_history: List[AllocationRow] = Field(default_factory=list)
    absences: List[AbsenceRecord] = Field(default_factory=list)
    assignments: List[AssignmentRecord] = Field(default_factory=list)

    def project(self, project_id: str) -> Optional[ProjectRecord]:
        return next((p for p in self.projects if p.id == project_id), None)

    def project_titles(self) -> Dict[str, str]:
        return {p.id: p.title for p in self.projects}

    def profile_map(self) -> Dict[str, UserProfile]:
        return {p.user_id: p.to_entity() for p in self.profiles}

    def membership_entities(self) -> List[ProjectMembership]:
        return [m.to_entity() for m in self.memberships]

    def current_allocation_entities(self) -> List[AllocationRecord]:
        return [a.to_entity() for a in self.current_allocations]

    def history_entities(self) -> List[AllocationRecord]:
        return [a.to_entity() for a in self.allocation_history]

    def absence_entities(self) -> List[AbsenceInterval]:
        return [a.to_entity() for a in self.absences]

    def assignments_for(self, project_id: str) -> List[DeliverableAssignment]:
        return [a.to_entity() for a in self.assignments if a.project_id == project_id]


def load_scenario(path) -> Scenario:
    """
    Load and validate a scenario YAML file.

    Raises:
        ConfigurationError: If the file is missing, not YAML, or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Scenario file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in scenario file: {e}")

    try:
        return Scenario.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid scenario file {path}: {e}")
