from pydantic import BaseModel, field_validator

from nextmove.services.phase_tracker import Phase


class RoadmapStep(BaseModel):
    id: int
    phase: str
    title: str
    description: str
    completed: bool


class ProgressRead(BaseModel):
    current_phase: str
    completed_phases: list[str]
    progress: int
    onboarding_completed: bool
    roadmap: list[RoadmapStep]


class PhaseUpdate(BaseModel):
    phase: Phase

    @field_validator("phase", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.strip().lower() if isinstance(value, str) else value
