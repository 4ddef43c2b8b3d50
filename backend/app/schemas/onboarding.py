"""Learner profile produced by the onboarding coach."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AIExperienceLevel = Literal["novice", "beginner", "intermediate", "advanced", "expert"]
ProgrammingLevel = Literal["none", "basic", "intermediate", "advanced", "expert"]
MathLevel = Literal["basic", "college", "professional", "advanced"]
LearningTrack = Literal[
    "generalist",
    "ml-engineer",
    "data-scientist",
    "ai-researcher",
    "product-manager",
    "entrepreneur",
]
LearningPace = Literal["intensive", "steady", "relaxed"]
LearningStyle = Literal["visual", "auditory", "kinesthetic", "reading"]
ProjectPreference = Literal["theory-first", "project-first", "balanced"]
AccountabilityLevel = Literal["private", "community", "public"]
ProgressTrackingStyle = Literal["detailed", "simple"]


class ExperienceLevels(BaseModel):
    model_config = ConfigDict(frozen=True)

    ai_ml: AIExperienceLevel = "beginner"
    programming: ProgrammingLevel = "basic"
    math_stats: MathLevel = "basic"


class TimeAvailability(BaseModel):
    model_config = ConfigDict(frozen=True)

    daily_hours: float = Field(default=1.0, gt=0, le=24)
    weekend_learning: bool = False
    preferred_times: list[str] = Field(default_factory=list)
    flexible_schedule: bool = False

    @property
    def weekly_hours(self) -> float:
        weekend_hours = self.daily_hours * 2 if self.weekend_learning else 0.0
        return self.daily_hours * 5 + weekend_hours


class OnboardingProfile(BaseModel):
    """Normalized onboarding answers, ready for syllabus generation."""

    model_config = ConfigDict(frozen=True)

    current_role: str = Field(min_length=1)
    industry: str = ""
    experience_levels: ExperienceLevels = Field(default_factory=ExperienceLevels)
    primary_goals: list[str] = Field(default_factory=list)
    learning_track: LearningTrack = "generalist"
    time_availability: TimeAvailability = Field(default_factory=TimeAvailability)
    learning_pace: LearningPace = "steady"
    duration_days: Literal[30, 60, 100, 180] = 100
    motivation: list[str] = Field(default_factory=list)
    learning_styles: list[LearningStyle] = Field(default_factory=list)
    project_preference: ProjectPreference = "balanced"
    focus_areas: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    accountability_level: AccountabilityLevel = "private"
    progress_tracking_style: ProgressTrackingStyle = "simple"
    note: str = ""
    weekly_hours: float = 5.0

    def to_syllabus_answers(self) -> dict[str, Any]:
        """Flatten into the answer shape the syllabus generator prompts with."""

        experience = self.experience_levels.ai_ml
        return {
            "experience_level": "beginner" if experience == "novice" else experience,
            "goals": list(self.primary_goals),
            "weekly_hours": self.weekly_hours,
            "duration_days": self.duration_days,
            "focus_areas": list(self.focus_areas),
            "learning_track": self.learning_track,
            "learning_pace": self.learning_pace,
            "learning_styles": list(self.learning_styles),
            "project_preference": self.project_preference,
            "output_preferences": ["docs", "code-first"],
            "note": self.note or None,
        }
