"""Pydantic models describing questionnaire questions."""

from __future__ import annotations

from typing import Any, Callable, Literal

from pydantic import BaseModel, Field

from benefit_insights.models.profile import Profile

QuestionType = Literal["text", "number", "date", "select", "slider", "boolean", "multi-select"]


class QuizOption(BaseModel):
    label: str
    value: str
    helper: str | None = None


class QuizQuestion(BaseModel):
    """A single questionnaire step.

    ``id`` names the ``Profile`` field the answer is written to.  When
    ``condition`` is set the question only appears in the flow while the
    predicate holds for the answers given so far.  ``follow_up`` names the
    conditional question this one unlocks.
    """

    id: str
    title: str
    prompt: str
    type: QuestionType
    placeholder: str | None = None
    options: list[QuizOption] = []
    min: float | None = None
    max: float | None = None
    step: float | None = None
    follow_up: str | None = None
    condition: Callable[[Profile], bool] | None = Field(default=None, exclude=True)

    def applies_to(self, profile: Profile) -> bool:
        return self.condition is None or bool(self.condition(profile))

    def option_values(self) -> list[str]:
        return [option.value for option in self.options]

    def to_public_dict(self) -> dict[str, Any]:
        """Serializable view of the question (without the condition)."""
        return self.model_dump(mode="json", exclude_none=True)
