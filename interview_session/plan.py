"""Static question plan shared by every interview."""
from __future__ import annotations

from typing import List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["easy", "medium", "hard"]


class PlanSlot(BaseModel):
    """One (difficulty, time limit) pair in the fixed question sequence."""

    model_config = ConfigDict(frozen=True)

    difficulty: Difficulty
    time_limit_seconds: int = Field(gt=0)


QUESTION_PLAN: Tuple[PlanSlot, ...] = (
    PlanSlot(difficulty="easy", time_limit_seconds=20),
    PlanSlot(difficulty="easy", time_limit_seconds=20),
    PlanSlot(difficulty="medium", time_limit_seconds=60),
    PlanSlot(difficulty="medium", time_limit_seconds=60),
    PlanSlot(difficulty="hard", time_limit_seconds=120),
    PlanSlot(difficulty="hard", time_limit_seconds=120),
)


def difficulty_sequence(plan: Tuple[PlanSlot, ...] = QUESTION_PLAN) -> List[str]:
    return [slot.difficulty for slot in plan]


def plan_payload(plan: Tuple[PlanSlot, ...] = QUESTION_PLAN) -> List[dict]:
    """Plan rendered for clients (camelCase keys)."""

    return [
        {"difficulty": slot.difficulty, "timeLimitSeconds": slot.time_limit_seconds}
        for slot in plan
    ]


__all__ = ["Difficulty", "PlanSlot", "QUESTION_PLAN", "difficulty_sequence", "plan_payload"]
