"""
Pydantic models for recommendations.
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Dict, List


class Priority(str, Enum):
    """Priority tier. Total order: critical > high > medium > low."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


class ActionType(str, Enum):
    NAVIGATE = "navigate"
    CALL = "call"
    VOLUNTEER = "volunteer"
    VIEW = "view"
    SOS = "sos"


class RecommendationSource(str, Enum):
    RELIEF_POINT = "relief_point"
    SYNTHETIC = "synthetic"


class RecommendationAction(BaseModel):
    """An action the UI dispatcher can run for a recommendation."""
    id: str
    label: str
    type: ActionType
    data: Dict[str, str] = Field(default_factory=dict)


class Recommendation(BaseModel):
    """
    A ranked, explainable suggestion for one user.

    The id is derived from the candidate source, so the same underlying
    opportunity keeps its id across generation runs.
    """
    id: str
    title: str
    description: str
    priority: Priority
    confidence: float = Field(..., ge=0.0, le=1.0)
    icon: str = ""
    category: str = Field(..., description="Feedback key used for the category weight")
    source: RecommendationSource
    actions: List[RecommendationAction] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)
