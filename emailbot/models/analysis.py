"""Analyzer output models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from emailbot.models.email import InboundMessage


class Classification(BaseModel):
    type: str
    priority: Literal["low", "medium", "high"]
    description: str


class Mention(BaseModel):
    """Presence of budget/timeline vocabulary and the raw matched text (not a parsed value)."""

    mentioned: bool = False
    value: Optional[str] = None


class ExtractedData(BaseModel):
    services: list[str] = []
    budget: Mention = Mention()
    timeline: Mention = Mention()
    question_count: int = 0
    language: Literal["en", "es"] = "en"


class Eligibility(BaseModel):
    eligible: bool
    issues: list[str] = []
    recommendation: Literal["generate_draft", "skip"] = "generate_draft"


class Analysis(BaseModel):
    """Everything the generator needs: the message itself plus derived signals."""

    message: InboundMessage
    classification: Classification
    extracted: ExtractedData
    sentiment: Literal["positive", "negative", "neutral"]
    urgency: Literal["high", "medium", "normal"]
    sla_bucket: Literal["1h", "4h", "8h", "24h"]
    sla_deadline: datetime
    recommended_action: str
    agent_insight: str
    eligibility: Eligibility
    analyzed_at: datetime
