"""Message Analyzer: classification, extraction, eligibility for one inbound message.

All functions are pure over fixed pattern tables so each rule can be tested
in isolation and swapped later.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from emailbot import language
from emailbot.models.analysis import (
    Analysis,
    Classification,
    Eligibility,
    ExtractedData,
    Mention,
)
from emailbot.models.email import InboundMessage
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.analyzer")

SHORT_MESSAGE_CHARS = 50

# Ordered rules: first match wins
_NON_ACTIONABLE_SENDER = re.compile(r"(no-reply|noreply|do-not-reply|donotreply|mailer-daemon)", re.I)
_NON_ACTIONABLE_SUBJECT = re.compile(
    r"(receipt|invoice|funded|billing|payment|charged|usage limit|limits have increased"
    r"|trial is ending|premium features|subscription|renewal|factura|recibo)",
    re.I,
)
_NON_ACTIONABLE_BODY = re.compile(
    r"(calendly|meeting scheduled|invitee|google meet|zoom\.us"
    r"|you have \d+ more days|upgrade now|workspace url|unsubscribe)",
    re.I,
)
_STUDENT = re.compile(r"(estudiante|estudio|universidad|escuela|tarea|homework|student|university|school)", re.I)
_CHANNEL_SWITCH = re.compile(r"(whatsapp|telegram|signal|contact me on|escr[ií]beme al)", re.I)
_SAMPLE = re.compile(r"(muestra|example|sample|demo|prueba)", re.I)
_OTHER_LANGUAGE = re.compile(r"(alemán|aleman|francés|frances|german|french|italiano|italian|portugu[eê]s)", re.I)

SERVICE_KEYWORDS = (
    "desarrollo web",
    "web development",
    "website",
    "sitio web",
    "app",
    "mobile",
    "diseño",
    "design",
    "consulting",
    "consultoría",
    "seo",
    "marketing",
    "ecommerce",
)

_BUDGET_PATTERNS = [
    re.compile(r"(?:presupuesto|budget|precio|price|pricing|costo|cost|cotización|quote)[\s:]*(?:de\s+)?[$€]?\s?[\d][\d,.]*(?:\s?[kK])?", re.I),
    re.compile(r"(?:entre|más de|mas de|over|between|under|up to)[\s$€]*\d[\d,.]*(?:\s?[kK])?", re.I),
    re.compile(r"(?:[$€]\s?\d[\d,.]*(?:\s?[kK])?|\d[\d,.]*\s?(?:usd|eur|dólares|dolares|euros))", re.I),
    re.compile(r"\b(?:presupuesto|budget|precio|price|pricing|costo|cost|cotización|quote)\b", re.I),
]

_TIMELINE_PATTERNS = [
    re.compile(r"(?:cuándo|cuando|timeline|deadline|plazo|lista para|ready by|launch)[\s:]*[\w ,]{0,40}", re.I),
    re.compile(r"\b(?:asap|urgente|urgent|immediately|this week|esta semana|next month|próximo mes)\b", re.I),
]

_POSITIVE = re.compile(
    r"(gracias|excelente|perfecto|me gusta|interesante|increíble|genial|interesad[oa]|encanta"
    r"|thank|great|excellent|interested|love|awesome|perfect)",
    re.I,
)
_NEGATIVE = re.compile(
    r"(not interested|no interesad[oa]|no thanks|no thank|no gracias|unfortunately|sorry"
    r"|lamentablemente|disappointed|complaint|queja)",
    re.I,
)

_HIGH_URGENCY = re.compile(r"(urgente|emergency|emergencia|ahora mismo|immediately|asap|urgent|deadline|hoy|today)", re.I)
_MEDIUM_URGENCY = re.compile(r"(esta semana|this week|pronto|soon|mañana|tomorrow|next week|próxima semana)", re.I)

SLA_HOURS = {"1h": 1, "4h": 4, "8h": 8, "24h": 24}

_AUTO_RESPONSE_SUBJECT = re.compile(
    r"^(auto(matic)?[\s:-]*(reply|response|respuesta)|out of (the )?office|fuera de la oficina"
    r"|respuesta autom[aá]tica|undeliverable|delivery status notification)",
    re.I,
)


def _text(message: InboundMessage) -> str:
    return message.message or message.body or ""


def classify_message_type(message: InboundMessage) -> Classification:
    """Ordered pattern rules over sender, subject and body; first match wins."""
    body = _text(message)
    subject = message.subject or ""
    sender = message.sender_email or ""

    if (
        _NON_ACTIONABLE_SENDER.search(sender)
        or _NON_ACTIONABLE_SUBJECT.search(subject)
        or _NON_ACTIONABLE_BODY.search(body)
    ):
        return Classification(type="non_actionable", priority="low", description="Automated notification")
    if _STUDENT.search(body):
        return Classification(type="student", priority="low", description="Student/academic project")
    if _CHANNEL_SWITCH.search(body):
        return Classification(type="whatsapp_request", priority="medium", description="Channel switch request")
    if _SAMPLE.search(body) or _SAMPLE.search(subject):
        return Classification(type="sample_request", priority="medium", description="Sample/demo request")
    if len(body.strip()) < SHORT_MESSAGE_CHARS:
        return Classification(type="short", priority="medium", description="Short message")
    if not message.company and not message.service:
        return Classification(type="vague", priority="medium", description="Vague or incomplete inquiry")
    if _OTHER_LANGUAGE.search(body):
        return Classification(type="other_language", priority="medium", description="Mentions another language")
    return Classification(type="lead", priority="high", description="Potential lead")


def extract_services(text: Optional[str]) -> list[str]:
    lowered = (text or "").lower()
    return [kw for kw in SERVICE_KEYWORDS if re.search(r"(?<!\w)" + re.escape(kw) + r"(?!\w)", lowered)]


def _first_match(patterns: list[re.Pattern[str]], text: Optional[str]) -> Mention:
    for pattern in patterns:
        match = pattern.search(text or "")
        if match:
            return Mention(mentioned=True, value=match.group(0).strip())
    return Mention()


def extract_budget(text: Optional[str]) -> Mention:
    return _first_match(_BUDGET_PATTERNS, text)


def extract_timeline(text: Optional[str]) -> Mention:
    return _first_match(_TIMELINE_PATTERNS, text)


def count_questions(text: Optional[str]) -> int:
    """Number of '?'-delimited segments that carry more than a few words."""
    if not text or "?" not in text:
        return 0
    segments = text.split("?")[:-1]
    return sum(1 for s in segments if len(s.strip()) > 10)


def analyze_sentiment(text: Optional[str]) -> str:
    body = text or ""
    positive = bool(_POSITIVE.search(body))
    negative = bool(_NEGATIVE.search(body))
    if negative:
        return "negative"
    if positive:
        return "positive"
    return "neutral"


def detect_urgency(text: Optional[str]) -> str:
    body = text or ""
    if _HIGH_URGENCY.search(body):
        return "high"
    if _MEDIUM_URGENCY.search(body):
        return "medium"
    return "normal"


def select_sla_bucket(classification: Classification, urgency: str, extracted: ExtractedData) -> str:
    """First matching urgency/value rule picks the response-time target."""
    if classification.type == "non_actionable":
        return "24h"
    if urgency == "high":
        return "1h"
    if extracted.budget.mentioned or classification.priority == "high":
        return "4h"
    if urgency == "medium" or classification.type == "sample_request":
        return "8h"
    return "24h"


def recommended_action(message: InboundMessage, classification: Classification) -> str:
    body = _text(message).lower()
    if classification.type == "non_actionable":
        return "No reply needed: automated notification"
    if _STUDENT.search(body):
        return "Redirect to free resources or educational materials"
    if re.search(r"presupuesto|precio|costo|budget|price", body):
        return "Send pricing information and package options"
    if _SAMPLE.search(body):
        return "Schedule a demo call or send case studies"
    if not message.company or not message.service:
        return "Ask clarifying questions about company and needs"
    if len(body) < SHORT_MESSAGE_CHARS:
        return "Request more details about their requirements"
    return "Send a personalized proposal based on their inquiry"


def check_eligibility(message: InboundMessage) -> Eligibility:
    """Issues are reported, not raised; the caller decides whether to skip."""
    issues: list[str] = []
    if message.already_processed:
        issues.append("already_processed")
    if not message.is_latest:
        issues.append("not_latest_in_thread")
    if message.auto_response or _AUTO_RESPONSE_SUBJECT.search(message.subject or ""):
        issues.append("auto_response")
    return Eligibility(
        eligible=not issues,
        issues=issues,
        recommendation="generate_draft" if not issues else "skip",
    )


def analyze(message: InboundMessage, now: datetime | None = None) -> Analysis:
    """Derive classification, extraction, SLA and eligibility for one message."""
    now = now or datetime.now(timezone.utc)
    body = _text(message)
    classification = classify_message_type(message)
    extracted = ExtractedData(
        services=extract_services(body),
        budget=extract_budget(body),
        timeline=extract_timeline(body),
        question_count=count_questions(body),
        language=language.detect(body),
    )
    sentiment = analyze_sentiment(body)
    urgency = detect_urgency(body)
    bucket = select_sla_bucket(classification, urgency, extracted)
    received = message.received_at or now
    action = recommended_action(message, classification)

    analysis = Analysis(
        message=message,
        classification=classification,
        extracted=extracted,
        sentiment=sentiment,
        urgency=urgency,
        sla_bucket=bucket,
        sla_deadline=received + timedelta(hours=SLA_HOURS[bucket]),
        recommended_action=action,
        agent_insight=f"Sentiment: {sentiment}. Urgency: {urgency}. {action}",
        eligibility=check_eligibility(message),
        analyzed_at=now,
    )
    logger.info(
        "analyzer.analyzed",
        external_id=message.external_id,
        message_type=classification.type,
        language=extracted.language,
        sla_bucket=bucket,
        eligible=analysis.eligibility.eligible,
    )
    return analysis
