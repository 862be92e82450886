"""Two-way (English/Spanish) language heuristic.

Weighted lexical scoring: every occurrence of a marker word counts 1, every
match of a structural pattern (article + noun, preposition, suffix, question
word) counts 0.3. The language with the strictly greater score wins; ties,
empty and missing input fall back to English. No confidence is reported.
"""

import re
from typing import Literal, Optional

Language = Literal["en", "es"]

DEFAULT_LANGUAGE: Language = "en"
PATTERN_WEIGHT = 0.3

SPANISH_MARKERS = (
    "hola", "gracias", "por favor", "consulta", "mensaje", "empresa", "saludos",
    "buenos", "buenas", "estoy", "tengo", "necesito", "necesita", "información", "informacion",
    "precio", "precios", "presupuesto", "costo", "cuánto", "cuanto", "cuándo", "cuando",
    "puede", "pueden", "sería", "seria", "me gustaría", "me gustaria", "quisiera",
    "interesado", "interesada", "interés", "interes", "servicios", "servicio",
    "desarrollo", "diseño", "diseñar", "crear", "proyecto", "proyectos",
    "gustaría", "podría", "nombre", "equipo", "estamos", "respuesta",
)

ENGLISH_MARKERS = (
    "hello", "hi", "hey", "thanks", "thank", "please", "inquiry", "message", "company",
    "regards", "would", "could", "can you", "how much", "price", "cost", "budget",
    "i need", "i want", "i am", "i have", "i'm", "information", "interested",
    "service", "services", "development", "design", "create", "project", "projects",
    "would like", "could you", "have been", "was", "were", "been", "looking for",
)

SPANISH_PATTERNS = [
    re.compile(r"\b(el|la|los|las|un|una|unos|unas)\s+\w+"),
    re.compile(r"\b(de|del|en|es|son|por|para|con|sin|sobre)\s+"),
    re.compile(r"\w+ción\b"),
    re.compile(r"\w+dad\b"),
    re.compile(r"\b(qué|cómo|dónde|cuál|quién|cuánto|cuándo)\b"),
]

ENGLISH_PATTERNS = [
    re.compile(r"\b(the|a|an)\s+\w+"),
    re.compile(r"\b(of|in|to|for|with|without|about|from|on|at)\s+"),
    re.compile(r"\w+tion\b"),
    re.compile(r"\w+ness\b"),
    re.compile(r"\b(what|how|where|which|who|when|why)\b"),
]


def _compile_markers(words: tuple[str, ...]) -> list[re.Pattern[str]]:
    return [re.compile(r"(?<!\w)" + re.escape(w) + r"(?!\w)") for w in words]


_SPANISH_MARKER_RES = _compile_markers(SPANISH_MARKERS)
_ENGLISH_MARKER_RES = _compile_markers(ENGLISH_MARKERS)


def _score(text: str, markers: list[re.Pattern[str]], patterns: list[re.Pattern[str]]) -> float:
    score = 0.0
    for marker in markers:
        score += len(marker.findall(text))
    for pattern in patterns:
        score += len(pattern.findall(text)) * PATTERN_WEIGHT
    return score


def score(text: Optional[str]) -> dict[str, float]:
    """Return raw per-language scores (useful for logging why a tag was chosen)."""
    lowered = (text or "").lower()
    return {
        "es": _score(lowered, _SPANISH_MARKER_RES, SPANISH_PATTERNS),
        "en": _score(lowered, _ENGLISH_MARKER_RES, ENGLISH_PATTERNS),
    }


def detect(text: Optional[str]) -> Language:
    """Map free text to "en" or "es". Never returns anything else."""
    if not text or not text.strip():
        return DEFAULT_LANGUAGE
    scores = score(text)
    return "es" if scores["es"] > scores["en"] else "en"


def language_name(tag: str) -> str:
    """Human-readable language name used in prompts."""
    return "Spanish" if tag == "es" else "English"
