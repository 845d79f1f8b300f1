"""Coaching feedback and competency ratings with DSPy."""

import logging
from functools import lru_cache

import dspy
from pydantic import ValidationError

from ..core.config import Settings
from ..core.text import is_blank
from ..schemas.competency import CompetencyRating, CompetencyRequest
from ..schemas.feedback import FeedbackOutput
from ..schemas.retrieval import RetrievalRequest

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the language model cannot produce coaching feedback."""


class FeedbackSignature(dspy.Signature):
    """You are an AI-powered communication coach for leadership conversations.

    Evaluate primarily the LEADER (manager). The transcript uses speaker labels; if
    leader_label or employee_label are given, use them to tell who is who.
    Never reveal internal sources, cards, vector databases or metadata.
    Never use real names in quotes; use the speaker labels or "Führungskraft" / "Mitarbeiter:in".
    Write the feedback in the language given by lang, or in German if none is given."""

    transcript: str = dspy.InputField(desc="the conversation transcript to analyze")
    conversation_type: str = dspy.InputField(desc="type of conversation, e.g. feedback or interview")
    goal: str = dspy.InputField(desc="what the leader wanted to achieve")
    feedback: FeedbackOutput = dspy.OutputField(desc="coaching feedback; scores on a 0-10 scale including 'overall'")


# Optional inputs, added to the signature only when the request carries them.
OPTIONAL_INPUTS = {
    "conversation_sub_type": "optional conversation subtype, e.g. kritisch",
    "lang": "output language, e.g. de or en",
    "jurisdiction": "jurisdiction context, e.g. de_eu",
    "leader_label": "speaker label of the leader, e.g. FK",
    "employee_label": "speaker label of the employee, e.g. MA",
}

GUIDANCE_DESC = "internal coaching guidance; use it to inform the feedback but do not mention or quote it"


@lru_cache(maxsize=128)
def signature_for(optional_inputs: tuple[str, ...], with_guidance: bool) -> type[dspy.Signature]:
    """Extend the base signature with the optional inputs present on a request."""
    signature = FeedbackSignature
    for name in optional_inputs:
        signature = signature.append(name, dspy.InputField(desc=OPTIONAL_INPUTS[name]), type_=str)
    if with_guidance:
        signature = signature.append("guidance", dspy.InputField(desc=GUIDANCE_DESC), type_=list[str])
    return signature


def build_inputs(request: RetrievalRequest, goal: str, guidance: list[str] | None = None) -> dict:
    """
    Build the keyword inputs for one generation call.

    Blank optional fields are left out entirely, and `guidance` is present only
    when there is at least one snippet.
    """
    inputs = {
        "transcript": request.transcript_text,
        "conversation_type": request.conversation_type,
        "goal": goal,
    }
    for name in OPTIONAL_INPUTS:
        value = getattr(request, name)
        if not is_blank(value):
            inputs[name] = value.strip()
    if guidance:
        inputs["guidance"] = list(guidance)
    return inputs


def build_lm(settings: Settings) -> dspy.LM:
    return dspy.LM(
        settings.GENERATION_MODEL,
        api_key=settings.GENERATION_API_KEY,
        temperature=settings.GENERATION_TEMPERATURE,
    )


def run_program(lm: dspy.LM | None, signature: type[dspy.Signature], inputs: dict, task: str) -> dspy.Prediction:
    """Run a `dspy.Predict` program with `lm`, wrapping any failure in GenerationError."""
    program = dspy.Predict(signature)
    try:
        with dspy.context(lm=lm):
            return program(**inputs)
    except Exception as e:
        logger.error(f"{task} failed: {e}")
        raise GenerationError(f"{task} failed: {e}") from e


class FeedbackGenerator:
    """
    Generates structured coaching feedback.

    The language model is passed in rather than configured globally, and is
    applied with `dspy.context` for each call.
    """

    def __init__(self, lm: dspy.LM | None = None):
        self.lm = lm

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeedbackGenerator":
        return cls(build_lm(settings))

    def generate(self, request: RetrievalRequest, goal: str, guidance: list[str] | None = None) -> FeedbackOutput:
        """
        Run the feedback program for a request.

        Args:
            request: The coaching request.
            goal: The goal to evaluate against.
            guidance: Retrieved snippets; empty or None leaves the guidance input out.

        Returns:
            The validated FeedbackOutput.

        Raises:
            GenerationError: If the model call fails or returns no usable feedback.
        """
        inputs = build_inputs(request, goal, guidance)
        optional = tuple(name for name in OPTIONAL_INPUTS if name in inputs)
        prediction = run_program(self.lm, signature_for(optional, "guidance" in inputs), inputs, "Feedback generation")

        feedback = getattr(prediction, "feedback", None)
        if isinstance(feedback, dict):
            try:
                feedback = FeedbackOutput.model_validate(feedback)
            except ValidationError as e:
                raise GenerationError(f"The model returned malformed feedback: {e}") from e
        if not isinstance(feedback, FeedbackOutput):
            raise GenerationError("The model returned no feedback.")
        return feedback


class CompetencySignature(dspy.Signature):
    """You are an experienced leadership coach.

    Rate ONLY the behavior of the leader in the transcript on the competencies C1 to C10.
    Use only what is actually visible in the transcript; do not speculate.

    Scale 1 to 4: 1 = weak or counterproductive, 2 = first solid attempts,
    3 = good and mostly effective, 4 = very good or exemplary in this situation.
    If a competency is not observable, set score to null and why to "nicht ausreichend beobachtbar".

    Evidence: one or two short quotes (at most about 18 words), anonymized. Always prefix
    them with "Führungskraft:" or "Mitarbeiter:in:", never with real names.

    Competencies:
    C1 Integrieren und Verbinden
    C2 Klarheit und Entscheidungsstärke
    C3 Befähigen und Entwickeln
    C4 Sicherheit und Stabilität geben
    C5 Kommunikation und Kooperation
    C6 Zielorientierte Umsetzung
    C7 Innovative Kultur fördern
    C8 Selbstreflexion und Lernmotivation
    C9 Zukunftsorientierung und strategischer Weitblick
    C10 KI- und Datenkompetenz"""

    transcript: str = dspy.InputField(desc="the conversation transcript to rate")
    competencies: list[CompetencyRating] = dspy.OutputField(desc="one rating per competency, C1 to C10")


COMPETENCY_OPTIONAL_INPUTS = ("lang", "leader_label", "employee_label")


@lru_cache(maxsize=16)
def competency_signature_for(optional_inputs: tuple[str, ...]) -> type[dspy.Signature]:
    signature = CompetencySignature
    for name in optional_inputs:
        signature = signature.append(name, dspy.InputField(desc=OPTIONAL_INPUTS[name]), type_=str)
    return signature


class CompetencyScorer:
    """Rates the leader of a conversation on the competency model."""

    def __init__(self, lm: dspy.LM | None = None):
        self.lm = lm

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompetencyScorer":
        return cls(build_lm(settings))

    def score(self, request: CompetencyRequest) -> list[CompetencyRating]:
        """
        Rate the competencies shown in a transcript.

        Raises:
            ValueError: If the transcript is blank.
            GenerationError: If the model call fails or returns no usable ratings.
        """
        if is_blank(request.transcript_text):
            raise ValueError("Missing transcriptText.")

        inputs = {"transcript": request.transcript_text}
        for name in COMPETENCY_OPTIONAL_INPUTS:
            value = getattr(request, name)
            if not is_blank(value):
                inputs[name] = value.strip()
        optional = tuple(name for name in COMPETENCY_OPTIONAL_INPUTS if name in inputs)
        prediction = run_program(self.lm, competency_signature_for(optional), inputs, "Competency scoring")

        ratings = getattr(prediction, "competencies", None)
        if not isinstance(ratings, list):
            raise GenerationError("The model returned no competency ratings.")
        try:
            return [CompetencyRating.model_validate(rating) for rating in ratings]
        except ValidationError as e:
            raise GenerationError(f"The model returned malformed competency ratings: {e}") from e
