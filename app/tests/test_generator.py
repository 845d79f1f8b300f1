"""Tests for the DSPy feedback generator and competency scorer."""

from unittest.mock import MagicMock, patch

import pytest

from app.rag.generator import (
    CompetencyScorer,
    FeedbackGenerator,
    FeedbackSignature,
    GenerationError,
    build_inputs,
    competency_signature_for,
    signature_for,
)
from app.schemas.competency import CompetencyRating, CompetencyRequest
from app.schemas.feedback import FeedbackOutput


def mock_prediction(feedback):
    """Helper to create a mock object simulating dspy.Prediction."""
    mock = MagicMock()
    mock.feedback = feedback
    return mock


class TestBuildInputs:
    def test_required_inputs_only(self, sample_request):
        inputs = build_inputs(sample_request, goal="Ziel")
        assert inputs == {
            "transcript": "FK: Hallo\nMA: Hallo",
            "conversation_type": "feedback",
            "goal": "Ziel",
        }

    def test_optional_inputs_added_when_present(self, sample_request):
        request = sample_request._replace(lang=" de ", jurisdiction="de_eu", leader_label="FK", employee_label="")
        inputs = build_inputs(request, goal="Ziel")

        assert inputs["lang"] == "de"
        assert inputs["jurisdiction"] == "de_eu"
        assert inputs["leader_label"] == "FK"
        assert "employee_label" not in inputs
        assert "conversation_sub_type" not in inputs

    def test_guidance_omitted_when_empty(self, sample_request):
        assert "guidance" not in build_inputs(sample_request, goal="Ziel", guidance=[])
        assert "guidance" not in build_inputs(sample_request, goal="Ziel", guidance=None)

    def test_guidance_included_when_present(self, sample_request):
        inputs = build_inputs(sample_request, goal="Ziel", guidance=["[#a score=0.900]\nText"])
        assert inputs["guidance"] == ["[#a score=0.900]\nText"]


class TestSignatureFor:
    def test_base_signature(self):
        signature = signature_for((), False)
        assert list(signature.input_fields) == ["transcript", "conversation_type", "goal"]
        assert list(signature.output_fields) == ["feedback"]

    def test_optional_inputs_and_guidance_are_appended(self):
        signature = signature_for(("lang", "jurisdiction"), True)
        assert list(signature.input_fields) == [
            "transcript",
            "conversation_type",
            "goal",
            "lang",
            "jurisdiction",
            "guidance",
        ]
        assert list(signature.output_fields) == ["feedback"]

    def test_base_signature_is_not_modified(self):
        signature_for(("lang",), True)
        assert "guidance" not in FeedbackSignature.input_fields


@patch("app.rag.generator.dspy.Predict")
class TestGenerate:
    def test_returns_feedback(self, mock_predict, sample_request, sample_feedback):
        mock_predict.return_value.return_value = mock_prediction(sample_feedback)

        result = FeedbackGenerator().generate(sample_request, goal="Ziel", guidance=["snippet"])

        assert result == sample_feedback
        mock_predict.return_value.assert_called_once_with(
            transcript="FK: Hallo\nMA: Hallo",
            conversation_type="feedback",
            goal="Ziel",
            guidance=["snippet"],
        )

    def test_signature_matches_inputs(self, mock_predict, sample_request, sample_feedback):
        mock_predict.return_value.return_value = mock_prediction(sample_feedback)

        FeedbackGenerator().generate(sample_request._replace(lang="de"), goal="Ziel")

        signature = mock_predict.call_args.args[0]
        assert "lang" in signature.input_fields
        assert "guidance" not in signature.input_fields

    def test_dict_output_is_validated(self, mock_predict, sample_request):
        mock_predict.return_value.return_value = mock_prediction({"summary": "Kurz", "scores": {"overall": 6}})

        result = FeedbackGenerator().generate(sample_request, goal="Ziel")

        assert isinstance(result, FeedbackOutput)
        assert result.summary == "Kurz"
        assert result.strengths == []
        assert result.scores == {"overall": 6.0}

    def test_model_failure_raises_generation_error(self, mock_predict, sample_request):
        mock_predict.return_value.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(GenerationError, match="quota exceeded") as exc_info:
            FeedbackGenerator().generate(sample_request, goal="Ziel")

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_missing_feedback_raises_generation_error(self, mock_predict, sample_request):
        mock_predict.return_value.return_value = mock_prediction(None)

        with pytest.raises(GenerationError, match="no feedback"):
            FeedbackGenerator().generate(sample_request, goal="Ziel")

    def test_malformed_feedback_raises_generation_error(self, mock_predict, sample_request):
        mock_predict.return_value.return_value = mock_prediction({"strengths": "not a list"})

        with pytest.raises(GenerationError, match="malformed"):
            FeedbackGenerator().generate(sample_request, goal="Ziel")


def make_rating(**overrides) -> dict:
    rating = {
        "id": "C2",
        "name": "Klarheit und Entscheidungsstärke",
        "score": 3,
        "confidence": 0.7,
        "why": "Klare Erwartungen formuliert.",
        "evidence": ["Führungskraft: Ich erwarte den Bericht bis Freitag."],
    }
    rating.update(overrides)
    return rating


class TestCompetencySignatureFor:
    def test_base_signature(self):
        signature = competency_signature_for(())
        assert list(signature.input_fields) == ["transcript"]
        assert list(signature.output_fields) == ["competencies"]

    def test_optional_inputs_are_appended(self):
        signature = competency_signature_for(("lang", "leader_label"))
        assert list(signature.input_fields) == ["transcript", "lang", "leader_label"]


@patch("app.rag.generator.dspy.Predict")
class TestCompetencyScorer:
    def test_returns_validated_ratings(self, mock_predict):
        prediction = MagicMock()
        prediction.competencies = [make_rating(), make_rating(id="C7", score=None, confidence=None, evidence=[])]
        mock_predict.return_value.return_value = prediction

        ratings = CompetencyScorer().score(CompetencyRequest(transcript_text="FK: Hallo", lang=" de ", leader_label=""))

        assert [rating.id for rating in ratings] == ["C2", "C7"]
        assert all(isinstance(rating, CompetencyRating) for rating in ratings)
        assert ratings[1].score is None
        mock_predict.return_value.assert_called_once_with(transcript="FK: Hallo", lang="de")

    def test_blank_transcript_is_rejected(self, mock_predict):
        with pytest.raises(ValueError, match="Missing transcriptText"):
            CompetencyScorer().score(CompetencyRequest(transcript_text="   "))

        mock_predict.return_value.assert_not_called()

    def test_model_failure_raises_generation_error(self, mock_predict):
        mock_predict.return_value.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(GenerationError, match="Competency scoring failed: quota exceeded"):
            CompetencyScorer().score(CompetencyRequest(transcript_text="FK: Hallo"))

    def test_missing_ratings_raise_generation_error(self, mock_predict):
        prediction = MagicMock()
        prediction.competencies = None
        mock_predict.return_value.return_value = prediction

        with pytest.raises(GenerationError, match="no competency ratings"):
            CompetencyScorer().score(CompetencyRequest(transcript_text="FK: Hallo"))

    @pytest.mark.parametrize(
        "overrides",
        [{"score": 5}, {"score": 0}, {"confidence": 1.5}, {"evidence": ["a", "b", "c", "d"]}],
    )
    def test_out_of_range_ratings_raise_generation_error(self, mock_predict, overrides):
        prediction = MagicMock()
        prediction.competencies = [make_rating(**overrides)]
        mock_predict.return_value.return_value = prediction

        with pytest.raises(GenerationError, match="malformed competency ratings"):
            CompetencyScorer().score(CompetencyRequest(transcript_text="FK: Hallo"))
