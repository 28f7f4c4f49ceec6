"""Tests for the evaluation pipeline against a scripted model invoker."""

from __future__ import annotations

import json

import pytest

from ielts_coach.errors import InputValidationError, ModelServiceError, ServiceInvocationError
from ielts_coach.pipeline import EvaluationPipeline, missing_fields
from ielts_coach.schemas import EvaluationRequest, GeneratedQuestionSet, NarrativeEvaluationResult, \
    SPEAKING_CRITERIA, TaskKind, TranscriptionResult, WRITING_CRITERIA


@pytest.mark.anyio
async def test_generates_questions_from_passage(fake_invoker) -> None:
	fake_invoker.reply = "What is the capital of France?\n\n1. Numbered leftover\nWhich country is described?\n"
	pipeline = EvaluationPipeline(fake_invoker)

	result = await pipeline.generate_reading_questions("Paris is the capital of France.")

	assert isinstance(result, GeneratedQuestionSet)
	assert result.questions == ["What is the capital of France?", "Which country is described?"]
	call = fake_invoker.completions[0]
	assert call["temperature"] == 0.7
	assert call["json_mode"] is False
	assert "Paris is the capital of France." in call["user"]


@pytest.mark.anyio
async def test_unusable_question_reply_is_an_empty_set(fake_invoker) -> None:
	fake_invoker.reply = "1. First\n2. Second"

	result = await EvaluationPipeline(fake_invoker).generate_listening_questions("A short talk.")

	assert result.questions == []


@pytest.mark.anyio
async def test_reading_evaluation_extracts_score(fake_invoker) -> None:
	fake_invoker.reply = "Score: 80%\nQ1 correct. Q2 partially correct (worth 50%)."

	result = await EvaluationPipeline(fake_invoker).evaluate_reading("Text", ["Q?"], ["A"])

	assert isinstance(result, NarrativeEvaluationResult)
	assert result.score == 80
	assert result.feedback == fake_invoker.reply
	assert fake_invoker.completions[0]["temperature"] == 0.3


@pytest.mark.anyio
async def test_listening_evaluation_without_percentage_has_no_score(fake_invoker) -> None:
	fake_invoker.reply = "Good understanding of the main ideas."

	result = await EvaluationPipeline(fake_invoker).evaluate_listening("Transcript", ["Q?"], [""])

	assert result.score is None
	assert result.feedback == "Good understanding of the main ideas."


@pytest.mark.anyio
async def test_out_of_range_percentage_is_dropped(fake_invoker) -> None:
	fake_invoker.reply = "You gave 150% effort."

	result = await EvaluationPipeline(fake_invoker).evaluate_reading("Text", ["Q?"], ["A"])

	assert result.score is None


@pytest.mark.anyio
async def test_writing_valid_json_passes_through(fake_invoker) -> None:
	reply = {
		"overallScore": 7,
		"criteria": {key: 7 for key in WRITING_CRITERIA},
		"feedback": "Well organised.",
		"suggestions": ["Check articles."],
	}
	fake_invoker.reply = json.dumps(reply)

	result = await EvaluationPipeline(fake_invoker).evaluate_writing("Cities", "Cities are big.")

	assert result == reply
	assert fake_invoker.completions[0]["json_mode"] is True


@pytest.mark.anyio
async def test_writing_malformed_json_uses_fallback(fake_invoker) -> None:
	fake_invoker.reply = "The essay deserves a 7 but I cannot format JSON."

	result = await EvaluationPipeline(fake_invoker).evaluate_writing("Cities", "Cities are big.")

	assert result == {
		"overallScore": 6,
		"criteria": {key: 6 for key in WRITING_CRITERIA},
		"feedback": "The essay deserves a 7 but I cannot format JSON.",
		"suggestions": [],
	}


@pytest.mark.anyio
async def test_speaking_fallback_uses_speaking_key_set(fake_invoker) -> None:
	fake_invoker.reply = '{"overallScore": 7,'

	result = await EvaluationPipeline(fake_invoker).evaluate_speaking("Hobbies", "I like chess.")

	assert set(result["criteria"]) == set(SPEAKING_CRITERIA)
	assert result["feedback"] == '{"overallScore": 7,'


@pytest.mark.parametrize(
	"kind, fields, message",
	[
		(TaskKind.GENERATE_READING_QUESTIONS, {}, "Passage is required"),
		(TaskKind.GENERATE_LISTENING_QUESTIONS, {"transcript": "   "}, "Transcript is required"),
		(TaskKind.EVALUATE_READING, {"passage": "p", "questions": [], "answers": ["a"]},
			"Passage, questions, and answers are required"),
		(TaskKind.EVALUATE_LISTENING, {"transcript": "t", "questions": ["q"]},
			"Transcript, questions, and answers are required"),
		(TaskKind.EVALUATE_WRITING, {"topic": "Cities"}, "Topic and essay are required"),
		(TaskKind.EVALUATE_SPEAKING, {"transcript": "I like chess."}, "Topic and transcript are required"),
		(TaskKind.TRANSCRIBE_SPEECH, {"audio": b""}, "Audio file is required"),
	],
)
@pytest.mark.anyio
async def test_validation_failures_make_no_model_call(fake_invoker, kind, fields, message) -> None:
	with pytest.raises(InputValidationError) as exc_info:
		await EvaluationPipeline(fake_invoker).run(EvaluationRequest(kind=kind, fields=fields))

	assert exc_info.value.message == message
	assert exc_info.value.status_code == 400
	assert fake_invoker.calls == 0


@pytest.mark.anyio
async def test_invoker_failure_is_classified_with_details(fake_invoker) -> None:
	fake_invoker.error = ModelServiceError("upstream returned 503")

	with pytest.raises(ServiceInvocationError) as exc_info:
		await EvaluationPipeline(fake_invoker).evaluate_speaking("Hobbies", "I like chess.")

	assert exc_info.value.message == "Failed to evaluate speech"
	assert exc_info.value.details == "upstream returned 503"
	assert exc_info.value.status_code == 500
	assert len(fake_invoker.completions) == 1


@pytest.mark.anyio
async def test_unexpected_invoker_exception_is_also_classified(fake_invoker) -> None:
	fake_invoker.error = TimeoutError("read timed out")

	with pytest.raises(ServiceInvocationError) as exc_info:
		await EvaluationPipeline(fake_invoker).generate_reading_questions("Paris.")

	assert exc_info.value.message == "Failed to generate questions"
	assert exc_info.value.details == "read timed out"


@pytest.mark.anyio
async def test_transcription_passes_audio_metadata(fake_invoker) -> None:
	fake_invoker.transcript = "I enjoy playing chess with my friends."

	result = await EvaluationPipeline(fake_invoker).transcribe_speech(
		b"RIFF....", filename="answer.wav", content_type="audio/wav",
	)

	assert result == TranscriptionResult(transcript="I enjoy playing chess with my friends.")
	assert fake_invoker.transcriptions == [
		{"audio": b"RIFF....", "filename": "answer.wav", "content_type": "audio/wav"}
	]
	assert fake_invoker.completions == []


@pytest.mark.anyio
async def test_transcription_failure(fake_invoker) -> None:
	fake_invoker.error = ModelServiceError("bad audio")

	with pytest.raises(ServiceInvocationError) as exc_info:
		await EvaluationPipeline(fake_invoker).transcribe_speech(b"\x00\x01")

	assert exc_info.value.message == "Failed to transcribe audio"


def test_missing_fields_lists_every_gap() -> None:
	assert missing_fields(TaskKind.EVALUATE_READING, {"passage": " ", "answers": ["a"]}) == ["passage", "questions"]
