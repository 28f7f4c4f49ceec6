"""
Evaluation Response Pipeline
============================

Runs one request through validate -> compose -> invoke -> parse and returns a
normalized result or raises a classified PipelineError. The pipeline holds no
state between requests; the model invoker is passed in at construction.

Only validation (400) and invocation (500) problems surface as errors. An
unreliable model reply is absorbed by the parsers: an empty question list, an
absent score, or a Fallback criterion result carrying the raw reply.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional

from .errors import InputValidationError, ServiceInvocationError
from .openai_client import ModelInvoker
from .parsers import Fallback, Parsed, parse_criterion_result, parse_question_list, parse_score
from .prompts import compose
from .schemas import (
	CRITERIA_BY_KIND,
	EvaluationRequest,
	GeneratedQuestionSet,
	NarrativeEvaluationResult,
	TaskKind,
	TranscriptionResult,
)

logger = logging.getLogger(__name__)


REQUIRED_FIELDS: Dict[TaskKind, List[str]] = {
	TaskKind.GENERATE_READING_QUESTIONS: ["passage"],
	TaskKind.GENERATE_LISTENING_QUESTIONS: ["transcript"],
	TaskKind.EVALUATE_READING: ["passage", "questions", "answers"],
	TaskKind.EVALUATE_LISTENING: ["transcript", "questions", "answers"],
	TaskKind.EVALUATE_WRITING: ["topic", "essay"],
	TaskKind.EVALUATE_SPEAKING: ["topic", "transcript"],
	TaskKind.TRANSCRIBE_SPEECH: ["audio"],
}

VALIDATION_MESSAGES: Dict[TaskKind, str] = {
	TaskKind.GENERATE_READING_QUESTIONS: "Passage is required",
	TaskKind.GENERATE_LISTENING_QUESTIONS: "Transcript is required",
	TaskKind.EVALUATE_READING: "Passage, questions, and answers are required",
	TaskKind.EVALUATE_LISTENING: "Transcript, questions, and answers are required",
	TaskKind.EVALUATE_WRITING: "Topic and essay are required",
	TaskKind.EVALUATE_SPEAKING: "Topic and transcript are required",
	TaskKind.TRANSCRIBE_SPEECH: "Audio file is required",
}

FAILURE_MESSAGES: Dict[TaskKind, str] = {
	TaskKind.GENERATE_READING_QUESTIONS: "Failed to generate questions",
	TaskKind.GENERATE_LISTENING_QUESTIONS: "Failed to generate questions",
	TaskKind.EVALUATE_READING: "Failed to evaluate answers",
	TaskKind.EVALUATE_LISTENING: "Failed to evaluate answers",
	TaskKind.EVALUATE_WRITING: "Failed to evaluate essay",
	TaskKind.EVALUATE_SPEAKING: "Failed to evaluate speech",
	TaskKind.TRANSCRIBE_SPEECH: "Failed to transcribe audio",
}


def _is_present(value: Any) -> bool:
	if isinstance(value, str):
		return bool(value.strip())
	if isinstance(value, (bytes, bytearray)):
		return len(value) > 0
	if isinstance(value, (list, tuple)):
		return len(value) > 0
	return False


def missing_fields(kind: TaskKind, fields: Mapping[str, Any]) -> List[str]:
	return [name for name in REQUIRED_FIELDS[kind] if not _is_present(fields.get(name))]


class EvaluationPipeline:
	def __init__(self, invoker: ModelInvoker) -> None:
		self.invoker = invoker

	async def run(self, request: EvaluationRequest) -> Any:
		kind = request.kind
		fields = request.fields

		logger.debug("%s: validating", kind.value)
		missing = missing_fields(kind, fields)
		if missing:
			logger.info("%s: rejected request, missing %s", kind.value, ", ".join(missing))
			raise InputValidationError(VALIDATION_MESSAGES[kind])

		if kind == TaskKind.TRANSCRIBE_SPEECH:
			return await self._transcribe(fields)

		logger.debug("%s: composing", kind.value)
		prompt = compose(kind, fields)

		logger.debug("%s: invoking model", kind.value)
		try:
			raw = await self.invoker.complete(
				prompt.system,
				prompt.user,
				temperature=prompt.temperature,
				json_mode=prompt.json_mode,
			)
		except Exception as e:
			logger.exception("%s: model invocation failed: %s", kind.value, e)
			raise ServiceInvocationError(FAILURE_MESSAGES[kind], details=str(e)) from e

		logger.debug("%s: parsing", kind.value)
		return self._parse(kind, raw)

	async def _transcribe(self, fields: Mapping[str, Any]) -> TranscriptionResult:
		kind = TaskKind.TRANSCRIBE_SPEECH
		logger.debug("%s: invoking model", kind.value)
		try:
			text = await self.invoker.transcribe(
				bytes(fields["audio"]),
				filename=fields.get("filename"),
				content_type=fields.get("content_type"),
			)
		except Exception as e:
			logger.exception("%s: model invocation failed: %s", kind.value, e)
			raise ServiceInvocationError(FAILURE_MESSAGES[kind], details=str(e)) from e
		return TranscriptionResult(transcript=text)

	def _parse(self, kind: TaskKind, raw: str) -> Any:
		if kind in (TaskKind.GENERATE_READING_QUESTIONS, TaskKind.GENERATE_LISTENING_QUESTIONS):
			questions = parse_question_list(raw)
			if not questions:
				logger.warning("%s: model reply contained no usable questions", kind.value)
			return GeneratedQuestionSet(questions=questions)

		if kind in (TaskKind.EVALUATE_READING, TaskKind.EVALUATE_LISTENING):
			score = parse_score(raw)
			if score is not None and score > 100:
				logger.warning("%s: ignoring out-of-range score %d%%", kind.value, score)
				score = None
			return NarrativeEvaluationResult(feedback=raw, score=score)

		outcome = parse_criterion_result(raw, CRITERIA_BY_KIND[kind])
		if isinstance(outcome, Parsed):
			return outcome.data
		if isinstance(outcome, Fallback):
			logger.warning("%s: model reply was not a JSON object, using fallback scores", kind.value)
			return outcome.to_result().model_dump()
		raise TypeError(f"Unhandled parse outcome {outcome!r}")

	# ---- per-operation entry points ----

	async def generate_reading_questions(self, passage: Optional[str]) -> GeneratedQuestionSet:
		return await self.run(EvaluationRequest(
			kind=TaskKind.GENERATE_READING_QUESTIONS,
			fields={"passage": passage},
		))

	async def generate_listening_questions(self, transcript: Optional[str]) -> GeneratedQuestionSet:
		return await self.run(EvaluationRequest(
			kind=TaskKind.GENERATE_LISTENING_QUESTIONS,
			fields={"transcript": transcript},
		))

	async def evaluate_reading(
		self,
		passage: Optional[str],
		questions: Optional[List[str]],
		answers: Optional[List[Optional[str]]],
	) -> NarrativeEvaluationResult:
		return await self.run(EvaluationRequest(
			kind=TaskKind.EVALUATE_READING,
			fields={"passage": passage, "questions": questions, "answers": answers},
		))

	async def evaluate_listening(
		self,
		transcript: Optional[str],
		questions: Optional[List[str]],
		answers: Optional[List[Optional[str]]],
	) -> NarrativeEvaluationResult:
		return await self.run(EvaluationRequest(
			kind=TaskKind.EVALUATE_LISTENING,
			fields={"transcript": transcript, "questions": questions, "answers": answers},
		))

	async def evaluate_writing(self, topic: Optional[str], essay: Optional[str]) -> Dict[str, Any]:
		return await self.run(EvaluationRequest(
			kind=TaskKind.EVALUATE_WRITING,
			fields={"topic": topic, "essay": essay},
		))

	async def evaluate_speaking(self, topic: Optional[str], transcript: Optional[str]) -> Dict[str, Any]:
		return await self.run(EvaluationRequest(
			kind=TaskKind.EVALUATE_SPEAKING,
			fields={"topic": topic, "transcript": transcript},
		))

	async def transcribe_speech(
		self,
		audio: Optional[bytes],
		*,
		filename: Optional[str] = None,
		content_type: Optional[str] = None,
	) -> TranscriptionResult:
		return await self.run(EvaluationRequest(
			kind=TaskKind.TRANSCRIBE_SPEECH,
			fields={"audio": audio, "filename": filename, "content_type": content_type},
		))
