from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskKind(str, Enum):
	GENERATE_READING_QUESTIONS = "generate_reading_questions"
	GENERATE_LISTENING_QUESTIONS = "generate_listening_questions"
	EVALUATE_READING = "evaluate_reading"
	EVALUATE_LISTENING = "evaluate_listening"
	EVALUATE_WRITING = "evaluate_writing"
	EVALUATE_SPEAKING = "evaluate_speaking"
	TRANSCRIBE_SPEECH = "transcribe_speech"


WRITING_CRITERIA: List[str] = [
	"task_achievement",
	"coherence_cohesion",
	"lexical_resource",
	"grammatical_range_accuracy",
]

SPEAKING_CRITERIA: List[str] = [
	"fluency_coherence",
	"lexical_resource",
	"grammatical_range_accuracy",
	"pronunciation",
]

CRITERIA_BY_KIND: Dict[TaskKind, List[str]] = {
	TaskKind.EVALUATE_WRITING: WRITING_CRITERIA,
	TaskKind.EVALUATE_SPEAKING: SPEAKING_CRITERIA,
}


class EvaluationRequest(BaseModel):
	"""
	One pipeline invocation.

	`fields` holds the kind-specific caller input (passage, transcript, topic,
	essay, questions, answers or the raw audio payload). Validation happens in
	the pipeline so that an incomplete request is reported as a client error.
	"""
	kind: TaskKind
	fields: Dict[str, Any] = Field(default_factory=dict)


class GeneratedQuestionSet(BaseModel):
	questions: List[str]


class NarrativeEvaluationResult(BaseModel):
	feedback: str
	score: Optional[int] = Field(default=None, ge=0, le=100)


class CriterionEvaluationResult(BaseModel):
	overallScore: int = Field(ge=1, le=9)
	criteria: Dict[str, int]
	feedback: str
	suggestions: List[str] = Field(default_factory=list)


class TranscriptionResult(BaseModel):
	transcript: str


# ---- HTTP request bodies ----
# Declared leniently so that a missing field reaches pipeline validation
# and produces the documented 400 body instead of a 422.

class _LenientBody(BaseModel):
	model_config = ConfigDict(extra="ignore")


class ReadingGenerateBody(_LenientBody):
	passage: Optional[str] = None


class ListeningGenerateBody(_LenientBody):
	transcript: Optional[str] = None


class ReadingEvaluateBody(_LenientBody):
	passage: Optional[str] = None
	questions: Optional[List[str]] = None
	answers: Optional[List[Optional[str]]] = None


class ListeningEvaluateBody(_LenientBody):
	transcript: Optional[str] = None
	questions: Optional[List[str]] = None
	answers: Optional[List[Optional[str]]] = None


class WritingEvaluateBody(_LenientBody):
	topic: Optional[str] = None
	essay: Optional[str] = None


class SpeakingEvaluateBody(_LenientBody):
	topic: Optional[str] = None
	transcript: Optional[str] = None
