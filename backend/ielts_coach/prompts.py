"""
Prompt composition for the IELTS practice tasks.

Every builder is pure string templating: the caller's text is embedded
verbatim between explicit section markers so the model can tell instructions
apart from subject matter. Evaluation prompts use a low temperature for
reproducible scoring; question generation uses a higher one for varied
phrasing.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .schemas import CRITERIA_BY_KIND, TaskKind


QUESTION_TEMPERATURE = 0.7
EVALUATION_TEMPERATURE = 0.3

QUESTIONS_PER_SET = 5

NO_ANSWER = "No answer"


@dataclass(frozen=True)
class ComposedPrompt:
	system: str
	user: str
	temperature: float
	json_mode: bool = False


def section(label: str, body: str) -> str:
	return f"<<<{label}>>>\n{body}\n<<<END {label}>>>"


# Human-readable names for the criterion keys, in prompt order
_CRITERION_LABELS: Dict[str, str] = {
	"task_achievement": "Task Achievement / Task Response",
	"coherence_cohesion": "Coherence and Cohesion",
	"fluency_coherence": "Fluency and Coherence",
	"lexical_resource": "Lexical Resource",
	"grammatical_range_accuracy": "Grammatical Range and Accuracy",
	"pronunciation": "Pronunciation",
}


def _build_question_prompt(skill: str, label: str, text: str, focus: str) -> ComposedPrompt:
	system = (
		f"You are an IELTS {skill} test expert. "
		"Generate clear, well-structured comprehension questions."
	)
	user = (
		f"Based on the {skill} {label.lower()} below, generate {QUESTIONS_PER_SET} comprehension questions in IELTS style.\n"
		f"The questions should test understanding of {focus}.\n"
		"Return only the questions, one per line, without numbering.\n\n"
		f"{section(label, text)}\n\n"
		"Questions:"
	)
	return ComposedPrompt(system=system, user=user, temperature=QUESTION_TEMPERATURE)


def _format_answers(questions: List[str], answers: List[Optional[str]]) -> str:
	blocks: List[str] = []
	for index, question in enumerate(questions):
		answer = answers[index] if index < len(answers) else None
		if not isinstance(answer, str) or not answer.strip():
			answer = NO_ANSWER
		blocks.append(f"Q{index + 1}: {question}\nAnswer: {answer}")
	return "\n\n".join(blocks)


def _build_narrative_prompt(
	skill: str,
	label: str,
	text: str,
	questions: List[str],
	answers: List[Optional[str]],
) -> ComposedPrompt:
	system = (
		f"You are an IELTS {skill} test evaluator. "
		"Provide fair, constructive feedback and accurate scoring."
	)
	user = (
		f"Evaluate the following {skill} comprehension answers based on the {label.lower()}. Provide:\n"
		"1. A score out of 100 (percentage)\n"
		"2. Detailed feedback on each answer\n"
		"3. Overall assessment\n\n"
		f"{section(label, text)}\n\n"
		f"{section('QUESTIONS AND ANSWERS', _format_answers(questions, answers))}\n\n"
		"Provide your evaluation in a structured format."
	)
	return ComposedPrompt(system=system, user=user, temperature=EVALUATION_TEMPERATURE)


def _build_criterion_prompt(
	skill: str,
	subject: str,
	criteria: List[str],
	topic: str,
	label: str,
	text: str,
) -> ComposedPrompt:
	system = (
		f"You are an IELTS {skill} examiner. "
		f"Evaluate {subject} according to official IELTS criteria. Always respond with valid JSON."
	)
	criteria_lines = "\n".join(f"   - {_CRITERION_LABELS.get(key, key)} (1-9)" for key in criteria)
	criteria_shape = ",\n".join(f'    "{key}": <score 1-9>' for key in criteria)
	user = (
		f"Evaluate this IELTS {skill} response. Provide:\n"
		"1. Overall band score (1-9)\n"
		"2. Scores for each criterion:\n"
		f"{criteria_lines}\n"
		"3. Detailed feedback explaining the scores\n"
		"4. Specific suggestions for improvement\n\n"
		f"{section('TOPIC', topic)}\n\n"
		f"{section(label, text)}\n\n"
		"Format your response as JSON with the following structure:\n"
		"{\n"
		'  "overallScore": <overall score 1-9>,\n'
		'  "criteria": {\n'
		f"{criteria_shape}\n"
		"  },\n"
		'  "feedback": "<detailed feedback>",\n'
		'  "suggestions": ["<suggestion 1>", "<suggestion 2>", ...]\n'
		"}"
	)
	return ComposedPrompt(system=system, user=user, temperature=EVALUATION_TEMPERATURE, json_mode=True)


def compose(kind: TaskKind, fields: Mapping[str, Any]) -> ComposedPrompt:
	"""Build the (system, user) prompt pair for an already validated request."""
	if kind == TaskKind.GENERATE_READING_QUESTIONS:
		return _build_question_prompt(
			"reading", "PASSAGE", fields["passage"],
			"main ideas, details, inference, and vocabulary",
		)
	if kind == TaskKind.GENERATE_LISTENING_QUESTIONS:
		return _build_question_prompt(
			"listening", "TRANSCRIPT", fields["transcript"],
			"main ideas, specific details, and inference",
		)
	if kind == TaskKind.EVALUATE_READING:
		return _build_narrative_prompt(
			"reading", "PASSAGE", fields["passage"], fields["questions"], fields["answers"],
		)
	if kind == TaskKind.EVALUATE_LISTENING:
		return _build_narrative_prompt(
			"listening", "TRANSCRIPT", fields["transcript"], fields["questions"], fields["answers"],
		)
	if kind == TaskKind.EVALUATE_WRITING:
		return _build_criterion_prompt(
			"writing", "essays", CRITERIA_BY_KIND[kind], fields["topic"], "ESSAY", fields["essay"],
		)
	if kind == TaskKind.EVALUATE_SPEAKING:
		return _build_criterion_prompt(
			"speaking", "responses", CRITERIA_BY_KIND[kind], fields["topic"], "TRANSCRIPT", fields["transcript"],
		)
	raise ValueError(f"No prompt template for task kind {kind.value}")
