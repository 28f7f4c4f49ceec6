from __future__ import annotations
import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .schemas import CriterionEvaluationResult


MAX_QUESTIONS = 5

# Neutral band used for every score when the model reply cannot be parsed
FALLBACK_BAND = 6

_ENUMERATED_LINE = re.compile(r"^\d+[.)]", re.ASCII)
_PERCENTAGE = re.compile(r"(\d+)%", re.ASCII)


def parse_question_list(text: str) -> List[str]:
	"""Turn a free-text model reply into at most five question strings.

	Lines still carrying a numeric enumeration marker ("1.", "2)") are dropped
	rather than stripped, so a model that ignores the "without numbering"
	instruction can yield fewer questions, or none.
	"""
	questions: List[str] = []
	for line in (text or "").splitlines():
		line = line.strip()
		if not line or _ENUMERATED_LINE.match(line):
			continue
		questions.append(line)
	return questions[:MAX_QUESTIONS]


def parse_score(feedback: str) -> Optional[int]:
	"""Return the first `<digits>%` value mentioned in the feedback, if any."""
	match = _PERCENTAGE.search(feedback or "")
	if not match:
		return None
	return int(match.group(1))


@dataclass(frozen=True)
class Parsed:
	data: Dict[str, Any]


@dataclass(frozen=True)
class Fallback:
	raw_text: str
	criteria_keys: Sequence[str] = field(default_factory=tuple)

	def to_result(self) -> CriterionEvaluationResult:
		return CriterionEvaluationResult(
			overallScore=FALLBACK_BAND,
			criteria={key: FALLBACK_BAND for key in self.criteria_keys},
			feedback=self.raw_text,
			suggestions=[],
		)


ParseOutcome = Union[Parsed, Fallback]


def _reject_constant(name: str) -> Any:
	# NaN and Infinity are not JSON and cannot be rendered back into a response
	raise ValueError(f"Non-standard JSON constant {name}")


def _parse_finite_float(text: str) -> float:
	value = float(text)
	if math.isinf(value):
		raise ValueError(f"Out of range JSON number {text}")
	return value


def parse_criterion_result(raw: str, criteria_keys: Sequence[str]) -> ParseOutcome:
	"""Strictly parse a criterion-scored JSON reply.

	A JSON object is passed through as is: score ranges and the criterion key
	set are not re-checked. Anything else keeps the raw text as feedback in a
	Fallback carrying neutral scores.
	"""
	try:
		data = json.loads(raw, parse_constant=_reject_constant, parse_float=_parse_finite_float)
	except (TypeError, ValueError):
		return Fallback(raw_text=raw or "", criteria_keys=tuple(criteria_keys))
	if not isinstance(data, dict):
		return Fallback(raw_text=raw, criteria_keys=tuple(criteria_keys))
	return Parsed(data=data)
