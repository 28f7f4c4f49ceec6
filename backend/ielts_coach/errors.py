from __future__ import annotations
from typing import Any, Dict, Optional


class PipelineError(Exception):
	"""Base class for failures surfaced to the caller as an HTTP error body."""

	status_code: int = 500

	def __init__(self, message: str, *, details: Optional[str] = None) -> None:
		super().__init__(message)
		self.message = message
		self.details = details

	def to_body(self) -> Dict[str, Any]:
		body: Dict[str, Any] = {"error": self.message}
		if self.details:
			body["details"] = self.details
		return body


class ConfigurationError(PipelineError):
	"""The model service credential is absent."""

	status_code = 500


class InputValidationError(PipelineError):
	"""A required request field is missing or empty."""

	status_code = 400


class ServiceInvocationError(PipelineError):
	"""The model service call failed; details carry the underlying message."""

	status_code = 500


class ModelServiceError(RuntimeError):
	"""Transport-level or reply-shape failure raised by the model client."""
