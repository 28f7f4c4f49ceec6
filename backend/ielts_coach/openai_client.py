from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional, Protocol
from .errors import ConfigurationError, ModelServiceError
from .settings import settings

DEFAULT_AUDIO_FILENAME = "recording.webm"
DEFAULT_AUDIO_CONTENT_TYPE = "audio/webm"


class ModelInvoker(Protocol):
	async def complete(
		self,
		system: str,
		user: str,
		*,
		temperature: float,
		json_mode: bool = False,
	) -> str: ...

	async def transcribe(
		self,
		audio: bytes,
		*,
		filename: Optional[str] = None,
		content_type: Optional[str] = None,
	) -> str: ...


class OpenAIClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transcription_model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.openai_api_key
		if not self.api_key:
			raise ConfigurationError("OpenAI API key is not configured")
		self.model = model or settings.openai_model
		self.transcription_model = transcription_model or settings.openai_transcription_model
		self.base_url = (base_url or settings.openai_base_url).rstrip("/")
		self._headers = {"Authorization": f"Bearer {self.api_key}"}
		self._client = httpx.AsyncClient(timeout=settings.openai_timeout_seconds, transport=transport)

	async def complete(
		self,
		system: str,
		user: str,
		*,
		temperature: float,
		json_mode: bool = False,
	) -> str:
		messages: List[Dict[str, str]] = [
			{"role": "system", "content": system},
			{"role": "user", "content": user},
		]
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": messages,
			"temperature": temperature,
		}
		if json_mode:
			payload["response_format"] = {"type": "json_object"}
		data = await self._post(f"{self.base_url}/chat/completions", json=payload)
		try:
			content = data["choices"][0]["message"]["content"]
		except (KeyError, IndexError, TypeError):
			raise ModelServiceError(f"Unexpected OpenAI completion response: {data}")
		# A null content is an empty completion, not a transport failure
		return content or ""

	async def transcribe(
		self,
		audio: bytes,
		*,
		filename: Optional[str] = None,
		content_type: Optional[str] = None,
	) -> str:
		files = {
			"file": (
				filename or DEFAULT_AUDIO_FILENAME,
				audio,
				content_type or DEFAULT_AUDIO_CONTENT_TYPE,
			),
		}
		form = {
			"model": self.transcription_model,
			"language": "en",
			"response_format": "json",
		}
		data = await self._post(f"{self.base_url}/audio/transcriptions", data=form, files=files)
		text = data.get("text") if isinstance(data, dict) else None
		if not isinstance(text, str):
			raise ModelServiceError(f"Unexpected OpenAI transcription response: {data}")
		return text

	async def _post(self, url: str, **kwargs: Any) -> Any:
		try:
			r = await self._client.post(url, headers=self._headers, **kwargs)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise ModelServiceError(
				f"OpenAI request failed with status {http_err.response.status_code}: {http_err.response.text}"
			) from http_err
		except httpx.RequestError as net_err:
			raise ModelServiceError(f"OpenAI request failed: {net_err}") from net_err
		try:
			return r.json()
		except ValueError:
			raise ModelServiceError(f"Unexpected OpenAI response: {r.text}")

	async def aclose(self) -> None:
		await self._client.aclose()
