"""Shared fixtures: a scripted model invoker and an app wired to it."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from ielts_coach.dependencies import get_model_invoker
from ielts_coach.main import app
from ielts_coach.settings import settings


class FakeInvoker:
	"""Model invoker stub that replays a canned reply or raises a canned error."""

	def __init__(self, reply: str = "", *, transcript: str = "", error: Optional[Exception] = None) -> None:
		self.reply = reply
		self.transcript = transcript
		self.error = error
		self.completions: List[Dict[str, Any]] = []
		self.transcriptions: List[Dict[str, Any]] = []

	@property
	def calls(self) -> int:
		return len(self.completions) + len(self.transcriptions)

	async def complete(self, system: str, user: str, *, temperature: float, json_mode: bool = False) -> str:
		self.completions.append(
			{"system": system, "user": user, "temperature": temperature, "json_mode": json_mode}
		)
		if self.error is not None:
			raise self.error
		return self.reply

	async def transcribe(
		self,
		audio: bytes,
		*,
		filename: Optional[str] = None,
		content_type: Optional[str] = None,
	) -> str:
		self.transcriptions.append({"audio": audio, "filename": filename, "content_type": content_type})
		if self.error is not None:
			raise self.error
		return self.transcript


@pytest.fixture
def anyio_backend():
	return "asyncio"


@pytest.fixture
def fake_invoker() -> FakeInvoker:
	return FakeInvoker()


@pytest.fixture
def client(fake_invoker: FakeInvoker, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setattr(settings, "openai_api_key", "sk-test")

	async def _override():
		yield fake_invoker

	app.dependency_overrides[get_model_invoker] = _override
	with TestClient(app) as test_client:
		yield test_client
	app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setattr(settings, "openai_api_key", None)
	app.dependency_overrides.clear()
	with TestClient(app) as test_client:
		yield test_client
