from __future__ import annotations
from typing import AsyncIterator

from fastapi import Depends

from .openai_client import ModelInvoker, OpenAIClient
from .pipeline import EvaluationPipeline


async def get_model_invoker() -> AsyncIterator[ModelInvoker]:
	# Raises ConfigurationError before any request validation when the key is absent
	client = OpenAIClient()
	try:
		yield client
	finally:
		await client.aclose()


def get_pipeline(invoker: ModelInvoker = Depends(get_model_invoker)) -> EvaluationPipeline:
	return EvaluationPipeline(invoker)
