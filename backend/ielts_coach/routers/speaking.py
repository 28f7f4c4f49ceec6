from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from ..dependencies import get_pipeline
from ..pipeline import EvaluationPipeline
from ..schemas import SpeakingEvaluateBody, TranscriptionResult


router = APIRouter(prefix="/api/speaking", tags=["speaking"])


@router.post("/evaluate")
async def evaluate_speech(req: SpeakingEvaluateBody, pipeline: EvaluationPipeline = Depends(get_pipeline)):
	data = await pipeline.evaluate_speaking(req.topic, req.transcript)
	return JSONResponse(data)


@router.post("/transcribe", response_model=TranscriptionResult)
async def transcribe(
	audio: Optional[UploadFile] = File(default=None),
	pipeline: EvaluationPipeline = Depends(get_pipeline),
):
	content = await audio.read() if audio is not None else None
	return await pipeline.transcribe_speech(
		content,
		filename=audio.filename if audio is not None else None,
		content_type=audio.content_type if audio is not None else None,
	)
