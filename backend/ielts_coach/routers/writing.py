from __future__ import annotations
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_pipeline
from ..pipeline import EvaluationPipeline
from ..schemas import WritingEvaluateBody


router = APIRouter(prefix="/api/writing", tags=["writing"])


@router.post("/evaluate")
async def evaluate_essay(req: WritingEvaluateBody, pipeline: EvaluationPipeline = Depends(get_pipeline)):
	# Returned without a response_model: a parsed model reply is passed through unchanged
	data = await pipeline.evaluate_writing(req.topic, req.essay)
	return JSONResponse(data)
