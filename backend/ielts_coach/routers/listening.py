from __future__ import annotations
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_pipeline
from ..pipeline import EvaluationPipeline
from ..schemas import GeneratedQuestionSet, ListeningEvaluateBody, ListeningGenerateBody


router = APIRouter(prefix="/api/listening", tags=["listening"])


@router.post("/generate", response_model=GeneratedQuestionSet)
async def generate_questions(req: ListeningGenerateBody, pipeline: EvaluationPipeline = Depends(get_pipeline)):
	return await pipeline.generate_listening_questions(req.transcript)


@router.post("/evaluate")
async def evaluate_answers(req: ListeningEvaluateBody, pipeline: EvaluationPipeline = Depends(get_pipeline)):
	result = await pipeline.evaluate_listening(req.transcript, req.questions, req.answers)
	return JSONResponse(result.model_dump(exclude_none=True))
