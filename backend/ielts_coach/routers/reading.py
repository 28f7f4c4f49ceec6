from __future__ import annotations
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_pipeline
from ..pipeline import EvaluationPipeline
from ..schemas import GeneratedQuestionSet, ReadingEvaluateBody, ReadingGenerateBody


router = APIRouter(prefix="/api/reading", tags=["reading"])


@router.post("/generate", response_model=GeneratedQuestionSet)
async def generate_questions(req: ReadingGenerateBody, pipeline: EvaluationPipeline = Depends(get_pipeline)):
	return await pipeline.generate_reading_questions(req.passage)


@router.post("/evaluate")
async def evaluate_answers(req: ReadingEvaluateBody, pipeline: EvaluationPipeline = Depends(get_pipeline)):
	result = await pipeline.evaluate_reading(req.passage, req.questions, req.answers)
	# score is omitted entirely when no percentage was found in the feedback
	return JSONResponse(result.model_dump(exclude_none=True))
