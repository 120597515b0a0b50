"""Simulated world-class model endpoints."""

from fastapi import APIRouter, HTTPException, status

from staarkids.core.model_manager import (
    UnknownModelError,
    WorldClassRequest,
    get_model_manager,
)
from staarkids.core.question import is_valid_grade_subject
from staarkids.web.schemas import (
    ModelStatsResponse,
    OptimizeResponse,
    QuestionResponse,
    WorldClassGenerateRequest,
)

router = APIRouter(prefix="/api/models", tags=["models"])


@router.get("/stats", response_model=ModelStatsResponse)
async def model_stats() -> ModelStatsResponse:
    """Summary of the simulated model fleet."""
    return ModelStatsResponse(**get_model_manager().get_system_stats())


@router.post("/world-class/generate", response_model=QuestionResponse)
async def generate_world_class(request: WorldClassGenerateRequest) -> QuestionResponse:
    """Generate one question through A/B selection and ensemble voting."""
    if not is_valid_grade_subject(request.grade, request.subject):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid grade or subject",
        )

    try:
        question = get_model_manager().generate_world_class_question(
            WorldClassRequest(**request.model_dump())
        )
    except UnknownModelError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    return QuestionResponse.model_validate(question.to_dict())


@router.post("/optimize", response_model=OptimizeResponse)
async def optimize() -> OptimizeResponse:
    """Run one optimization pass now."""
    optimized = get_model_manager().optimize_models()
    return OptimizeResponse(optimized=optimized, count=len(optimized))
