"""Question generation and retrieval endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from staarkids.core.generation_service import (
    GenerationRequest,
    InvalidGenerationRequest,
    generate_questions,
)
from staarkids.core.question import Question, is_valid_grade_subject
from staarkids.core.template_generator import generate_efficient_question
from staarkids.db.questions_repository import get_question_by_id, get_questions
from staarkids.web.schemas import (
    FastGenerateRequest,
    GenerateRequest,
    GenerateResponse,
    QuestionListResponse,
    QuestionResponse,
)

router = APIRouter(prefix="/api/questions", tags=["questions"])


def _to_response(question: Question) -> QuestionResponse:
    return QuestionResponse.model_validate(question.to_dict())


@router.post("/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest) -> GenerateResponse:
    """Generate questions by priority: world-class, authentic, standard."""
    try:
        result = generate_questions(
            GenerationRequest(
                grade=request.grade,
                subject=request.subject,
                count=request.count,
                category=request.category,
                teks_standard=request.teks_standard,
                include_visual=request.include_visual,
                use_world_class=request.use_world_class,
                use_authentic=request.use_authentic,
            ),
            persist=request.persist,
        )
    except InvalidGenerationRequest as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    data = result.to_dict()
    data["questions"] = [_to_response(q) for q in result.questions]
    return GenerateResponse(**data)


@router.post("/generate-fast", response_model=list[QuestionResponse])
async def generate_fast(request: FastGenerateRequest) -> list[QuestionResponse]:
    """Generate template questions instantly."""
    if not is_valid_grade_subject(request.grade, request.subject):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid grade or subject",
        )

    return [
        _to_response(generate_efficient_question(request.grade, request.subject, request.category))
        for _ in range(request.count)
    ]


@router.get("/{question_id}/svg")
async def get_question_svg(question_id: int) -> Response:
    """SVG diagram of a stored question."""
    question = get_question_by_id(question_id)

    if question is None or not question.svg_content:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No SVG for question '{question_id}'",
        )

    return Response(content=question.svg_content, media_type="image/svg+xml")


@router.get("/{grade}/{subject}", response_model=QuestionListResponse)
async def list_questions(grade: int, subject: str, category: str | None = None) -> QuestionListResponse:
    """Stored questions for a grade and subject."""
    if not is_valid_grade_subject(grade, subject):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid grade or subject",
        )

    questions = [_to_response(q) for q in get_questions(grade, subject, category)]
    return QuestionListResponse(questions=questions, count=len(questions))
