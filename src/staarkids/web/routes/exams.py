"""Mock exam endpoints."""

from fastapi import APIRouter, HTTPException, status

from staarkids.core.exam_generator import MockExam, score_exam
from staarkids.core.question import VALID_GRADES
from staarkids.db.exams_repository import get_exam, get_mock_exams
from staarkids.web.schemas import (
    ExamDetailResponse,
    ExamListResponse,
    ExamScoreResponse,
    ExamSubmitRequest,
    ExamSummaryResponse,
)

router = APIRouter(prefix="/api/exams", tags=["exams"])


def _get_exam_or_404(exam_id: int) -> MockExam:
    exam = get_exam(exam_id)
    if exam is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exam '{exam_id}' not found",
        )
    return exam


@router.get("/details/{exam_id}", response_model=ExamDetailResponse)
async def exam_details(exam_id: int) -> ExamDetailResponse:
    """An exam with its questions in order."""
    exam = _get_exam_or_404(exam_id)
    return ExamDetailResponse.model_validate(exam.to_dict())


@router.get("/{grade}", response_model=ExamListResponse)
async def list_exams(grade: int) -> ExamListResponse:
    """Mock exams for a grade."""
    if grade not in VALID_GRADES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid grade",
        )

    exams = [
        ExamSummaryResponse.model_validate(e.to_dict(include_questions=False))
        for e in get_mock_exams(grade)
    ]
    return ExamListResponse(exams=exams, count=len(exams))


@router.post("/{exam_id}/submit", response_model=ExamScoreResponse)
async def submit_exam(exam_id: int, request: ExamSubmitRequest) -> ExamScoreResponse:
    """Score submitted answers against the stored keys."""
    exam = _get_exam_or_404(exam_id)
    score = score_exam(exam, request.answers)
    return ExamScoreResponse(**score.to_dict(), time_spent=request.time_spent)
