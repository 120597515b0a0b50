"""Practice attempts, accuracy and StarPower endpoints."""

from fastapi import APIRouter, HTTPException, status

from staarkids.core.progress import PracticeAttempt
from staarkids.core.question import is_valid_grade_subject
from staarkids.db.progress_repository import (
    get_module_accuracy,
    get_overall_accuracy,
    get_star_power_stats,
    record_attempt,
)
from staarkids.db.questions_repository import get_question_by_id
from staarkids.web.schemas import (
    ModuleAccuracyResponse,
    OverallAccuracyResponse,
    PracticeAttemptRequest,
    PracticeAttemptResponse,
    StarPowerResponse,
)

router = APIRouter(prefix="/api", tags=["progress"])


@router.post("/practice/attempt", response_model=PracticeAttemptResponse)
async def practice_attempt(request: PracticeAttemptRequest) -> PracticeAttemptResponse:
    """Record a practice answer and award StarPower."""
    grade, subject, teks = request.grade, request.subject, request.teks_standard
    is_correct = request.is_correct

    if request.question_id is not None:
        question = get_question_by_id(request.question_id)
        if question is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Question '{request.question_id}' not found",
            )
        grade, subject = question.grade, question.subject
        teks = teks or question.teks_standard
        if is_correct is None and request.selected_answer:
            is_correct = request.selected_answer.upper() == question.correct_answer

    if grade is None or subject is None or not is_valid_grade_subject(grade, subject):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid grade or subject",
        )
    if is_correct is None and not request.skipped:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="is_correct is required without a stored question and selected answer",
        )

    attempt = record_attempt(
        PracticeAttempt(
            user_id=request.user_id,
            question_id=request.question_id,
            grade=grade,
            subject=subject,
            teks_standard=teks,
            selected_answer=request.selected_answer,
            is_correct=bool(is_correct),
            hints_used=request.hints_used,
            skipped=request.skipped,
            time_spent=request.time_spent,
        )
    )

    return PracticeAttemptResponse(
        attempt_id=attempt.attempt_id,
        user_id=attempt.user_id,
        question_id=attempt.question_id,
        is_correct=attempt.is_correct,
        star_power_earned=attempt.star_power_earned,
        created_at=attempt.created_at,
    )


@router.get("/accuracy/{user_id}", response_model=OverallAccuracyResponse)
async def overall_accuracy(user_id: str) -> OverallAccuracyResponse:
    """Accuracy across all of a user's attempts."""
    return OverallAccuracyResponse(**get_overall_accuracy(user_id).to_dict())


@router.get("/accuracy/{user_id}/{grade}/{subject}", response_model=ModuleAccuracyResponse)
async def module_accuracy(user_id: str, grade: int, subject: str) -> ModuleAccuracyResponse:
    """Accuracy for one grade and subject with a per-TEKS breakdown."""
    if not is_valid_grade_subject(grade, subject):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid grade or subject",
        )

    return ModuleAccuracyResponse(**get_module_accuracy(user_id, grade, subject).to_dict())


@router.get("/star-power/{user_id}", response_model=StarPowerResponse)
async def star_power(user_id: str) -> StarPowerResponse:
    """StarPower earned today, this week and in total."""
    return StarPowerResponse(**get_star_power_stats(user_id).to_dict())
