"""Quality validation and review queue endpoints."""

import uuid

from fastapi import APIRouter, HTTPException, status

from staarkids.core.quality_control import (
    ReviewRequest,
    get_review_system,
    validate_question_quality,
)
from staarkids.core.question import Question
from staarkids.web.schemas import (
    QuestionPayload,
    RejectRequest,
    ReviewActionResponse,
    ReviewItemResponse,
    ReviewQueueResponse,
    ValidationResponse,
)

router = APIRouter(prefix="/api/quality", tags=["quality"])


def _to_item(request: ReviewRequest) -> ReviewItemResponse:
    return ReviewItemResponse.model_validate(request.to_dict())


@router.post("/validate", response_model=ValidationResponse)
async def validate(payload: QuestionPayload, enqueue: bool = False) -> ValidationResponse:
    """Score a question; with enqueue=true, failing questions go to review."""
    question = Question.from_dict(payload.model_dump())
    result = validate_question_quality(question)
    response = ValidationResponse(**result.to_dict())

    if enqueue and not result.is_valid:
        question_id = payload.question_id
        if question_id is None:
            question_id = f"submitted-{uuid.uuid4().hex[:8]}"
        review = get_review_system().add_to_review_queue(str(question_id), question, result)
        response.queued = True
        response.priority = review.priority

    return response


@router.get("/review-queue", response_model=ReviewQueueResponse)
async def review_queue() -> ReviewQueueResponse:
    """Pending reviews, high priority first."""
    items = [_to_item(r) for r in get_review_system().get_review_queue()]
    return ReviewQueueResponse(items=items, count=len(items))


@router.post("/review-queue/{question_id}/approve", response_model=ReviewActionResponse)
async def approve(question_id: str) -> ReviewActionResponse:
    """Approve a queued question."""
    if not get_review_system().approve_question(question_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Question '{question_id}' is not in the review queue",
        )

    return ReviewActionResponse(question_id=question_id, status="approved")


@router.post("/review-queue/{question_id}/reject", response_model=ReviewActionResponse)
async def reject(question_id: str, request: RejectRequest | None = None) -> ReviewActionResponse:
    """Reject a queued question."""
    reason = request.reason if request else None
    if not get_review_system().reject_question(question_id, reason):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Question '{question_id}' is not in the review queue",
        )

    return ReviewActionResponse(question_id=question_id, status="rejected")
