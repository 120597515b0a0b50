"""Visual detection and SVG rendering endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from staarkids.core.svg_diagrams import DiagramError, render_diagram
from staarkids.core.visual_detector import (
    analyze_questions_for_visuals,
    should_question_have_visual,
)
from staarkids.web.schemas import (
    AnalyzeRequest,
    CoverageReportResponse,
    DetectRequest,
    SvgRequest,
    VisualAnalysisResponse,
)

router = APIRouter(prefix="/api/visuals", tags=["visuals"])


@router.post("/detect", response_model=VisualAnalysisResponse)
async def detect(request: DetectRequest) -> VisualAnalysisResponse:
    """Does this question text need a diagram, and which kind?"""
    analysis = should_question_have_visual(request.question_text, request.subject, request.grade)
    return VisualAnalysisResponse(**analysis.to_dict())


@router.post("/analyze", response_model=CoverageReportResponse)
async def analyze(request: AnalyzeRequest) -> CoverageReportResponse:
    """Report math questions that need a visual but have none."""
    report = analyze_questions_for_visuals(request.questions)
    return CoverageReportResponse(**report.to_dict())


@router.post("/svg")
async def render_svg(request: SvgRequest) -> Response:
    """Render a catalog diagram as image/svg+xml."""
    try:
        svg = render_diagram(request.diagram_type, request.data, request.width, request.height)
    except DiagramError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return Response(content=svg, media_type="image/svg+xml")
