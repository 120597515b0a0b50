"""Route handlers for the Web API."""

from staarkids.web.routes.health import router as health_router
from staarkids.web.routes.questions import router as questions_router
from staarkids.web.routes.visuals import router as visuals_router
from staarkids.web.routes.quality import router as quality_router
from staarkids.web.routes.models import router as models_router
from staarkids.web.routes.exams import router as exams_router
from staarkids.web.routes.progress import router as progress_router

__all__ = [
    "health_router",
    "questions_router",
    "visuals_router",
    "quality_router",
    "models_router",
    "exams_router",
    "progress_router",
]
