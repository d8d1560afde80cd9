"""
NutriCare Aggregation API - FastAPI Application

Main application entry point with API endpoints for:
- Patient nutrition reports (JSON and PDF)
- AI patient summaries and their history
- AI program / meeting summaries and their history
- Nutrition diagnosis suggestions
- Patient-education material
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from nutricare import __version__
from nutricare.config import settings
from nutricare.core.domain import (
    DateRange,
    ProgramSummaryType,
    RequestContext,
    SummaryType,
    as_utc,
)
from nutricare.core.llm import GeminiGenerationGateway, GenerationGateway
from nutricare.core.reports import NutritionReportPdfRenderer
from nutricare.infra import InMemoryClinicalStore
from nutricare.models import (
    DiagnosisSuggestionRequestBody,
    DiagnosisSuggestionResponse,
    EducationMaterialRequestBody,
    EducationMaterialResponse,
    HealthResponse,
    NutritionReportResponse,
    PatientSummaryRequestBody,
    ProgramSummaryRequestBody,
    ProgramSummaryResponse,
    SummaryResponse,
)
from nutricare.services import (
    DiagnosisSuggestionRequest,
    DiagnosisSuggestionService,
    EducationMaterialRequest,
    EducationMaterialService,
    NutritionReportService,
    PatientSummaryRequest,
    PatientSummaryService,
    ProgramSummaryRequest,
    ProgramSummaryService,
)
from nutricare.utils import (
    DataIntegrityError,
    GenerationError,
    NotFoundError,
    NutriCareError,
    ReportGenerationError,
    ValidationError,
    get_logger,
)

logger = get_logger(__name__)

START_TIME = datetime.now()

# Exception type -> HTTP status; first match wins
ERROR_STATUS = (
    (NotFoundError, 404),
    (ValidationError, 400),
    (GenerationError, 502),
    (DataIntegrityError, 500),
    (ReportGenerationError, 500),
)


def _status_for(exc: NutriCareError) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 500


def _period(start: Optional[datetime], end: Optional[datetime], field: str) -> DateRange:
    """Reject inverted periods at the edge."""
    if start is not None and end is not None and as_utc(start) > as_utc(end):
        raise ValidationError(f"{field} start must not be after its end", field=field)
    return DateRange(start=start, end=end)


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"NutriCare API v{__version__} starting "
        f"(generation available: {getattr(app.state, 'generation_available', False)})"
    )
    yield
    logger.info("NutriCare API shut down.")


# ---- FastAPI Application ----

def create_app(
    store: Optional[InMemoryClinicalStore] = None,
    gateway: Optional[GenerationGateway] = None,
    reports_dir: Optional[str] = None,
) -> FastAPI:
    """
    Build the application with its services wired to one store.

    Args:
        store: Accessor/persistence backend; seeded from SEED_DATA_PATH
            (or empty) when omitted
        gateway: Generation gateway; Gemini when omitted
        reports_dir: Directory for generated PDFs
    """
    if store is None:
        if settings.seed_data_path:
            store = InMemoryClinicalStore.load_json(settings.seed_data_path)
        else:
            logger.warning("No SEED_DATA_PATH configured - starting with an empty store")
            store = InMemoryClinicalStore()

    if gateway is None:
        gemini = GeminiGenerationGateway()
        generation_available = gemini.client.is_available
        gateway = gemini
    else:
        generation_available = True

    app = FastAPI(
        title="NutriCare Aggregation API",
        description="Nutrition reports and AI-assisted summaries for clinical nutrition practice",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store
    app.state.generation_available = generation_available
    app.state.report_service = NutritionReportService(
        store, pdf_renderer=NutritionReportPdfRenderer(reports_dir or settings.reports_dir)
    )
    app.state.patient_summary_service = PatientSummaryService(store, store, gateway)
    app.state.program_summary_service = ProgramSummaryService(store, store, gateway)
    app.state.diagnosis_service = DiagnosisSuggestionService(store, store, gateway)
    app.state.education_service = EducationMaterialService(store, store, gateway)

    @app.exception_handler(NutriCareError)
    async def nutricare_error_handler(request: Request, exc: NutriCareError):
        status = _status_for(exc)
        if status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
        return JSONResponse(status_code=status, content=exc.to_dict())

    # ---- Health ----

    def _health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now().isoformat(),
            uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
            generation_available=app.state.generation_available,
        )

    @app.get("/", response_model=HealthResponse, tags=["Health"])
    async def root():
        """API root - health check."""
        return _health()

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        return _health()

    # ---- Nutrition reports ----

    @app.get(
        "/api/v1/patients/{patient_id}/nutrition-report",
        response_model=NutritionReportResponse,
        tags=["Reports"],
    )
    async def nutrition_report(patient_id: str, organization_id: str = Query(..., min_length=1)):
        report = await app.state.report_service.generate(
            RequestContext(organization_id=organization_id), patient_id
        )
        return report.to_dict()

    @app.get("/api/v1/patients/{patient_id}/nutrition-report/pdf", tags=["Reports"])
    async def nutrition_report_pdf(
        patient_id: str, organization_id: str = Query(..., min_length=1)
    ):
        pdf_path = await app.state.report_service.generate_pdf(
            RequestContext(organization_id=organization_id), patient_id
        )
        return FileResponse(
            path=pdf_path,
            media_type="application/pdf",
            filename=f"relatorio-nutricional-{patient_id}.pdf",
        )

    # ---- Patient summaries ----

    @app.post(
        "/api/v1/ai-summaries",
        response_model=SummaryResponse,
        status_code=201,
        tags=["Summaries"],
    )
    async def create_patient_summary(body: PatientSummaryRequestBody):
        period = _period(body.period_start, body.period_end, "period")
        artifact = await app.state.patient_summary_service.generate(
            RequestContext(body.organization_id, body.professional_id),
            PatientSummaryRequest(
                patient_id=body.patient_id, summary_type=body.type, period=period
            ),
        )
        return artifact.to_dict()

    @app.get("/api/v1/ai-summaries", response_model=List[SummaryResponse], tags=["Summaries"])
    async def list_patient_summaries(
        organization_id: str = Query(..., min_length=1),
        patient_id: str = Query(..., min_length=1),
        type: Optional[SummaryType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        created = _period(start_date, end_date, "created")
        artifacts = await app.state.patient_summary_service.history(
            RequestContext(organization_id),
            patient_id,
            summary_type=type,
            created=None if created.is_open else created,
        )
        return [a.to_dict() for a in artifacts]

    # ---- Program summaries ----

    @app.post(
        "/api/v1/program-summaries",
        response_model=ProgramSummaryResponse,
        status_code=201,
        tags=["Summaries"],
    )
    async def create_program_summary(body: ProgramSummaryRequestBody):
        artifact = await app.state.program_summary_service.generate(
            RequestContext(body.organization_id),
            ProgramSummaryRequest(
                program_id=body.program_id, summary_type=body.type, meeting_id=body.meeting_id
            ),
        )
        return artifact.to_dict()

    @app.get(
        "/api/v1/program-summaries",
        response_model=List[ProgramSummaryResponse],
        tags=["Summaries"],
    )
    async def list_program_summaries(
        organization_id: str = Query(..., min_length=1),
        program_id: str = Query(..., min_length=1),
        type: Optional[ProgramSummaryType] = None,
        meeting_id: Optional[str] = None,
    ):
        artifacts = await app.state.program_summary_service.history(
            RequestContext(organization_id), program_id, summary_type=type, meeting_id=meeting_id
        )
        return [a.to_dict() for a in artifacts]

    # ---- Diagnosis suggestions ----

    @app.post(
        "/api/v1/nutrition-diagnosis-suggestions",
        response_model=DiagnosisSuggestionResponse,
        status_code=201,
        tags=["Diagnosis"],
    )
    async def create_diagnosis_suggestions(body: DiagnosisSuggestionRequestBody):
        artifact = await app.state.diagnosis_service.generate(
            RequestContext(body.organization_id, body.professional_id),
            DiagnosisSuggestionRequest(
                patient_id=body.patient_id, consultation_id=body.consultation_id
            ),
        )
        return artifact.to_dict()

    # ---- Education material ----

    @app.post(
        "/api/v1/education-materials",
        response_model=EducationMaterialResponse,
        status_code=201,
        tags=["Education"],
    )
    async def create_education_material(body: EducationMaterialRequestBody):
        artifact = await app.state.education_service.generate(
            RequestContext(body.organization_id),
            EducationMaterialRequest(
                topic=body.topic,
                context=body.context,
                patient_id=body.patient_id,
                program_id=body.program_id,
            ),
        )
        return artifact.to_dict()

    return app


app = create_app()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
