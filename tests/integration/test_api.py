"""
Integration Tests for the NutriCare API

Endpoints are exercised through httpx's ASGI transport against an app wired
to the seeded in-memory store and a scripted generation gateway.
"""
import httpx
import pytest

from nutricare.main import create_app
from nutricare.utils import GenerationError
from tests.factories import ORG_ID, OTHER_ORG_ID, PROFESSIONAL_ID, ScriptedGateway


@pytest.fixture
def api_gateway() -> ScriptedGateway:
    return ScriptedGateway(response="Texto gerado para o profissional.")


@pytest.fixture
async def async_client(store, api_gateway, tmp_path):
    """Create async test client."""
    app = create_app(store=store, gateway=api_gateway, reports_dir=str(tmp_path))
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.mark.asyncio
class TestHealthEndpoints:
    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["generation_available"] is True

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert "version" in response.json()


@pytest.mark.asyncio
class TestNutritionReportEndpoints:
    async def test_report_json(self, async_client):
        response = await async_client.get(
            "/api/v1/patients/pat-1/nutrition-report", params={"organization_id": ORG_ID}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["patient_name"] == "Maria Souza"
        assert [s["title"] for s in data["sections"]][:2] == [
            "Dados do Paciente", "Antropometria",
        ]

    async def test_report_pdf(self, async_client):
        response = await async_client.get(
            "/api/v1/patients/pat-1/nutrition-report/pdf", params={"organization_id": ORG_ID}
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content[:4] == b"%PDF"

    async def test_other_organization_is_404(self, async_client):
        response = await async_client.get(
            "/api/v1/patients/pat-1/nutrition-report", params={"organization_id": OTHER_ORG_ID}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    async def test_missing_organization_is_422(self, async_client):
        response = await async_client.get("/api/v1/patients/pat-1/nutrition-report")
        assert response.status_code == 422


@pytest.mark.asyncio
class TestPatientSummaryEndpoints:
    def _body(self, **overrides):
        body = {
            "organization_id": ORG_ID,
            "professional_id": PROFESSIONAL_ID,
            "patient_id": "pat-1",
            "type": "PRE_CONSULT",
        }
        body.update(overrides)
        return body

    async def test_create_summary(self, async_client, api_gateway):
        response = await async_client.post("/api/v1/ai-summaries", json=self._body())
        assert response.status_code == 201

        data = response.json()
        assert data["text_for_professional"] == "Texto gerado para o profissional."
        assert data["type"] == "PRE_CONSULT"
        assert len(api_gateway.calls) == 1

    async def test_inverted_period_is_400(self, async_client, api_gateway):
        response = await async_client.post(
            "/api/v1/ai-summaries",
            json=self._body(
                period_start="2024-06-10T00:00:00Z", period_end="2024-06-01T00:00:00Z"
            ),
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "period"
        assert api_gateway.calls == []

    async def test_unknown_type_is_422(self, async_client):
        response = await async_client.post(
            "/api/v1/ai-summaries", json=self._body(type="MONTHLY")
        )
        assert response.status_code == 422

    async def test_generation_failure_is_502(self, async_client, api_gateway):
        api_gateway.error = GenerationError(
            "Gemini API error: quota", mode="PATIENT_SUMMARY", reason="provider_error"
        )
        response = await async_client.post("/api/v1/ai-summaries", json=self._body())

        assert response.status_code == 502
        assert response.json()["details"]["reason"] == "provider_error"

        history = await async_client.get(
            "/api/v1/ai-summaries", params={"organization_id": ORG_ID, "patient_id": "pat-1"}
        )
        assert history.json() == []

    async def test_history(self, async_client):
        await async_client.post("/api/v1/ai-summaries", json=self._body())
        await async_client.post("/api/v1/ai-summaries", json=self._body(type="FULL_HISTORY"))

        response = await async_client.get(
            "/api/v1/ai-summaries",
            params={"organization_id": ORG_ID, "patient_id": "pat-1", "type": "FULL_HISTORY"},
        )
        assert response.status_code == 200
        assert [s["type"] for s in response.json()] == ["FULL_HISTORY"]


@pytest.mark.asyncio
class TestProgramSummaryEndpoints:
    async def test_create_and_list(self, async_client):
        response = await async_client.post(
            "/api/v1/program-summaries",
            json={
                "organization_id": ORG_ID,
                "program_id": "prog-1",
                "type": "MEETING_SUMMARY",
                "meeting_id": "meet-1",
            },
        )
        assert response.status_code == 201
        assert response.json()["meeting_id"] == "meet-1"

        history = await async_client.get(
            "/api/v1/program-summaries",
            params={"organization_id": ORG_ID, "program_id": "prog-1"},
        )
        assert len(history.json()) == 1

    async def test_unknown_program_is_404(self, async_client):
        response = await async_client.post(
            "/api/v1/program-summaries",
            json={"organization_id": ORG_ID, "program_id": "nope"},
        )
        assert response.status_code == 404


@pytest.mark.asyncio
class TestDiagnosisEndpoint:
    async def test_create_suggestions(self, async_client, api_gateway):
        api_gateway.response = (
            '[{"title": "Ingestão energética excessiva", "pesFormat": null, '
            '"rationale": "Ganho de peso relatado"}]'
        )
        response = await async_client.post(
            "/api/v1/nutrition-diagnosis-suggestions",
            json={
                "organization_id": ORG_ID,
                "professional_id": PROFESSIONAL_ID,
                "patient_id": "pat-1",
            },
        )
        assert response.status_code == 201
        assert response.json()["diagnoses"] == [
            {
                "title": "Ingestão energética excessiva",
                "pes_format": None,
                "rationale": "Ganho de peso relatado",
            }
        ]

    async def test_malformed_answer_is_502(self, async_client):
        response = await async_client.post(
            "/api/v1/nutrition-diagnosis-suggestions",
            json={
                "organization_id": ORG_ID,
                "professional_id": PROFESSIONAL_ID,
                "patient_id": "pat-1",
            },
        )
        assert response.status_code == 502
        assert response.json()["details"]["reason"] == "malformed_response"


@pytest.mark.asyncio
class TestEducationEndpoint:
    async def test_create_material(self, async_client):
        response = await async_client.post(
            "/api/v1/education-materials",
            json={
                "organization_id": ORG_ID,
                "topic": "Hidratação",
                "context": "INDIVIDUAL",
                "patient_id": "pat-1",
            },
        )
        assert response.status_code == 201

        data = response.json()
        assert data["context"] == "INDIVIDUAL"
        assert data["text"] == "Texto gerado para o profissional."

    async def test_empty_topic_is_422(self, async_client):
        response = await async_client.post(
            "/api/v1/education-materials",
            json={"organization_id": ORG_ID, "topic": "", "context": "GROUP"},
        )
        assert response.status_code == 422
