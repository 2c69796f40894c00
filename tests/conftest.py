import pytest
from httpx import ASGITransport, AsyncClient

from artifact_server.config import Settings
from artifact_server.dependencies import init_app_state
from artifact_server.main import create_app
from artifact_server.storage.store import ArtifactStore

TEST_SECRET = "test-secret"


@pytest.fixture
def exports_dir(tmp_path):
    return tmp_path / "exports"


@pytest.fixture
def settings(exports_dir):
    return Settings(
        exports_dir=str(exports_dir),
        jwt_secret=TEST_SECRET,
        public_base_url="http://testserver",
        protect_api=True,
        auth_username="",
        auth_password="",
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    # Lifespan doesn't run in tests, so build the services by hand
    init_app_state(application, settings)
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def token(app):
    return app.state.tokens.issue({"sub": "tester", "email": "tester@example.com"})


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store(exports_dir):
    s = ArtifactStore(exports_dir)
    s.ensure_all()
    return s


@pytest.fixture
def word_payload():
    return {
        "title": "T",
        "sections": [
            {
                "heading": "H",
                "headingLevel": 1,
                "content": [{"type": "paragraph", "text": "hello"}],
            }
        ],
        "header": {"text": "H", "alignment": "left"},
        "footer": {"text": "F", "alignment": "left"},
        "wordConfig": {},
    }


@pytest.fixture
def excel_payload():
    return {
        "sheetsData": [
            {
                "sheetName": "Revenue",
                "tables": [
                    {
                        "title": "Quarterly",
                        "startCell": "B2",
                        "columns": [
                            {"name": "Quarter", "type": "string"},
                            {"name": "Revenue", "type": "currency"},
                            {"name": "Share", "type": "percent"},
                        ],
                        "rows": [
                            [
                                {"type": "static_value", "value": "Q1"},
                                {"type": "static_value", "value": 1200},
                                {"type": "static_value", "value": 0.25},
                            ],
                            [
                                {"type": "static_value", "value": "Total"},
                                {"type": "formula", "value": "SUM(C4:C4)"},
                                {"type": "static_value", "value": 1},
                            ],
                        ],
                    }
                ],
            }
        ],
        "excelConfigs": {"borderStyle": "thin", "autoFilter": True},
    }


@pytest.fixture
def slides_payload():
    return {
        "slides": [
            {"type": "title_slide", "title": "Quarterly Review", "subtitle": "2024"},
            {"type": "content_slide", "title": "Highlights", "content": ["Growth", "Hiring"]},
            {
                "type": "table_slide",
                "title": "Numbers",
                "content": [["Region", "Revenue"], ["EU", "$120"], ["US", "$340"]],
            },
            {
                "type": "chart_slide",
                "title": "Mix",
                "chartContent": {
                    "type": "pie",
                    "data": [{"name": "Share", "labels": ["EU", "US"], "values": [26, 74]}],
                },
            },
        ],
        "slideConfig": {"showFooter": True, "showSlideNumber": True, "layout": "LAYOUT_16x9"},
    }
