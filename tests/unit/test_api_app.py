"""Tests for the FastAPI application factory."""

import pytest
from fastapi.testclient import TestClient

from lead_api import create_app
from lead_api.app import AppState, app_state, get_app_state
from lead_config import ConfigurationError, ConversationStep, LeadFlowConfig
from lead_core import StepEngine
from lead_runtime import SessionStore


@pytest.fixture
def custom_config():
    """Create a two-step flow configuration."""
    return LeadFlowConfig(
        steps=[
            ConversationStep(name="name", prompt="Who is calling?"),
            ConversationStep(name="email", field_type="email", prompt="Your email?"),
        ],
        completion_message="Thanks {name}",
    )


@pytest.fixture
def reset_app_state():
    """Reset application state before and after tests."""
    app_state.engine = None
    app_state.store = None
    app_state.config = None
    yield
    app_state.engine = None
    app_state.store = None
    app_state.config = None


class TestCreateApp:
    """Tests for create_app function."""

    def test_create_app_without_config(self, reset_app_state):
        """Test the default flow is used when nothing is given."""
        app = create_app()

        assert app.title == "Voice Lead Collection"
        assert app_state.config.step_count == 4
        assert isinstance(app_state.engine, StepEngine)
        assert isinstance(app_state.store, SessionStore)

    def test_create_app_with_config(self, custom_config, reset_app_state):
        """Test creating the app with a pre-loaded configuration."""
        create_app(config=custom_config)

        assert app_state.config is custom_config
        assert app_state.engine.config is custom_config

    def test_create_app_with_config_path(self, tmp_path, reset_app_state):
        """Test creating the app from a YAML file."""
        config_file = tmp_path / "flow.yaml"
        config_file.write_text("max_retries: 5\n")

        create_app(config_path=str(config_file))

        assert app_state.config.max_retries == 5

    def test_create_app_with_invalid_config_path(self, tmp_path, reset_app_state):
        """Test a bad configuration file fails app creation."""
        config_file = tmp_path / "flow.yaml"
        config_file.write_text("steps: []\n")

        with pytest.raises(ConfigurationError):
            create_app(config_path=str(config_file))

    def test_create_app_with_cors_origins(self, reset_app_state):
        """Test CORS preflight for a configured origin."""
        app = create_app(cors_origins=["http://localhost:3000"])
        client = TestClient(app)

        response = client.options(
            "/api/chat/start",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_custom_flow_first_prompt(self, custom_config, reset_app_state):
        """Test the app serves the configured first question."""
        client = TestClient(create_app(config=custom_config))

        response = client.post("/api/chat/start")

        assert response.json()["message"] == "Who is calling?"


class TestAppEndpoints:
    """Tests for service endpoints."""

    def test_health_check(self, reset_app_state):
        """Test health reports active sessions only."""
        client = TestClient(create_app())
        client.post("/api/chat/start")

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["engine_configured"] is True
        assert data["active_sessions"] == 1

    def test_health_check_without_engine(self, reset_app_state):
        """Test health when the engine has been cleared."""
        client = TestClient(create_app())
        app_state.engine = None
        app_state.store = None

        data = client.get("/health").json()

        assert data["engine_configured"] is False
        assert data["active_sessions"] == 0

    def test_root_endpoint(self, reset_app_state):
        """Test the root endpoint."""
        client = TestClient(create_app())

        data = client.get("/").json()

        assert data["message"] == "Welcome to the Voice Lead Collection API"
        assert data["docs_url"] == "/docs"

    def test_metrics_endpoint(self, reset_app_state):
        """Test Prometheus metrics are exposed."""
        client = TestClient(create_app())
        client.post("/api/chat/start")

        response = client.get("/metrics/")

        assert response.status_code == 200
        assert "lead_http_requests_total" in response.text
        assert "lead_sessions_active" in response.text

    def test_lifespan_clears_state(self, reset_app_state):
        """Test shutdown releases the engine and store."""
        app = create_app()

        with TestClient(app) as client:
            assert client.get("/health").json()["engine_configured"] is True

        assert app_state.engine is None
        assert app_state.store is None

    def test_openapi_endpoint(self, reset_app_state):
        """Test the OpenAPI schema lists the chat routes."""
        client = TestClient(create_app())

        paths = client.get("/openapi.json").json()["paths"]

        assert "/api/chat/start" in paths
        assert "/api/chat/message" in paths
        assert "/api/leads" in paths


class TestAppState:
    """Tests for AppState."""

    def test_app_state_initialization(self):
        """Test a fresh AppState holds nothing."""
        state = AppState()

        assert state.engine is None
        assert state.store is None
        assert state.config is None

    def test_get_app_state_returns_singleton(self):
        """Test get_app_state returns the module-level state."""
        assert get_app_state() is app_state
