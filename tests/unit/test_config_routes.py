"""Tests for configuration routes."""

import pytest
from fastapi.testclient import TestClient

from lead_api import create_app
from lead_api.app import app_state
from lead_config import LeadFlowConfig, TurnTimings


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


class TestGetCurrentConfig:
    """Tests for GET /config/current endpoint."""

    def test_get_current_config(self, reset_app_state):
        """Test the loaded steps, retry policy and timings."""
        config = LeadFlowConfig(max_retries=3, turn=TurnTimings(silence_timeout=12))
        client = TestClient(create_app(config=config))

        response = client.get("/config/current")

        assert response.status_code == 200
        data = response.json()
        assert data["max_retries"] == 3
        assert data["turn"]["silence_timeout"] == 12.0
        assert data["steps"][1] == {
            "index": 1,
            "name": "email",
            "type": "email",
            "prompt": "What is your email?",
        }

    def test_get_current_config_not_loaded(self, reset_app_state):
        """Test the endpoint when no configuration is loaded."""
        client = TestClient(create_app())
        app_state.config = None

        response = client.get("/config/current")

        assert response.status_code == 503


class TestListAgents:
    """Tests for GET /config/agents endpoint."""

    def test_list_agents(self, reset_app_state):
        """Test the agent voice catalog."""
        client = TestClient(create_app())

        response = client.get("/config/agents")

        assert response.status_code == 200
        agents = response.json()
        assert [a["name"] for a in agents] == ["Sarah", "Emma", "Lisa", "David", "James", "Alex"]
        assert agents[0]["gender"] == "female"
        assert agents[3]["gender"] == "male"

    def test_list_agents_not_loaded(self, reset_app_state):
        """Test the endpoint when no configuration is loaded."""
        client = TestClient(create_app())
        app_state.config = None

        assert client.get("/config/agents").status_code == 503


class TestGetAgent:
    """Tests for GET /config/agents/{name} endpoint."""

    def test_get_agent_case_insensitive(self, reset_app_state):
        """Test an agent is found regardless of name case."""
        client = TestClient(create_app())

        response = client.get("/config/agents/david")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "David"
        assert data["gender"] == "male"

    def test_get_agent_not_found(self, reset_app_state):
        """Test an unknown agent name."""
        client = TestClient(create_app())

        response = client.get("/config/agents/nobody")

        assert response.status_code == 404
        assert response.json()["detail"] == "Agent 'nobody' not found."

    def test_get_agent_not_loaded(self, reset_app_state):
        """Test the endpoint when no configuration is loaded."""
        client = TestClient(create_app())
        app_state.config = None

        response = client.get("/config/agents/david")

        assert response.status_code == 503
