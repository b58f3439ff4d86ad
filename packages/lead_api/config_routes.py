"""API routes exposing the loaded flow configuration.

The voice client reads the agent catalog and turn timings from here so
that they stay in one YAML file with the question sequence.
"""

from typing import Any

from fastapi import APIRouter, HTTPException  # type: ignore[import-not-found]
from pydantic import BaseModel, Field

from lead_config import AgentVoiceProfile, TurnTimings

from .app import get_app_state

config_router = APIRouter(prefix="/config", tags=["configuration"])


class CurrentConfigResponse(BaseModel):
    """Response model for the current flow configuration."""

    steps: list[dict[str, Any]] = Field(default_factory=list, description="Ordered questions")
    max_retries: int = Field(..., description="Failures tolerated before typed input")
    turn: TurnTimings = Field(..., description="Voice turn controller timings")


@config_router.get("/current", response_model=CurrentConfigResponse)  # type: ignore[misc]
async def get_current_config() -> CurrentConfigResponse:
    """Get the currently loaded flow configuration.

    Returns:
        Steps, retry policy and timings

    Raises:
        HTTPException: If no configuration is loaded
    """
    state = get_app_state()

    if state.config is None:
        raise HTTPException(status_code=503, detail="No configuration loaded.")

    return CurrentConfigResponse(
        steps=[
            {
                "index": index,
                "name": step.name,
                "type": step.field_type.value,
                "prompt": step.prompt,
            }
            for index, step in enumerate(state.config.steps)
        ],
        max_retries=state.config.max_retries,
        turn=state.config.turn,
    )


@config_router.get("/agents", response_model=list[AgentVoiceProfile])  # type: ignore[misc]
async def list_agents() -> list[AgentVoiceProfile]:
    """List the selectable agent voices.

    Returns:
        Agent voice catalog

    Raises:
        HTTPException: If no configuration is loaded
    """
    state = get_app_state()

    if state.config is None:
        raise HTTPException(status_code=503, detail="No configuration loaded.")

    return list(state.config.agents)


@config_router.get("/agents/{name}", response_model=AgentVoiceProfile)  # type: ignore[misc]
async def get_agent(name: str) -> AgentVoiceProfile:
    """Get one agent voice by name (case-insensitive).

    Args:
        name: Agent name

    Returns:
        Agent voice profile

    Raises:
        HTTPException: If no configuration is loaded or the agent is unknown
    """
    state = get_app_state()

    if state.config is None:
        raise HTTPException(status_code=503, detail="No configuration loaded.")

    agent = state.config.get_agent_by_name(name)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"Agent '{name}' not found.")

    return agent
