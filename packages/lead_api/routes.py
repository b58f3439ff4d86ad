"""API routes for the lead collection chat."""

import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query  # type: ignore[import-not-found]

from lead_core import EngineError, SessionCompletedError
from lead_core.metrics import ANSWERS_PROCESSED, HTTP_LATENCY, HTTP_REQUESTS
from lead_runtime import LeadRecord

from .app import get_app_state
from .models import (
    ChatMessageRequest,
    ChatMessageResponse,
    ErrorResponse,
    SessionResponse,
    StartChatResponse,
)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post(
    "/chat/start",
    response_model=StartChatResponse,
    responses={503: {"model": ErrorResponse}},
)  # type: ignore[misc]
async def start_chat() -> StartChatResponse:
    """Start a new lead collection session.

    Returns:
        StartChatResponse with session ID and the first question

    Raises:
        HTTPException: If the engine is not configured
    """
    start_time = time.perf_counter()
    status_code = "200"

    try:
        state = get_app_state()

        if state.engine is None:
            status_code = "503"
            raise HTTPException(status_code=503, detail="Step engine not configured.")

        session, message = state.engine.start_session()

        return StartChatResponse(session_id=session.session_id, message=message)
    except HTTPException:
        raise
    except Exception:
        status_code = "500"
        raise
    finally:
        HTTP_LATENCY.labels(method="POST", endpoint="/api/chat/start").observe(
            time.perf_counter() - start_time
        )
        HTTP_REQUESTS.labels(method="POST", endpoint="/api/chat/start", status=status_code).inc()


@router.post(
    "/chat/message",
    response_model=ChatMessageResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)  # type: ignore[misc]
async def send_message(request: ChatMessageRequest) -> ChatMessageResponse:
    """Answer the current question of a session.

    Args:
        request: Session ID and the user's answer

    Returns:
        ChatMessageResponse with the agent's next message

    Raises:
        HTTPException: If the session is unknown or already complete
    """
    start_time = time.perf_counter()
    status_code = "200"

    try:
        state = get_app_state()

        if state.engine is None or state.store is None:
            status_code = "503"
            raise HTTPException(status_code=503, detail="Step engine not configured.")

        session = state.store.get(request.session_id)
        if session is None:
            status_code = "404"
            raise HTTPException(
                status_code=404,
                detail=f"Session '{request.session_id}' not found.",
            )

        outcome = await state.engine.process_answer(session, request.message)

        ANSWERS_PROCESSED.labels(status="success").inc()

        return ChatMessageResponse(
            agent_message=outcome.agent_message,
            is_complete=outcome.is_complete,
            validation_error=outcome.validation_error,
            should_auto_listen=outcome.should_auto_listen,
        )
    except SessionCompletedError as e:
        status_code = "409"
        ANSWERS_PROCESSED.labels(status="rejected").inc()
        raise HTTPException(status_code=409, detail=str(e)) from e
    except EngineError as e:
        status_code = "500"
        ANSWERS_PROCESSED.labels(status="error").inc()
        raise HTTPException(status_code=500, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception:
        status_code = "500"
        ANSWERS_PROCESSED.labels(status="error").inc()
        raise
    finally:
        HTTP_LATENCY.labels(method="POST", endpoint="/api/chat/message").observe(
            time.perf_counter() - start_time
        )
        HTTP_REQUESTS.labels(method="POST", endpoint="/api/chat/message", status=status_code).inc()


@router.get(
    "/chat/{session_id}",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
)  # type: ignore[misc]
async def get_session(session_id: str) -> SessionResponse:
    """Get the current state of a session.

    Args:
        session_id: The session ID

    Returns:
        SessionResponse with step progress and collected data

    Raises:
        HTTPException: If session not found
    """
    start_time = time.perf_counter()
    status_code = "200"

    try:
        state = get_app_state()

        if state.engine is None or state.store is None:
            status_code = "503"
            raise HTTPException(status_code=503, detail="Step engine not configured.")

        session = state.store.get(session_id)
        if session is None:
            status_code = "404"
            raise HTTPException(
                status_code=404,
                detail=f"Session '{session_id}' not found.",
            )

        step = state.engine.current_step(session)

        return SessionResponse(
            session_id=session.session_id,
            status=session.status.value,
            current_step=session.current_step,
            current_field=step.name if step is not None else None,
            collected_data=session.get_collected_data(),
            retry_counts={
                name: field.attempts for name, field in session.collected_fields.items()
            },
            started_at=session.started_at,
            updated_at=session.updated_at,
        )
    except HTTPException:
        raise
    except Exception:
        status_code = "500"
        raise
    finally:
        HTTP_LATENCY.labels(method="GET", endpoint="/api/chat/{id}").observe(
            time.perf_counter() - start_time
        )
        HTTP_REQUESTS.labels(method="GET", endpoint="/api/chat/{id}", status=status_code).inc()


@router.get("/leads", response_model=List[LeadRecord])  # type: ignore[misc]
async def list_leads(
    limit: Optional[int] = Query(default=None, ge=1, description="Maximum leads to return"),
) -> List[LeadRecord]:
    """List completed leads, most recent first.

    Args:
        limit: Optional maximum number of leads

    Returns:
        Completed lead records
    """
    start_time = time.perf_counter()
    status_code = "200"

    try:
        state = get_app_state()

        if state.engine is None:
            status_code = "503"
            raise HTTPException(status_code=503, detail="Step engine not configured.")

        return state.engine.list_leads(limit=limit)
    except HTTPException:
        raise
    except Exception:
        status_code = "500"
        raise
    finally:
        HTTP_LATENCY.labels(method="GET", endpoint="/api/leads").observe(
            time.perf_counter() - start_time
        )
        HTTP_REQUESTS.labels(method="GET", endpoint="/api/leads", status=status_code).inc()
