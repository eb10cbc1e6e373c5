"""HTTP route definitions for the dashboard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.schemas import (
    ActionResultResponse,
    ChartResponse,
    LiveValueResponse,
    PipelineStatus,
    SeriesPayload,
)
from services.admin import AdminAction
from services.dashboard import DashboardService, build_default_dashboard
from services.live import ListenerState

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


@router.get(
    "/api/chart",
    response_model=ChartResponse,
    summary="Fetch the chart currently on display.",
)
async def get_chart(
    dashboard: DashboardService = Depends(get_dashboard),
) -> ChartResponse:
    handle = dashboard.renderer.current
    if handle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=dashboard.status.reason or "No chart has been rendered yet.",
        )
    return ChartResponse(
        revision=handle.revision,
        series=SeriesPayload(
            categories=list(handle.series.categories),
            values=list(handle.series.values),
        ),
        options=handle.options,
    )


@router.get(
    "/api/live",
    response_model=LiveValueResponse,
    summary="Latest reading received on the live channel.",
)
async def get_live_value(
    dashboard: DashboardService = Depends(get_dashboard),
) -> LiveValueResponse:
    sink = dashboard.sink
    listener = dashboard.listener
    return LiveValueResponse(
        value=sink.value,
        updated_at=sink.updated_at,
        message_count=sink.message_count,
        state=listener.state if listener is not None else ListenerState.closed,
    )


@router.get(
    "/api/status",
    response_model=PipelineStatus,
    summary="Outcome of the most recent history refresh.",
)
async def get_status(
    dashboard: DashboardService = Depends(get_dashboard),
) -> PipelineStatus:
    return dashboard.status


@router.post(
    "/api/refresh",
    response_model=PipelineStatus,
    summary="Re-run the fetch, normalize and render sequence.",
)
async def refresh(
    dashboard: DashboardService = Depends(get_dashboard),
) -> PipelineStatus:
    return await dashboard.refresh()


@router.post(
    "/api/actions/{action}",
    response_model=ActionResultResponse,
    summary="Run a destructive device action.",
    responses={status.HTTP_502_BAD_GATEWAY: {"model": ActionResultResponse}},
)
async def run_action(
    action: AdminAction,
    dashboard: DashboardService = Depends(get_dashboard),
) -> JSONResponse:
    result = await dashboard.run_action(action)
    body = ActionResultResponse.from_result(result)
    status_code = status.HTTP_200_OK if result.succeeded else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard."}
