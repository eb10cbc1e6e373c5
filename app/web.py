from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import PipelineState
from services.admin import AdminAction
from services.dashboard import DashboardService, build_default_dashboard


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    dashboard: DashboardService = Depends(get_dashboard),
) -> HTMLResponse:
    handle = dashboard.renderer.current
    status = dashboard.status
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "chart_options": handle.options if handle is not None else None,
            "container_id": dashboard.renderer.container_id,
            "status": status,
            "failed": status.state is PipelineState.failed,
            "live_value": dashboard.sink.value,
            "actions": list(AdminAction),
        },
    )
