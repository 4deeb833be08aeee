"""
Server-rendered pages.

Public data is rendered from the services directly. Pages that need the
caller's identity load their data from the REST API in the browser, using the
token kept in localStorage.
"""
from fastapi import APIRouter, Depends, Request, Query
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session
from typing import Optional

from auth.dependencies import get_db_session
from services.case_service import CaseService, case_to_dict, status_update_to_dict
from services.comment_service import CommentService
from services.analytics_service import AnalyticsService
from utils.formatters import TEMPLATE_FILTERS
import config


router = APIRouter(tags=["pages"], default_response_class=HTMLResponse)

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))
templates.env.filters.update(TEMPLATE_FILTERS)

# Pages the service worker keeps for offline use. They show live data, so
# browsers revalidate after a minute and may serve the stale copy meanwhile.
CACHED_ROUTES = ("/", "/dashboard", "/missing-persons", "/report", "/my-reports")
CACHE_CONTROL_CACHED = "public, max-age=60, stale-while-revalidate=86400"
CACHE_CONTROL_DEFAULT = "no-cache"

PAGE_SIZE = 12
HOME_RECENT_CASES = 6


def render(request: Request, template: str, status_code: int = 200, **context) -> HTMLResponse:
    """Render a template and attach the caching policy for its route."""
    response = templates.TemplateResponse(
        request,
        template,
        {"app_name": config.APP_NAME, **context},
        status_code=status_code,
    )
    if request.url.path in CACHED_ROUTES:
        response.headers["Cache-Control"] = CACHE_CONTROL_CACHED
    else:
        response.headers["Cache-Control"] = CACHE_CONTROL_DEFAULT
    return response


@router.get("/")
async def home_page(request: Request, db: Session = Depends(get_db_session)):
    """Landing page: headline statistics and the most recent reports."""
    cases, _ = CaseService.list_cases(db, limit=HOME_RECENT_CASES, offset=0)
    return render(
        request,
        "index.html",
        stats=AnalyticsService.statistics(db),
        cases=[case_to_dict(case) for case in cases],
    )


@router.get("/missing-persons")
async def missing_persons_page(
    request: Request,
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db_session)
):
    """Browse cases with filters and pagination."""
    error = None
    offset = (page - 1) * PAGE_SIZE
    try:
        cases, total = CaseService.list_cases(
            db, status=status or None, priority=priority or None, search=search or None,
            limit=PAGE_SIZE, offset=offset
        )
    except ValueError as e:
        cases, total, error = [], 0, str(e)

    return render(
        request,
        "list.html",
        cases=[case_to_dict(case) for case in cases],
        total=total,
        page=page,
        has_next=offset + PAGE_SIZE < total,
        filters={"status": status or "", "priority": priority or "", "search": search or ""},
        error=error,
    )


@router.get("/missing-persons/{case_id}")
async def case_detail_page(request: Request, case_id: int, db: Session = Depends(get_db_session)):
    """Case detail with status history, comments and the tip form."""
    case = CaseService.get_case(db, case_id)
    if case is None:
        return render(request, "not_found.html", status_code=404, message="Missing person not found")

    return render(
        request,
        "detail.html",
        case=case_to_dict(case),
        updates=[status_update_to_dict(u) for u in CaseService.status_history(db, case_id)],
        comments=[CommentService.to_dict(c) for c in CommentService.list_for_case(db, case_id)],
    )


@router.get("/map")
async def map_page(request: Request, db: Session = Depends(get_db_session)):
    """Open cases with last-seen coordinates on a map."""
    markers = [
        {
            "id": case.id,
            "full_name": case.full_name,
            "case_number": case.case_number,
            "status": case.status.value,
            "priority": case.priority.value,
            "latitude": case.last_seen_latitude,
            "longitude": case.last_seen_longitude,
            "last_seen_location": case.last_seen_location,
        }
        for case in CaseService.with_coordinates(db)
    ]
    return render(request, "map.html", markers=markers)


@router.get("/report")
async def report_page(request: Request):
    return render(request, "report.html")


@router.get("/login")
async def login_page(request: Request):
    return render(request, "login.html")


@router.get("/register")
async def register_page(request: Request):
    return render(request, "register.html")


@router.get("/my-reports")
async def my_reports_page(request: Request):
    return render(request, "my_reports.html")


@router.get("/dashboard")
async def dashboard_page(request: Request):
    """Notifications and location tracking consent."""
    return render(request, "dashboard.html", sync_tag=config.SYNC_TAG)


@router.get("/admin")
async def admin_page(request: Request):
    """Analytics dashboard. Data comes from /api/admin/analytics."""
    return render(request, "admin.html")


@router.get("/admin/live-tracking")
async def live_tracking_page(request: Request):
    """Live map of tracked accounts. Data comes from /api/location/users."""
    return render(request, "live_tracking.html")


@router.get("/sw.js")
async def service_worker(request: Request):
    """
    Service worker: offline copies of the cached routes and replay of queued
    location fixes on the sync-location tag. Served from the root so its scope
    covers every page.
    """
    response = templates.TemplateResponse(
        request,
        "sw.js",
        {
            "cached_routes": list(CACHED_ROUTES),
            "cache_name": config.OFFLINE_CACHE_NAME,
            "sync_tag": config.SYNC_TAG,
        },
        media_type="application/javascript",
    )
    response.headers["Cache-Control"] = CACHE_CONTROL_DEFAULT
    response.headers["Service-Worker-Allowed"] = "/"
    return response
