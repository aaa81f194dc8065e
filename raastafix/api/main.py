"""
RaastaFix - REST API

FastAPI application for submitting civic issue reports, triaging them as
an authority, and reading analytics.

The acting user is the stored session user (see /api/v1/session); there
is no token-based authentication.

Run with: uvicorn raastafix.api.main:app --reload
"""

import base64
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional, List

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from raastafix import __version__
from raastafix.core.config import settings
from raastafix.core.constants import ISSUE_TYPE_LABELS
from raastafix.core.logging import setup_logging
from raastafix.alerts.notifier import Notifier
from raastafix.analysis.analytics import (
    calculate_analytics,
    get_issue_type_stats,
    get_report_trends,
    summarize_statuses,
)
from raastafix.analysis.export import DEFAULT_FILENAME, export_to_csv
from raastafix.analysis.leaderboard import build_leaderboard
from raastafix.crowdsource.accounts import (
    AccountService,
    AccountValidationError,
    SignUpRequest,
)
from raastafix.crowdsource.intake import ReportIntake
from raastafix.crowdsource.lifecycle import LifecycleResult, RefusalReason, ReportLifecycle
from raastafix.crowdsource.models import IssueType, ReportStatus, User, UserRole
from raastafix.crowdsource.validation import NewReportInput, ReportValidationError
from raastafix.database.repository import CivicRepository
from raastafix.database.store import create_store
from raastafix.ingestion.geolocation import StaticLocator

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the database only if a request opened it
    if get_repository.cache_info().currsize:
        get_repository().store.db.close()


# FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="RaastaFix",
    description="Civic issue reporting: citizens report road and utility problems, authorities triage them",
    version=__version__,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    database: bool
    weather_api_configured: bool


class SessionRequest(BaseModel):
    """Sign-up / sign-in form."""
    name: str
    email: str
    role: UserRole = UserRole.CITIZEN
    phone: str = ""
    gov_id: str = ""
    password: str = ""


class RejectRequest(BaseModel):
    """Optional explanation for a rejection."""
    reason: Optional[str] = Field(default=None, max_length=500)


class ReportListResponse(BaseModel):
    """List of reports."""
    count: int
    reports: List[dict]


# ============================================================================
# Dependencies
# ============================================================================

@lru_cache()
def get_repository() -> CivicRepository:
    """Repository backed by the configured database."""
    return CivicRepository(create_store(settings.database_url))


def get_lifecycle(repository: CivicRepository = Depends(get_repository)) -> ReportLifecycle:
    return ReportLifecycle(repository, notifier=Notifier(repository))


def get_intake(lifecycle: ReportLifecycle = Depends(get_lifecycle)) -> ReportIntake:
    return ReportIntake(lifecycle)


def get_accounts(repository: CivicRepository = Depends(get_repository)) -> AccountService:
    return AccountService(repository)


def require_user(repository: CivicRepository = Depends(get_repository)) -> User:
    """The signed-in session user."""
    user = repository.get_current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Sign in first")
    return user


REFUSAL_STATUS = {
    RefusalReason.NOT_AUTHORIZED: 403,
    RefusalReason.NOT_FOUND: 404,
    RefusalReason.INVALID_TRANSITION: 409,
    RefusalReason.DUPLICATE: 409,
}


def _raise_for_refusal(result: LifecycleResult) -> None:
    if result.ok:
        return
    detail = {"reason": result.reason.value, "message": result.message}
    if result.duplicate_of:
        detail["duplicate_of"] = result.duplicate_of
    raise HTTPException(status_code=REFUSAL_STATUS[result.reason], detail=detail)


# ============================================================================
# System Routes
# ============================================================================

@app.get("/", tags=["System"])
async def root():
    """Service summary."""
    return {
        "name": "RaastaFix",
        "version": __version__,
        "docs": "/docs",
        "issue_types": ISSUE_TYPE_LABELS,
    }


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(repository: CivicRepository = Depends(get_repository)):
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=repository.store.db.check_connection(),
        weather_api_configured=bool(settings.openweather_api_key),
    )


# ============================================================================
# Session Routes
# ============================================================================

@app.post("/api/v1/session", tags=["Session"])
async def sign_in(request: SessionRequest, accounts: AccountService = Depends(get_accounts)):
    """Sign in, creating the account on first use."""
    try:
        user = accounts.authenticate(SignUpRequest(**request.model_dump()))
    except AccountValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return user.to_dict()


@app.get("/api/v1/session", tags=["Session"])
async def current_session(user: User = Depends(require_user)):
    """Get the signed-in user."""
    return user.to_dict()


@app.delete("/api/v1/session", status_code=204, tags=["Session"])
async def sign_out(accounts: AccountService = Depends(get_accounts)):
    """Sign out."""
    accounts.sign_out()


@app.get("/api/v1/notifications", tags=["Session"])
async def list_notifications(user: User = Depends(require_user)):
    """Notifications of the signed-in user, newest first."""
    return {
        "unread": user.unread_count,
        "notifications": [n.to_dict() for n in user.notifications],
    }


@app.post("/api/v1/notifications/read", tags=["Session"])
async def mark_notifications_read(
    user: User = Depends(require_user),
    accounts: AccountService = Depends(get_accounts),
):
    """Mark all notifications as read."""
    updated = accounts.mark_notifications_read(user.email)
    return {"unread": updated.unread_count if updated else 0}


# ============================================================================
# Report Routes
# ============================================================================

@app.post("/api/v1/reports", status_code=201, tags=["Reports"])
async def create_report(
    type: str = Form(...),
    title: str = Form(...),
    description: str = Form(...),
    latitude: Optional[float] = Form(None, ge=-90, le=90),
    longitude: Optional[float] = Form(None, ge=-180, le=180),
    photo: UploadFile = File(...),
    user: User = Depends(require_user),
    intake: ReportIntake = Depends(get_intake),
):
    """
    Submit a report with a photo.

    Location comes from the photo's GPS tags, then the given coordinates,
    then a demo location. A report of the same type at the same spot that
    is still open makes this a duplicate (409).
    """
    photo_data = await photo.read()
    image_url = None
    if photo_data:
        content_type = photo.content_type or "image/jpeg"
        image_url = f"data:{content_type};base64,{base64.b64encode(photo_data).decode('ascii')}"

    locator = None
    if latitude is not None and longitude is not None:
        locator = StaticLocator(latitude, longitude)

    try:
        outcome = await intake.submit(
            NewReportInput(type=type, title=title, description=description, image_url=image_url),
            reporter=user,
            image_data=photo_data,
            locator=locator,
        )
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _raise_for_refusal(outcome.result)
    return outcome.to_dict()


@app.get("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
async def list_reports(
    status: Optional[ReportStatus] = Query(None, description="Filter by status"),
    type: Optional[IssueType] = Query(None, description="Filter by issue type"),
    mine: bool = Query(False, description="Only the signed-in user's reports"),
    q: Optional[str] = Query(None, description="Search title, description and address"),
    limit: int = Query(default=100, ge=1, le=500),
    repository: CivicRepository = Depends(get_repository),
):
    """List reports with optional filters."""
    reports = repository.get_reports()

    if mine:
        current = repository.get_current_user()
        if current is None:
            raise HTTPException(status_code=401, detail="Sign in first")
        reports = [r for r in reports if r.reported_by_email == current.email]
    if status is not None:
        reports = [r for r in reports if r.status == status]
    if type is not None:
        reports = [r for r in reports if r.type == type]
    if q:
        query = q.lower()
        reports = [
            r for r in reports
            if query in r.title.lower()
            or query in r.description.lower()
            or query in r.location.address.lower()
        ]

    reports = reports[:limit]
    return ReportListResponse(count=len(reports), reports=[r.to_dict() for r in reports])


@app.get("/api/v1/reports/export.csv", response_class=PlainTextResponse, tags=["Reports"])
async def export_reports(repository: CivicRepository = Depends(get_repository)):
    """Download all reports as CSV."""
    return PlainTextResponse(
        export_to_csv(repository.get_reports()),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={DEFAULT_FILENAME}"},
    )


@app.get("/api/v1/reports/{report_id}", tags=["Reports"])
async def get_report(report_id: str, lifecycle: ReportLifecycle = Depends(get_lifecycle)):
    """Get a report by ID (counts as a view)."""
    report = lifecycle.record_view(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report.to_dict()


@app.post("/api/v1/reports/{report_id}/approve", tags=["Triage"])
async def approve_report(
    report_id: str,
    user: User = Depends(require_user),
    lifecycle: ReportLifecycle = Depends(get_lifecycle),
):
    """Approve a pending report (authority only)."""
    result = lifecycle.approve(report_id, user)
    _raise_for_refusal(result)
    return result.to_dict()


@app.post("/api/v1/reports/{report_id}/reject", tags=["Triage"])
async def reject_report(
    report_id: str,
    request: Optional[RejectRequest] = None,
    user: User = Depends(require_user),
    lifecycle: ReportLifecycle = Depends(get_lifecycle),
):
    """Reject a pending report (authority only)."""
    result = lifecycle.reject(report_id, user, reason=request.reason if request else None)
    _raise_for_refusal(result)
    return result.to_dict()


@app.post("/api/v1/reports/{report_id}/resolve", tags=["Triage"])
async def resolve_report(
    report_id: str,
    user: User = Depends(require_user),
    lifecycle: ReportLifecycle = Depends(get_lifecycle),
):
    """Mark an in-progress report resolved (authority only)."""
    result = lifecycle.resolve(report_id, user)
    _raise_for_refusal(result)
    return result.to_dict()


# ============================================================================
# Analytics Routes
# ============================================================================

@app.get("/api/v1/analytics", tags=["Analytics"])
async def analytics(repository: CivicRepository = Depends(get_repository)):
    """Headline analytics."""
    return calculate_analytics(repository.get_reports()).to_dict()


@app.get("/api/v1/analytics/issue-types", tags=["Analytics"])
async def issue_type_stats(repository: CivicRepository = Depends(get_repository)):
    """Totals per issue type."""
    return get_issue_type_stats(repository.get_reports())


@app.get("/api/v1/analytics/trends", tags=["Analytics"])
async def report_trends(repository: CivicRepository = Depends(get_repository)):
    """Daily submissions over the last seven days."""
    return get_report_trends(repository.get_reports())


@app.get("/api/v1/stats", tags=["Analytics"])
async def status_summary(repository: CivicRepository = Depends(get_repository)):
    """Report counts by status."""
    return summarize_statuses(repository.get_reports())


@app.get("/api/v1/leaderboard", tags=["Analytics"])
async def leaderboard(repository: CivicRepository = Depends(get_repository)):
    """Top citizens this month."""
    return [entry.to_dict() for entry in build_leaderboard(repository.get_reports())]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
