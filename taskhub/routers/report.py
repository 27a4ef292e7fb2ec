import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import Project, Task, User
from taskhub.schemas.report import PdfReportRequest
from taskhub.services import analytics, pdf_report
from taskhub.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/generate-pdf")
def generate_pdf(payload: PdfReportRequest, current_user: User = Depends(get_current_user)):
    if not payload.html or not payload.filename or not payload.title:
        raise HTTPException(status_code=400, detail="Missing required fields")

    logger.info(f"Starting PDF generation for: {payload.title}")
    pdf = pdf_report.build_html_report_pdf(payload.html, payload.title)
    return _attachment(pdf, "application/pdf", pdf_report.pdf_filename(payload.filename))


@router.get("/analytics")
def analytics_export(
    format: str = "pdf",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if format not in ("pdf", "csv"):
        raise HTTPException(status_code=400, detail="format must be pdf or csv")

    users = db.query(User).order_by(User.department, User.name).all()
    tasks = db.query(Task).all()
    projects = db.query(Project).all()
    kpis = analytics.company_kpis(users, tasks, projects)
    departments = analytics.department_performance(users, tasks, projects)
    resources = analytics.resource_allocation(users, tasks)

    stem = f"analytics-{date.today().isoformat()}"
    if format == "csv":
        return _attachment(pdf_report.build_analytics_csv(kpis, departments, resources), "text/csv", f"{stem}.csv")
    return _attachment(pdf_report.build_analytics_pdf(kpis, departments, resources), "application/pdf", f"{stem}.pdf")
