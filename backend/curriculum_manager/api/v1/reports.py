"""
Curriculum Manager - Reports API
Standards coverage and CSV exports
"""
from fastapi import APIRouter
from fastapi.responses import Response

from curriculum_manager.api.deps import CurriculumServiceDep
from curriculum_manager.schemas.curriculum import StandardMapping
from curriculum_manager.services.csv_import import export_curriculums_csv
from curriculum_manager.services.standards_report import (
    build_standards_report,
    standards_report_csv,
)

router = APIRouter(prefix="/reports", tags=["Reports"])


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/standards", response_model=list[StandardMapping])
async def get_standards_report(
    service: CurriculumServiceDep,
    curriculum_id: str | None = None,
    grade_id: str | None = None,
    standard_id: str | None = None,
):
    """
    Standard codes with every curriculum element mapped to them.

    Filters narrow the search to one curriculum, grade or standard.
    """
    data = await service.load_tree()
    return build_standards_report(data, curriculum_id, grade_id, standard_id)


@router.get("/standards.csv")
async def export_standards_report(
    service: CurriculumServiceDep,
    curriculum_id: str | None = None,
    grade_id: str | None = None,
    standard_id: str | None = None,
):
    """Standards report as a CSV download."""
    data = await service.load_tree()
    report = build_standards_report(data, curriculum_id, grade_id, standard_id)
    return _csv_response(standards_report_csv(report), "standards-report.csv")


@router.get("/curriculums.csv")
async def export_curriculums(service: CurriculumServiceDep):
    """Whole tree in the CSV upload format."""
    data = await service.load_tree()
    return _csv_response(export_curriculums_csv(data), "curriculums.csv")
