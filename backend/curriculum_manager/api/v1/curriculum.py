"""
Curriculum Manager - Curriculum API
Endpoints for reading the curriculum tree and editing its nodes
"""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from curriculum_manager.api.deps import CurriculumServiceDep, DbSession
from curriculum_manager.schemas.curriculum import (
    ActivityCreate,
    ActivityTypeCreate,
    ActivityTypeUpdate,
    ActivityUpdate,
    BookCreate,
    CurriculumCreate,
    CurriculumData,
    CurriculumUpdate,
    CurriculumUpload,
    DeleteResponse,
    GradeCreate,
    LessonCreate,
    NodeUpdate,
    StageCreate,
    StandardCodeCreate,
    StandardCodeUpdate,
    StandardCreate,
    StandardUpdate,
    UnitCreate,
    UnitUpdate,
    UploadResponse,
)
from curriculum_manager.services.curriculum import ParentNotFoundError
from curriculum_manager.services.tree_store import NodeKind

router = APIRouter(tags=["Curriculum"])


@router.get("/health")
async def health_check(db: DbSession):
    """Server and database status."""
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "unhealthy",
                "message": "Database connection failed",
                "error": str(e),
            },
        )
    return {
        "status": "healthy",
        "message": "Server and database are running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/curriculums", response_model=CurriculumData)
async def get_curriculums(service: CurriculumServiceDep):
    """
    Get the full nested curriculum tree.
    """
    return await service.load_tree()


@router.post(
    "/curriculum/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_curriculums(
    upload: CurriculumUpload,
    service: CurriculumServiceDep,
    db: DbSession,
):
    """
    Bulk-create curriculums parsed from a CSV file.

    Each curriculum is imported on its own; failures are listed in
    ``results.errors`` and do not affect the others.
    """
    results = await service.upload(upload.curriculums)
    await db.commit()
    return UploadResponse(message="Curriculum uploaded successfully", results=results)


def _register_node_routes(
    kind: NodeKind,
    resource: str,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
) -> None:
    """Add POST /{resource}, PUT and DELETE /{resource}/{id} for one kind."""
    label = kind.value.replace("_", " ").capitalize()

    @router.post(
        f"/{resource}",
        status_code=status.HTTP_201_CREATED,
        name=f"create_{kind.value}",
    )
    async def create_node(payload: create_schema, service: CurriculumServiceDep, db: DbSession) -> dict[str, Any]:
        try:
            node = await service.create_node(kind, payload)
        except ParentNotFoundError as e:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=str(e),
            )
        await db.commit()
        return node

    @router.put(f"/{resource}/{{node_id}}", name=f"update_{kind.value}")
    async def update_node(
        node_id: str, payload: update_schema, service: CurriculumServiceDep, db: DbSession
    ) -> dict[str, Any]:
        node = await service.update_node(kind, node_id, payload)
        if node is None:
            # Unknown ids are a no-op; echo the request like a successful update
            return {
                "id": node_id,
                **{to_camel(name): value for name, value in payload.model_dump(exclude_unset=True).items()},
            }
        await db.commit()
        return node

    @router.delete(
        f"/{resource}/{{node_id}}",
        response_model=DeleteResponse,
        name=f"delete_{kind.value}",
    )
    async def delete_node(node_id: str, service: CurriculumServiceDep, db: DbSession):
        await service.delete_node(kind, node_id)
        await db.commit()
        return DeleteResponse(message=f"{label} deleted successfully")


_register_node_routes(NodeKind.CURRICULUM, "curriculums", CurriculumCreate, CurriculumUpdate)
_register_node_routes(NodeKind.GRADE, "grades", GradeCreate, NodeUpdate)
_register_node_routes(NodeKind.BOOK, "books", BookCreate, NodeUpdate)
_register_node_routes(NodeKind.UNIT, "units", UnitCreate, UnitUpdate)
_register_node_routes(NodeKind.LESSON, "lessons", LessonCreate, NodeUpdate)
_register_node_routes(NodeKind.STAGE, "stages", StageCreate, NodeUpdate)
_register_node_routes(NodeKind.ACTIVITY, "activities", ActivityCreate, ActivityUpdate)
_register_node_routes(NodeKind.STANDARD, "standards", StandardCreate, StandardUpdate)
_register_node_routes(NodeKind.STANDARD_CODE, "standard-codes", StandardCodeCreate, StandardCodeUpdate)
_register_node_routes(NodeKind.ACTIVITY_TYPE, "activity-types", ActivityTypeCreate, ActivityTypeUpdate)
