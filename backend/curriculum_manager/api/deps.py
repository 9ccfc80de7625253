"""
Curriculum Manager - API Dependencies
Shared FastAPI dependencies for the route modules
"""
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_manager.core.database import get_db
from curriculum_manager.services.curriculum import CurriculumService


async def get_curriculum_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CurriculumService:
    """Curriculum service bound to the request's session."""
    return CurriculumService(db)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurriculumServiceDep = Annotated[CurriculumService, Depends(get_curriculum_service)]
