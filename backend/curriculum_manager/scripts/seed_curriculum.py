"""
Curriculum Manager - Curriculum Seeder
Sample KG curriculum used for first runs of the local store and the database
"""
import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_manager.schemas.curriculum import CurriculumData

logger = logging.getLogger(__name__)


def _stage(stage_id, name, objective, duration, activity):
    return {
        "id": stage_id,
        "name": name,
        "learningObjectives": [objective],
        "duration": duration,
        "activities": [activity],
    }


def _activity(activity_id, name, activity_type, objective, duration):
    return {
        "id": activity_id,
        "name": name,
        "type": activity_type,
        "learningObjectives": [objective],
        "duration": duration,
    }


# Curriculum data for seeding, in the same camelCase shape the stores persist
CURRICULUM_DATA = {
    "curriculums": [
        {
            "id": "kg-curriculum",
            "name": "KG Curriculum",
            "description": "Kindergarten educational program",
            "standards": [
                {
                    "id": "iste-standards",
                    "name": "ISTE Standards",
                    "description": "International Society for Technology in Education Standards",
                    "codes": [
                        {
                            "id": "iste-1-1-1",
                            "code": "1.1.1",
                            "title": "Empowered Learner - Articulate Goals",
                            "description": (
                                "Students articulate personal learning goals, develop strategies "
                                "leveraging technology to achieve them, and reflect on the learning "
                                "process itself to improve learning outcomes."
                            ),
                            "level": "K-2",
                        },
                        {
                            "id": "iste-1-2-1",
                            "code": "1.2.1",
                            "title": "Digital Citizen - Cultivate Identity",
                            "description": (
                                "Students cultivate and manage their digital identity and reputation "
                                "and are aware of the permanence of their actions in the digital world."
                            ),
                            "level": "K-2",
                        },
                    ],
                }
            ],
            "activityTypes": [
                {
                    "id": "movement-activity",
                    "name": "Movement Activity",
                    "description": "Physical activities that involve body movement",
                    "color": "bg-pink-100 text-pink-800",
                    "icon": "Zap",
                },
                {
                    "id": "visual-learning",
                    "name": "Visual Learning",
                    "description": "Activities that use visual aids and materials",
                    "color": "bg-blue-100 text-blue-800",
                    "icon": "Eye",
                },
                {
                    "id": "hands-on-activity",
                    "name": "Hands-on Activity",
                    "description": "Interactive activities with physical manipulation",
                    "color": "bg-green-100 text-green-800",
                    "icon": "Hand",
                },
                {
                    "id": "reflection-activity",
                    "name": "Reflection Activity",
                    "description": "Activities focused on thinking and reflection",
                    "color": "bg-purple-100 text-purple-800",
                    "icon": "Brain",
                },
                {
                    "id": "group-activity",
                    "name": "Group Activity",
                    "description": "Collaborative activities done in groups",
                    "color": "bg-orange-100 text-orange-800",
                    "icon": "Users",
                },
            ],
            "grades": [
                {
                    "id": "kg1",
                    "name": "KG 1",
                    "books": [
                        {
                            "id": "book3",
                            "name": "Seasons and Weather - Book 3",
                            "units": [
                                {
                                    "id": "unit1",
                                    "name": "Unit 1",
                                    "learningObjectives": [
                                        "Identify different seasons",
                                        "Understand weather patterns",
                                    ],
                                    "totalTime": "4 Weeks",
                                    "lessons": [
                                        {
                                            "id": "lesson1",
                                            "name": "Lesson 1",
                                            "learningObjectives": [
                                                "Recognize seasonal changes",
                                                "Name weather conditions",
                                            ],
                                            "duration": "45 Minutes",
                                            "stages": [
                                                _stage(
                                                    "play1", "Play",
                                                    "Engage with weather concepts through play", "15 Minutes",
                                                    _activity(
                                                        "activity1", "Weather Dance", "Movement Activity",
                                                        "Express weather through movement", "10 Minutes",
                                                    ),
                                                ),
                                                _stage(
                                                    "lead1", "Lead",
                                                    "Learn weather vocabulary", "15 Minutes",
                                                    _activity(
                                                        "activity2", "Weather Chart", "Visual Learning",
                                                        "Identify weather symbols", "15 Minutes",
                                                    ),
                                                ),
                                                _stage(
                                                    "apply1", "Apply",
                                                    "Apply weather knowledge", "10 Minutes",
                                                    _activity(
                                                        "activity3", "Weather Matching", "Hands-on Activity",
                                                        "Match weather to seasons", "10 Minutes",
                                                    ),
                                                ),
                                                _stage(
                                                    "yield1", "Yield",
                                                    "Consolidate weather understanding", "5 Minutes",
                                                    _activity(
                                                        "activity4", "Weather Journal", "Reflection Activity",
                                                        "Reflect on weather learning", "5 Minutes",
                                                    ),
                                                ),
                                            ],
                                        }
                                    ],
                                }
                            ],
                        }
                    ],
                }
            ],
        }
    ]
}


def initial_curriculum_data() -> CurriculumData:
    """Fresh copy of the sample curriculum."""
    return CurriculumData.model_validate(CURRICULUM_DATA)


async def seed_curriculum(session: AsyncSession) -> bool:
    """
    Seed the database with the sample curriculum if it holds none.

    Returns:
        True when the sample curriculum was inserted
    """
    from curriculum_manager.models.curriculum import Curriculum
    from curriculum_manager.services.curriculum import CurriculumService

    result = await session.execute(select(func.count(Curriculum.id)))
    curriculum_count = result.scalar()
    if curriculum_count:
        logger.info(f"Curriculum already seeded ({curriculum_count} curriculums found)")
        return False

    await CurriculumService(session).restore(initial_curriculum_data())
    await session.commit()
    logger.info("Sample KG curriculum seeded")
    return True


async def main() -> None:
    from curriculum_manager.core.database import async_session_maker, init_db

    await init_db()
    async with async_session_maker() as session:
        await seed_curriculum(session)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
