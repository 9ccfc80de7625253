"""
Curriculum Manager - Curriculum API Tests
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_manager.scripts.seed_curriculum import seed_curriculum
from curriculum_manager.services.curriculum import CurriculumService


async def _create_chain(client: AsyncClient) -> dict[str, str]:
    """Math > G1 > B1 > U1, returning the ids."""
    ids = {}
    response = await client.post("/api/curriculums", json={"name": "Math", "description": "Numbers"})
    ids["curriculum"] = response.json()["id"]
    response = await client.post("/api/grades", json={
        "curriculumId": ids["curriculum"], "name": "G1", "duration": "2 Weeks",
    })
    ids["grade"] = response.json()["id"]
    response = await client.post("/api/books", json={"gradeId": ids["grade"], "name": "B1"})
    ids["book"] = response.json()["id"]
    response = await client.post("/api/units", json={"bookId": ids["book"], "name": "U1", "totalTime": "3 Hours"})
    ids["unit"] = response.json()["id"]
    return ids


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the health check endpoint."""
    response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_create_and_list(client: AsyncClient):
    ids = await _create_chain(client)

    response = await client.get("/api/curriculums")
    assert response.status_code == 200
    curriculums = response.json()["curriculums"]
    assert len(curriculums) == 1
    math = curriculums[0]
    assert math["id"] == ids["curriculum"]
    assert math["standards"] == []
    assert math["activityTypes"] == []
    unit = math["grades"][0]["books"][0]["units"][0]
    assert unit["name"] == "U1"
    assert unit["totalTime"] == "3 Hours"
    assert unit["learningObjectives"] == []


@pytest.mark.asyncio
async def test_create_returns_node_with_parent(client: AsyncClient):
    response = await client.post("/api/curriculums", json={"name": "Math"})
    assert response.status_code == 201
    curriculum_id = response.json()["id"]

    response = await client.post("/api/grades", json={"curriculumId": curriculum_id, "name": "G1"})
    assert response.status_code == 201
    data = response.json()
    assert data["curriculumId"] == curriculum_id
    assert data["name"] == "G1"
    assert data["duration"] == ""


@pytest.mark.asyncio
async def test_children_keep_insertion_order(client: AsyncClient):
    ids = await _create_chain(client)
    for name in ["U2", "U3"]:
        await client.post("/api/units", json={"bookId": ids["book"], "name": name})

    response = await client.get("/api/curriculums")
    units = response.json()["curriculums"][0]["grades"][0]["books"][0]["units"]
    assert [u["name"] for u in units] == ["U1", "U2", "U3"]


@pytest.mark.asyncio
async def test_create_with_unknown_parent(client: AsyncClient):
    response = await client.post("/api/grades", json={"curriculumId": "nope", "name": "G1"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Curriculum not found"


@pytest.mark.asyncio
async def test_create_requires_name(client: AsyncClient):
    response = await client.post("/api/curriculums", json={"name": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_partial_update(client: AsyncClient):
    ids = await _create_chain(client)

    response = await client.put(f"/api/grades/{ids['grade']}", json={"learningObjectives": ["Count"]})
    assert response.status_code == 200
    assert response.json()["learningObjectives"] == ["Count"]

    response = await client.get("/api/curriculums")
    grade = response.json()["curriculums"][0]["grades"][0]
    assert grade["name"] == "G1"
    assert grade["duration"] == "2 Weeks"
    assert grade["learningObjectives"] == ["Count"]


@pytest.mark.asyncio
async def test_update_and_delete_unknown_ids_are_noops(client: AsyncClient):
    await _create_chain(client)
    before = (await client.get("/api/curriculums")).json()

    response = await client.put("/api/lessons/nope", json={"name": "X"})
    assert response.status_code == 200
    response = await client.delete("/api/stages/nope")
    assert response.status_code == 200

    assert (await client.get("/api/curriculums")).json() == before


@pytest.mark.asyncio
async def test_delete_removes_subtree(client: AsyncClient):
    ids = await _create_chain(client)
    await client.post("/api/grades", json={"curriculumId": ids["curriculum"], "name": "G2"})

    response = await client.delete(f"/api/grades/{ids['grade']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Grade deleted successfully"

    grades = (await client.get("/api/curriculums")).json()["curriculums"][0]["grades"]
    assert [g["name"] for g in grades] == ["G2"]
    response = await client.post("/api/units", json={"bookId": ids["book"], "name": "Orphan"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_catalog_endpoints(client: AsyncClient):
    ids = await _create_chain(client)

    response = await client.post("/api/standards", json={"curriculumId": ids["curriculum"], "name": "ISTE"})
    standard_id = response.json()["id"]
    response = await client.post("/api/standard-codes", json={
        "standardId": standard_id, "code": "1.1", "title": "Learner", "level": "K-2",
    })
    assert response.status_code == 201
    response = await client.post("/api/activity-types", json={"curriculumId": ids["curriculum"], "name": "Game"})
    assert response.status_code == 201
    assert response.json()["icon"] == "Target"

    curriculum = (await client.get("/api/curriculums")).json()["curriculums"][0]
    assert curriculum["standards"][0]["codes"][0]["code"] == "1.1"
    assert curriculum["activityTypes"][0]["name"] == "Game"


@pytest.mark.asyncio
async def test_upload(client: AsyncClient):
    payload = {
        "curriculums": [
            {
                "name": "Science",
                "description": "",
                "grades": [{
                    "name": "G1",
                    "books": [{
                        "name": "B1",
                        "units": [
                            {"name": "Plants", "duration": "2 Hours", "lessons": [
                                {"name": "Seeds", "stages": [
                                    {"name": "Play", "activities": [{"name": "Plant", "type": "Lab"}]},
                                ]},
                            ]},
                            {"name": "Animals"},
                        ],
                    }],
                }],
            }
        ]
    }

    response = await client.post("/api/curriculum/upload", json=payload)
    assert response.status_code == 201
    results = response.json()["results"]
    assert results["curriculumsCreated"] == 1
    assert results["unitsCreated"] == 2
    assert results["activitiesCreated"] == 1
    assert results["errors"] == []

    science = (await client.get("/api/curriculums")).json()["curriculums"][0]
    units = science["grades"][0]["books"][0]["units"]
    assert units[0]["totalTime"] == "2 Hours"
    assert units[0]["lessons"][0]["stages"][0]["activities"][0]["type"] == "Lab"


@pytest.mark.asyncio
async def test_standards_report(client: AsyncClient):
    ids = await _create_chain(client)
    standard_id = (await client.post(
        "/api/standards", json={"curriculumId": ids["curriculum"], "name": "ISTE"}
    )).json()["id"]
    code_id = (await client.post(
        "/api/standard-codes", json={"standardId": standard_id, "code": "1.1"}
    )).json()["id"]
    await client.put(f"/api/units/{ids['unit']}", json={"standardCodes": [code_id]})

    response = await client.get("/api/reports/standards", params={"curriculum_id": ids["curriculum"]})
    assert response.status_code == 200
    report = response.json()
    assert report[0]["codeId"] == code_id
    assert report[0]["mappings"][0]["elementType"] == "unit"
    assert report[0]["mappings"][0]["unitName"] == "U1"

    response = await client.get("/api/reports/standards.csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert '"ISTE","1.1"' in response.text


@pytest.mark.asyncio
async def test_curriculum_csv_export(client: AsyncClient):
    await _create_chain(client)

    response = await client.get("/api/reports/curriculums.csv")
    assert response.status_code == 200
    lines = response.text.splitlines()
    assert lines[0].startswith("Curriculum Name,Curriculum Description,Grade Name")
    assert lines[1].startswith("Math,Numbers,G1,2 Weeks,,B1,,,U1,3 Hours")


@pytest.mark.asyncio
async def test_seed_curriculum_runs_once(db_session: AsyncSession):
    assert await seed_curriculum(db_session) is True
    assert await seed_curriculum(db_session) is False

    data = await CurriculumService(db_session).load_tree()
    assert [c.name for c in data.curriculums] == ["KG Curriculum"]
    assert data.curriculums[0].standards[0].codes
