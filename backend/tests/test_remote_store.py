"""
Curriculum Manager - Remote Store Tests
The store talks to the real app through an in-process ASGI transport.
"""
import httpx
import pytest

from curriculum_manager.schemas.curriculum import ParsedCurriculum
from curriculum_manager.services.api_client import ApiError, CurriculumApiClient
from curriculum_manager.services.remote_store import RemoteCurriculumStore


def _unreachable_client() -> CurriculumApiClient:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return CurriculumApiClient(base_url="http://test/api", transport=httpx.MockTransport(refuse))


@pytest.mark.asyncio
async def test_mutations_reload_the_tree(remote_store: RemoteCurriculumStore):
    curriculum_id = await remote_store.add_curriculum("Math")
    grade_id = await remote_store.add_grade(curriculum_id, "G1")
    book_id = await remote_store.add_book(curriculum_id, grade_id, "B1")

    assert remote_store.error is None
    grade = remote_store.data.curriculums[0].grades[0]
    assert grade.books[0].id == book_id

    assert await remote_store.update_grade(curriculum_id, grade_id, {"duration": "1.5 Hours"}) is True
    assert remote_store.data.curriculums[0].grades[0].duration == "1.5 Hours"
    assert remote_store.data.curriculums[0].grades[0].name == "G1"

    assert await remote_store.delete_grade(curriculum_id, grade_id) is True
    assert remote_store.data.curriculums[0].grades == []


@pytest.mark.asyncio
async def test_wrong_ancestor_ids_are_noops(remote_store: RemoteCurriculumStore):
    math_id = await remote_store.add_curriculum("Math")
    science_id = await remote_store.add_curriculum("Science")
    grade_id = await remote_store.add_grade(math_id, "G1")

    assert await remote_store.update_grade(science_id, grade_id, {"name": "Renamed"}) is False
    assert await remote_store.delete_grade("no-such-curriculum", grade_id) is False
    assert await remote_store.add_book(science_id, grade_id, "B1") is None
    assert await remote_store.add_grade("no-such-curriculum", "G2") is None

    await remote_store.load_curriculums()
    math = next(c for c in remote_store.data.curriculums if c.id == math_id)
    assert [(g.id, g.name, g.books) for g in math.grades] == [(grade_id, "G1", [])]
    assert remote_store.error is None


@pytest.mark.asyncio
async def test_server_errors_end_up_in_error(remote_store: RemoteCurriculumStore):
    curriculum_id = await remote_store.add_curriculum("Math")
    # Removed behind the store's back, so the loaded tree is stale
    await remote_store.client.delete("curriculum", curriculum_id)

    result = await remote_store.add_grade(curriculum_id, "G1")

    assert result is None
    assert remote_store.error == "Failed to add grade: Curriculum not found"


@pytest.mark.asyncio
async def test_load_clears_previous_error(remote_store: RemoteCurriculumStore):
    remote_store.error = "Failed to add grade: Curriculum not found"

    await remote_store.load_curriculums()

    assert remote_store.error is None
    assert remote_store.loading is False


@pytest.mark.asyncio
async def test_network_failure_is_captured():
    store = RemoteCurriculumStore(_unreachable_client())

    await store.load_curriculums()

    assert store.error.startswith("Failed to load curriculum data:")
    assert store.loading is False
    assert store.data.curriculums == []

    assert await store.add_curriculum("Math") is None
    assert store.error.startswith("Failed to add curriculum:")
    await store.client.aclose()


@pytest.mark.asyncio
async def test_client_raises_api_error():
    async with _unreachable_client() as client:
        with pytest.raises(ApiError) as exc_info:
            await client.check_health()
    assert exc_info.value.status == 0


@pytest.mark.asyncio
async def test_import_curriculums(remote_store: RemoteCurriculumStore):
    parsed = ParsedCurriculum.model_validate({
        "name": "Science",
        "grades": [{"name": "G1", "books": [{"name": "B1", "units": [{"name": "Plants", "duration": "1 Hours"}]}]}],
    })

    results = await remote_store.import_curriculums([parsed])

    assert results.curriculums_created == 1
    assert results.units_created == 1
    unit = remote_store.data.curriculums[0].grades[0].books[0].units[0]
    assert unit.total_time == "1 Hours"


def _malformed_client() -> CurriculumApiClient:
    """Server that answers every write with a 2xx body of the wrong shape."""

    def respond(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"curriculums": []})
        if request.url.path.endswith("/curriculum/upload"):
            return httpx.Response(201, json={})
        return httpx.Response(201, json=["unexpected"])

    return CurriculumApiClient(base_url="http://test/api", transport=httpx.MockTransport(respond))


@pytest.mark.asyncio
async def test_malformed_success_responses_are_captured():
    async with _malformed_client() as client:
        store = RemoteCurriculumStore(client)

        assert await store.add_curriculum("Math") is None
        assert store.error == "Failed to add curriculum: Invalid response"

        results = await store.import_curriculums([ParsedCurriculum(name="Science")])

        assert results is None
        assert store.error.startswith("Failed to upload curriculum:")
