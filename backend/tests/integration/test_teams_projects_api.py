"""
Integration tests for teams and projects
"""
import pytest
from httpx import AsyncClient

from app.models.user import UserRole


async def create_team(client: AsyncClient, headers: dict, name: str = "Code Crafters") -> dict:
    response = await client.post(
        "/api/v1/teams",
        json={"name": name, "description": "Final year project team"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_team(client: AsyncClient, student_headers, student_user):
    data = await create_team(client, student_headers)

    assert data["leader_id"] == student_user.id
    assert data["max_members"] == 5
    assert data["is_open"] is True
    assert len(data["team_code"]) == 8
    assert [m["id"] for m in data["members"]] == [student_user.id]
    assert data["project_id"] is None


@pytest.mark.asyncio
async def test_student_cannot_create_second_team(client: AsyncClient, student_headers):
    await create_team(client, student_headers)

    response = await client.post(
        "/api/v1/teams",
        json={"name": "Another Team", "description": "Second attempt"},
        headers=student_headers,
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_faculty_cannot_create_team(client: AsyncClient, faculty_headers):
    response = await client.post(
        "/api/v1/teams",
        json={"name": "Staff Team", "description": "Not allowed"},
        headers=faculty_headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_join_team_by_code(client: AsyncClient, student_headers, make_user, headers_for):
    team = await create_team(client, student_headers)
    classmate = await make_user(UserRole.STUDENT)

    response = await client.post(
        "/api/v1/teams/join",
        json={"team_code": team["team_code"]},
        headers=headers_for(classmate),
    )

    assert response.status_code == 200, response.text
    assert classmate.id in [m["id"] for m in response.json()["members"]]


@pytest.mark.asyncio
async def test_join_unknown_code(client: AsyncClient, student_headers):
    response = await client.post("/api/v1/teams/join", json={"team_code": "ZZZZZZZZ"}, headers=student_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TEAM_NOT_FOUND"


@pytest.mark.asyncio
async def test_join_full_team(client: AsyncClient, make_user, headers_for):
    leader = await make_user(UserRole.STUDENT)
    response = await client.post(
        "/api/v1/teams",
        json={"name": "Solo", "description": "One member only", "max_members": 1},
        headers=headers_for(leader),
    )
    team = response.json()
    latecomer = await make_user(UserRole.STUDENT)

    response = await client.post(
        "/api/v1/teams/join",
        json={"team_code": team["team_code"]},
        headers=headers_for(latecomer),
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_team_reads(client: AsyncClient, student_headers, faculty_headers, make_user, headers_for):
    team = await create_team(client, student_headers)
    outsider = await make_user(UserRole.STUDENT)

    assert (await client.get(f"/api/v1/teams/{team['id']}", headers=student_headers)).status_code == 200
    assert (await client.get(f"/api/v1/teams/{team['id']}", headers=faculty_headers)).status_code == 200
    assert (await client.get(f"/api/v1/teams/{team['id']}", headers=headers_for(outsider))).status_code == 403

    listing = await client.get("/api/v1/teams", headers=faculty_headers)
    assert [t["id"] for t in listing.json()] == [team["id"]]
    assert (await client.get("/api/v1/teams", headers=student_headers)).status_code == 403


@pytest.mark.asyncio
async def test_leader_registers_project(client: AsyncClient, student_headers, faculty_headers):
    team = await create_team(client, student_headers)

    response = await client.post(
        "/api/v1/projects",
        json={"title": "Smart Attendance System", "description": "Face recognition attendance"},
        headers=student_headers,
    )

    assert response.status_code == 201, response.text
    project = response.json()
    assert project["team_id"] == team["id"]
    assert project["team_name"] == "Code Crafters"
    assert project["status"] == "proposed"

    response = await client.get(f"/api/v1/projects/{project['id']}", headers=student_headers)
    assert response.status_code == 200

    listing = await client.get("/api/v1/projects", headers=faculty_headers)
    assert listing.json()["total"] == 1

    team_view = await client.get(f"/api/v1/teams/{team['id']}", headers=student_headers)
    assert team_view.json()["project_id"] == project["id"]


@pytest.mark.asyncio
async def test_one_project_per_team(client: AsyncClient, student_headers):
    await create_team(client, student_headers)
    await client.post("/api/v1/projects", json={"title": "First Project"}, headers=student_headers)

    response = await client.post("/api/v1/projects", json={"title": "Second Project"}, headers=student_headers)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_only_leader_registers_project(client: AsyncClient, student_headers, make_user, headers_for):
    team = await create_team(client, student_headers)
    member = await make_user(UserRole.STUDENT)
    await client.post("/api/v1/teams/join", json={"team_code": team["team_code"]}, headers=headers_for(member))

    response = await client.post("/api/v1/projects", json={"title": "Member Project"}, headers=headers_for(member))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_student_cannot_read_other_project(client: AsyncClient, student_headers, make_project):
    other = await make_project("Other Project")

    response = await client.get(f"/api/v1/projects/{other.id}", headers=student_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    assert (await client.get("/health")).status_code == 200
    assert (await client.get("/api/v1/health")).status_code == 200

    response = await client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"
    assert "X-Request-ID" in response.headers
