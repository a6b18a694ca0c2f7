import uuid
from datetime import datetime, timedelta, timezone

import pytest


async def _create(client, **fields):
    response = await client.post("/tasks", json={"title": "Task", **fields})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_task(client):
    data = await _create(client, title="Write tests", priority="urgent", category="work")
    assert data["title"] == "Write tests"
    assert data["status"] == "pending"
    assert data["xp_value"] == 50
    assert data["category"] == "work"
    assert data["completed_at"] is None


@pytest.mark.asyncio
async def test_create_task_defaults(client):
    data = await _create(client)
    assert data["priority"] == "medium"
    assert data["difficulty"] == "medium"
    assert data["xp_value"] == 20


@pytest.mark.asyncio
async def test_create_task_validation(client):
    response = await client.post("/tasks", json={"title": ""})
    assert response.status_code == 422
    response = await client.post("/tasks", json={"title": "x", "priority": "critical"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_tasks_sorted_by_priority(client):
    await _create(client, title="low", priority="low")
    await _create(client, title="urgent", priority="urgent")
    await _create(client, title="medium")

    response = await client.get("/tasks")
    assert [t["title"] for t in response.json()] == ["urgent", "medium", "low"]


@pytest.mark.asyncio
async def test_list_tasks_filters(client):
    done = await _create(client, category="fitness")
    await _create(client, category="work")
    await client.patch(f"/tasks/{done['id']}", json={"status": "completed"})

    response = await client.get("/tasks?status=completed")
    assert [t["id"] for t in response.json()] == [done["id"]]

    response = await client.get("/tasks?category=work")
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_complete_task_awards_xp(client):
    task = await _create(client, priority="high", difficulty="hard")

    response = await client.patch(f"/tasks/{task['id']}", json={"status": "completed"})
    assert response.status_code == 200
    data = response.json()
    assert data["task"]["status"] == "completed"
    assert data["task"]["completed_at"] is not None
    # 30 * 1.5 + 10
    assert data["completion"]["xp_gained"] == 55
    assert "first-task" in data["completion"]["new_badges"]

    profile = (await client.get("/gamification/profile")).json()
    assert profile["total_xp"] == 55
    assert profile["stats"]["completed_tasks"] == 1
    assert profile["stats"]["total_tasks"] == 1
    assert profile["stats"]["completion_rate"] == 100


@pytest.mark.asyncio
async def test_complete_task_on_time_bonus(client):
    due = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
    task = await _create(client, priority="high", difficulty="hard", due_date=due)

    response = await client.patch(f"/tasks/{task['id']}", json={"status": "completed"})
    # 30 * 1.2 * 1.5 + 10
    assert response.json()["completion"]["xp_gained"] == 64


@pytest.mark.asyncio
async def test_completion_is_awarded_once(client):
    task = await _create(client)
    await client.patch(f"/tasks/{task['id']}", json={"status": "completed"})

    response = await client.patch(f"/tasks/{task['id']}", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["completion"] is None

    profile = (await client.get("/gamification/profile")).json()
    assert profile["stats"]["completed_tasks"] == 1


@pytest.mark.asyncio
async def test_reopen_clears_completed_at(client):
    task = await _create(client)
    await client.patch(f"/tasks/{task['id']}", json={"status": "completed"})

    response = await client.patch(f"/tasks/{task['id']}", json={"status": "pending"})
    assert response.json()["task"]["completed_at"] is None
    assert response.json()["completion"] is None


@pytest.mark.asyncio
async def test_perfect_day(client):
    now = datetime.now(timezone.utc).isoformat()
    first = await _create(client, due_date=now)
    second = await _create(client, due_date=now)

    response = await client.patch(f"/tasks/{first['id']}", json={"status": "completed"})
    assert "perfect-day" not in response.json()["completion"]["new_badges"]

    response = await client.patch(f"/tasks/{second['id']}", json={"status": "completed"})
    assert "perfect-day" in response.json()["completion"]["new_badges"]

    profile = (await client.get("/gamification/profile")).json()
    assert profile["stats"]["perfect_days"] == 1


@pytest.mark.asyncio
async def test_update_task_fields(client):
    task = await _create(client)
    response = await client.patch(f"/tasks/{task['id']}", json={
        "title": "Renamed",
        "priority": "low",
    })
    assert response.status_code == 200
    data = response.json()["task"]
    assert data["title"] == "Renamed"
    assert data["priority"] == "low"
    # base XP is fixed at creation
    assert data["xp_value"] == 20


@pytest.mark.asyncio
async def test_update_clears_due_date(client):
    task = await _create(client, due_date="2030-01-01T00:00:00Z", description="notes")
    assert task["due_date"] is not None

    response = await client.patch(f"/tasks/{task['id']}", json={"due_date": None})
    assert response.status_code == 200
    data = response.json()["task"]
    assert data["due_date"] is None
    assert data["description"] == "notes"
    assert data["title"] == "Task"


@pytest.mark.asyncio
async def test_update_ignores_null_for_required_fields(client):
    task = await _create(client)
    response = await client.patch(f"/tasks/{task['id']}", json={"title": None})
    assert response.status_code == 200
    assert response.json()["task"]["title"] == "Task"


@pytest.mark.asyncio
async def test_update_nonexistent_task(client):
    response = await client.patch(f"/tasks/{uuid.uuid4()}", json={"title": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_task(client):
    task = await _create(client)
    response = await client.delete(f"/tasks/{task['id']}")
    assert response.status_code == 204

    response = await client.delete(f"/tasks/{task['id']}")
    assert response.status_code == 404

    profile = (await client.get("/gamification/profile")).json()
    assert profile["stats"]["total_tasks"] == 0
