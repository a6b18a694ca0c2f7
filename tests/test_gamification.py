import pytest


@pytest.mark.asyncio
async def test_profile_for_new_user(client):
    response = await client.get("/gamification/profile")
    assert response.status_code == 200
    data = response.json()
    assert data["level"] == 1
    assert data["total_xp"] == 0
    assert data["streak_days"] == 0
    assert data["level_progress"] == {"current": 0, "required": 1000, "percentage": 0}
    assert data["badges"] == []
    assert data["stats"]["completion_rate"] == 0
    assert data["rare_badge_count"] == 0


@pytest.mark.asyncio
async def test_badge_catalog(client):
    response = await client.get("/gamification/badges")
    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == {"total": 20, "earned": 0, "progress": 0}
    assert len(data["badges"]) == 20
    assert len(data["by_category"]["streak"]) == 3

    by_id = {b["id"]: b for b in data["badges"]}
    assert by_id["tasks-10"]["progress"] == {"current": 0, "required": 10, "percentage": 0}
    assert by_id["night-owl"]["progress"] is None


@pytest.mark.asyncio
async def test_check_achievements(client, db_session, test_user):
    test_user.completed_tasks = 10
    test_user.total_tasks = 12
    await db_session.commit()

    response = await client.post("/gamification/check-achievements")
    assert response.status_code == 200
    data = response.json()
    assert {b["id"] for b in data["new_badges"]} == {"first-task", "tasks-10"}
    assert data["total_badges"] == 2

    again = (await client.post("/gamification/check-achievements")).json()
    assert again["new_badges"] == []
    assert again["total_badges"] == 2

    badges = (await client.get("/gamification/badges")).json()
    assert badges["summary"]["earned"] == 2


@pytest.mark.asyncio
async def test_leaderboard(client, second_user, test_user):
    response = await client.get("/gamification/leaderboard")
    assert response.status_code == 200
    data = response.json()
    assert data["metric"] == "xp"
    assert data["total_participants"] == 2
    assert data["leaderboard"][0]["user_id"] == str(second_user.id)
    assert data["leaderboard"][0]["value"] == 5000
    assert data["leaderboard"][1]["is_current_user"] is True
    assert data["current_user"] == {"rank": 2, "value": 0}


@pytest.mark.asyncio
async def test_leaderboard_metrics(client, second_user):
    data = (await client.get("/gamification/leaderboard?metric=tasks")).json()
    assert data["leaderboard"][0]["value"] == 40

    data = (await client.get("/gamification/leaderboard?metric=focus-time&limit=5")).json()
    assert data["metric"] == "focus-time"
    assert data["leaderboard"][0]["value"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["metric=karma", "limit=3", "limit=101"])
async def test_leaderboard_validation(client, query):
    response = await client.get(f"/gamification/leaderboard?{query}")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_gamification_stats(client):
    sid = (await client.post("/sessions", json={"planned_duration": 25})).json()["id"]
    await client.post(f"/sessions/{sid}/start")
    completed = (await client.post(f"/sessions/{sid}/complete")).json()

    response = await client.get("/gamification/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["overview"]["total_xp"] == completed["xp_gained"]
    assert data["overview"]["xp_to_next_level"] == 1000 - completed["xp_gained"]
    assert data["overview"]["current_streak"] == 1
    assert data["avg_session_xp"] == completed["xp_gained"]
    assert len(data["weekly_xp"]) == 7
    assert data["weekly_xp"][-1]["xp"] == completed["xp_gained"]
    assert data["total_badges"] == len(completed["new_badges"])
