"""Integration tests for the orchestration routes."""

import pytest
from services.orchestration_service.app.main import app
from tests.conftest import make_coach_user, make_participant_user, override_auth
from tests.factories import SprintFactory


async def _live(db, **overrides):
    sprint = SprintFactory.live(**overrides)
    db.add(sprint)
    await db.commit()
    return sprint


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_mapping_starts_at_version_zero(orchestration_client):
    response = await orchestration_client.get("/orchestration")

    assert response.status_code == 200
    assert response.json()["version"] == 0
    assert response.json()["assignments"] == {}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_assign_slot_and_read_back(orchestration_client, db_session):
    sprint = await _live(db_session, category="Focus")

    response = await orchestration_client.put(
        "/orchestration/slots/slot_exec_primary",
        json={
            "sprint_id": sprint.id,
            "focus_criteria": ["Skill Deepening"],
            "expected_version": 0,
        },
    )

    assert response.status_code == 200
    assert response.json()["version"] == 1
    assert response.json()["updated_by"] == "admin-1"

    slots = (await orchestration_client.get("/orchestration/slots")).json()
    exec_slot = next(s for s in slots if s["id"] == "slot_exec_primary")
    assert exec_slot["stage"] == "Execution"
    assert exec_slot["assignment"] == {
        "sprint_id": sprint.id,
        "focus_criteria": ["Skill Deepening"],
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stale_save_is_a_conflict(orchestration_client, db_session):
    sprint = await _live(db_session, category="Focus")
    await orchestration_client.put(
        "/orchestration/slots/slot_exec_primary", json={"sprint_id": sprint.id}
    )

    response = await orchestration_client.put(
        "/orchestration", json={"assignments": {}, "expected_version": 0}
    )

    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_slot_is_not_found(orchestration_client):
    response = await orchestration_client.get("/orchestration/slots/slot_nowhere/eligible")

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_eligible_sprints_for_slot(orchestration_client, db_session):
    clarity = await _live(db_session, category="Clarity", title="Clarity Sprint")
    await _live(db_session, category="Mindset", title="Mindset Sprint")

    response = await orchestration_client.get(
        "/orchestration/slots/slot_found_clarity/eligible"
    )

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [clarity.id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_coach_cannot_write_mapping(orchestration_client):
    with override_auth(app, make_coach_user()):
        response = await orchestration_client.put("/orchestration", json={"assignments": {}})

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_participant_resolves_next_sprint(orchestration_client, db_session):
    sprint = await _live(db_session, category="Clarity")
    await orchestration_client.put(
        "/orchestration/slots/slot_found_clarity", json={"sprint_id": sprint.id}
    )

    with override_auth(app, make_participant_user()):
        response = await orchestration_client.post(
            "/orchestration/resolve",
            json={"stage": "Foundation", "trigger": "after_homepage"},
        )

    assert response.status_code == 200
    assert response.json() == {
        "slot_id": "slot_found_clarity",
        "sprint_id": sprint.id,
        "stage": "Foundation",
    }
