"""
HTTP API tests against the in-memory store.
"""

import uuid

import pytest

pytestmark = pytest.mark.unit


def _create_stage(client, name, sort_order=0, **fields):
    response = client.post(
        "/stages",
        json={"name": name, "display_name": name.title(), "sort_order": sort_order, **fields},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_stage_crud(client):
    stage = _create_stage(client, "document_screening", stage_group="selection")

    fetched = client.get(f"/stages/{stage['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "document_screening"

    patched = client.patch(f"/stages/{stage['id']}", json={"display_name": "Screening"})
    assert patched.json()["config_version"] == 2

    deleted = client.delete(f"/stages/{stage['id']}")
    assert deleted.json()["is_active"] is False
    assert client.get("/stages", params={"active_only": True}).json() == []
    assert len(client.get("/stages").json()) == 1


def test_validation_error_payload(client):
    response = client.post("/stages", json={"name": "", "display_name": "", "estimated_duration_minutes": 5000})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "validation_error"
    assert error["details"]["messages"] == [
        "name is required",
        "display_name is required",
        "estimated_duration_minutes must be between 1 and 1440",
    ]


def test_not_found_payload(client):
    response = client.get(f"/stages/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_summary_integrity_and_reorder(client):
    a = _create_stage(client, "a_stage", sort_order=1)
    b = _create_stage(client, "b_stage", sort_order=2)

    reorder = client.post(
        "/stages/reorder",
        json={"items": [{"id": a["id"], "sort_order": 2}, {"id": b["id"], "sort_order": 1}]},
    )
    assert reorder.status_code == 204
    assert [s["name"] for s in client.get("/stages").json()] == ["b_stage", "a_stage"]

    assert client.get("/stages/summary").json()["active_stages"] == 2
    assert client.get("/stages/integrity").json()["is_valid"] is True


def test_stage_lookups(client):
    entry = _create_stage(client, "entry_form", sort_order=1, stage_group="entry")
    interview = _create_stage(client, "hr_interview", sort_order=2, stage_group="selection", requires_session=True)

    assert client.get("/stages/groups").json() == ["entry", "selection"]
    assert [s["id"] for s in client.get("/stages/groups/selection").json()] == [interview["id"]]
    assert client.get("/stages/groups/unknown").status_code == 422
    assert [s["id"] for s in client.get("/stages/requiring-session").json()] == [interview["id"]]

    assert client.get("/stages/by-name/entry_form").json()["id"] == entry["id"]
    missing = client.get("/stages/by-name/final_selection")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"


def test_tasks_by_stage_name(client):
    stage = _create_stage(client, "document_screening")
    task = client.post(
        f"/stages/{stage['id']}/tasks",
        json={"name": "collect_documents", "display_name": "Collect"},
    ).json()

    listed = client.get("/tasks/by-stage-name/document_screening")
    assert listed.status_code == 200
    assert [t["id"] for t in listed.json()] == [task["id"]]
    assert client.get("/tasks/by-stage-name/final_selection").status_code == 404


def test_statuses_default_and_template(client):
    stage = _create_stage(client, "会社説明会")

    defaults = client.get(f"/stages/{stage['id']}/statuses").json()
    assert [s["status_value"] for s in defaults[:2]] == ["scheduled", "attended"]
    assert all(s["is_default"] for s in defaults)

    created = client.post(f"/stages/{stage['id']}/statuses/templates/basic")
    assert created.status_code == 201
    stored = client.get(f"/stages/{stage['id']}/statuses").json()
    assert [s["status_value"] for s in stored] == ["passed", "failed", "declined"]

    unknown = client.post(f"/stages/{stage['id']}/statuses/templates/missing")
    assert unknown.status_code == 422


def test_applicant_task_flow(client):
    applicant_id = str(uuid.uuid4())
    stage = _create_stage(client, "document_screening")
    task = client.post(
        f"/stages/{stage['id']}/tasks",
        json={"name": "collect_documents", "display_name": "Collect", "task_type": "document_submission"},
    ).json()

    listed = client.get(f"/applicants/{applicant_id}/stages/{stage['id']}/tasks").json()
    assert listed[0]["is_virtual"] is True
    assert listed[0]["status"] == "awaiting_submission"

    updated = client.patch(f"/applicants/{applicant_id}/tasks/{task['id']}", json={"status": "submitted"})
    assert updated.status_code == 200

    listed = client.get(f"/applicants/{applicant_id}/stages/{stage['id']}/tasks").json()
    assert listed[0]["is_virtual"] is False
    assert listed[0]["status"] == "submitted"


def test_progress_and_transition_flow(client):
    applicant_id = str(uuid.uuid4())
    first = _create_stage(client, "document_screening", sort_order=1)
    second = _create_stage(client, "hr_interview", sort_order=2)
    rule = client.post(
        "/transition-rules",
        json={
            "from_stage_id": first["id"],
            "to_stage_id": second["id"],
            "condition_type": "conditional",
            "condition_config": {"min_score": 70},
        },
    )
    assert rule.status_code == 201

    missing = client.post(f"/applicants/{applicant_id}/stages/{first['id']}/complete")
    assert missing.status_code == 404

    assert client.post(f"/applicants/{applicant_id}/stages/{first['id']}/start").status_code == 200
    completed = client.post(f"/applicants/{applicant_id}/stages/{first['id']}/complete", json={"score": 65})
    assert completed.json()["status"] == "completed"

    check = client.get(
        f"/applicants/{applicant_id}/transitions/check",
        params={"from_stage_id": first["id"], "to_stage_id": second["id"]},
    ).json()
    assert check == {"can_transition": False, "reason": "minimum score 70 required (current: 65)"}

    again = client.post(f"/applicants/{applicant_id}/stages/{first['id']}/skip")
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "invalid_state_transition"

    history = client.get(f"/applicants/{applicant_id}/progress").json()
    assert [p["status"] for p in history] == ["completed"]


def test_advance_endpoint(client):
    applicant_id = str(uuid.uuid4())
    first = _create_stage(client, "document_screening", sort_order=1)
    second = _create_stage(client, "hr_interview", sort_order=2)
    client.post(f"/applicants/{applicant_id}/stages/{first['id']}/start")

    advanced = client.post(f"/applicants/{applicant_id}/stages/{first['id']}/advance").json()
    assert advanced["stage_id"] == second["id"]

    finished = client.post(f"/applicants/{applicant_id}/stages/{second['id']}/advance")
    assert finished.status_code == 200
    assert finished.json() is None


def test_duplicate_rule_conflict(client):
    first = _create_stage(client, "document_screening", sort_order=1)
    second = _create_stage(client, "hr_interview", sort_order=2)
    payload = {"from_stage_id": first["id"], "to_stage_id": second["id"], "condition_type": "automatic"}

    assert client.post("/transition-rules", json=payload).status_code == 201
    conflict = client.post("/transition-rules", json=payload)

    assert conflict.status_code == 409
    assert conflict.json()["error"]["code"] == "conflict"
