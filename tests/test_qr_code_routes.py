def _create(client, headers, section_id, **fields):
    body = {"section_id": section_id, "title": "Join Section B"}
    body.update(fields)
    return client.post("/api/qr-codes", json=body, headers=headers)


def test_teacher_lists_assigned_sections(client, teacher, section, auth_headers):
    resp = client.get("/api/qr-codes/sections", headers=auth_headers(teacher))
    assert resp.status_code == 200
    assert resp.json() == [
        {"id": section.id, "name": "Section B", "level_name": "Grade 3", "school_year": "2025"}
    ]


def test_teacher_creates_code(client, teacher, section, auth_headers):
    resp = _create(client, auth_headers(teacher), section.id, max_uses=25)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "Active"
    assert body["current_uses"] == 0
    assert body["max_uses"] == 25
    assert body["enrollment_url"].endswith("/enroll/" + body["qr_code"])
    assert body["qr_image_url"].startswith("https://")


def test_create_code_for_untaught_section_is_forbidden(client, make_user, school, section, auth_headers):
    other = make_user("teacher", email="nosection@example.com", school_id=school.id)
    assert _create(client, auth_headers(other), section.id).status_code == 403


def test_students_cannot_create_codes(client, student, section, auth_headers):
    assert _create(client, auth_headers(student), section.id).status_code == 403


def test_create_code_rejects_zero_max_uses(client, teacher, section, auth_headers):
    assert _create(client, auth_headers(teacher), section.id, max_uses=0).status_code == 422


def test_list_toggle_and_logs(client, teacher, student, qr_code, auth_headers):
    headers = auth_headers(teacher)

    listed = client.get("/api/qr-codes", headers=headers).json()["qr_codes"]
    assert [c["id"] for c in listed] == [qr_code.id]

    resp = client.patch(f"/api/qr-codes/{qr_code.id}/toggle", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "Inactive"

    redeem = client.post(
        "/api/enrollments/redeem", json={"code": qr_code.qr_code}, headers=auth_headers(student)
    )
    assert redeem.json()["error"] == "inactive"

    logs = client.get(f"/api/qr-codes/{qr_code.id}/logs", headers=headers).json()["logs"]
    assert len(logs) == 1
    assert logs[0]["success"] is False
    assert logs[0]["first_name"] == "Sam"
    assert logs[0]["error_message"] == "This QR code is no longer active"


def test_other_teacher_cannot_manage_code(client, make_user, qr_code, auth_headers):
    other = make_user("teacher", email="else@example.com")
    headers = auth_headers(other)
    assert client.get(f"/api/qr-codes/{qr_code.id}", headers=headers).status_code == 403
    assert client.patch(f"/api/qr-codes/{qr_code.id}/toggle", headers=headers).status_code == 403


def test_delete_requires_confirmation(client, teacher, qr_code, auth_headers):
    headers = auth_headers(teacher)
    assert client.delete(f"/api/qr-codes/{qr_code.id}", headers=headers).status_code == 400

    resp = client.delete(f"/api/qr-codes/{qr_code.id}?confirm=true", headers=headers)
    assert resp.status_code == 200
    assert client.get(f"/api/qr-codes/{qr_code.id}", headers=headers).status_code == 404


def test_unknown_code_is_404(client, teacher, auth_headers):
    resp = client.get("/api/qr-codes/does-not-exist", headers=auth_headers(teacher))
    assert resp.status_code == 404
