# /tests/test_api.py

"""
End-to-end checks of the HTTP surface: authentication, status codes for
domain errors, and the multi-status batch response.
"""

from conftest import TEST_PASSWORD


def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "Annotation backend is running!"


def test_register_login_and_me(client):
    registered = client.post("/api/register", json={
        "email": "grace@example.com",
        "username": "grace",
        "password": TEST_PASSWORD,
        "languages": ["french"],
    })
    assert registered.status_code == 201

    login = client.post("/api/login", json={"identifier": "GRACE", "password": TEST_PASSWORD})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["languages"] == ["French"]


def test_bad_login_is_401_with_challenge(client, make_user):
    user = make_user()
    response = client.post("/api/login", json={"identifier": user.username, "password": "not-the-password"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_missing_or_invalid_token_is_401(client):
    assert client.get("/api/me").status_code == 401
    assert client.get("/api/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_inactive_user_token_is_403(client, make_user, auth_headers):
    user = make_user(is_active=False)
    assert client.get("/api/me", headers=auth_headers(user)).status_code == 403


def test_admin_routes_reject_non_admins(client, annotator, admin, auth_headers):
    assert client.get("/api/admin/users", headers=auth_headers(annotator)).status_code == 403
    response = client.get("/api/admin/users", headers=auth_headers(admin))
    assert response.status_code == 200
    assert {u["id"] for u in response.json()} == {annotator.id, admin.id}


def test_annotation_flow_over_http(client, annotator, make_sentence, auth_headers):
    sentence = make_sentence()
    headers = auth_headers(annotator)

    offered = client.get("/api/sentences/next", headers=headers)
    assert offered.json()["id"] == sentence.id

    payload = {"sentence_id": sentence.id, "final_translation": "Bonjour le monde.", "overall_quality": 5}
    created = client.post("/api/annotations", json=payload, headers=headers)
    assert created.status_code == 201
    assert created.json()["status"] == "submitted"

    duplicate = client.post("/api/annotations", json=payload, headers=headers)
    assert duplicate.status_code == 409

    exhausted = client.get("/api/sentences/next", headers=headers)
    assert exhausted.status_code == 200
    assert exhausted.json() is None

    deleted = client.delete(f"/api/annotations/{created.json()['id']}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/annotations/{created.json()['id']}", headers=headers).status_code == 404


def test_blank_translation_is_422(client, annotator, make_sentence, auth_headers):
    sentence = make_sentence()
    response = client.post(
        "/api/annotations", json={"sentence_id": sentence.id, "final_translation": "   "}, headers=auth_headers(annotator)
    )
    assert response.status_code == 422


def test_ineligible_annotation_is_403(client, make_user, make_sentence, auth_headers):
    sentence = make_sentence(target_language="German")
    user = make_user(skip_onboarding=True, languages=["French"])
    response = client.post(
        "/api/annotations", json={"sentence_id": sentence.id, "final_translation": "Hallo."}, headers=auth_headers(user)
    )
    assert response.status_code == 403


def test_self_evaluation_is_403(client, make_user, make_sentence, auth_headers):
    user = make_user(is_evaluator=True, skip_onboarding=True)
    headers = auth_headers(user)
    created = client.post("/api/annotations", json={"sentence_id": make_sentence().id, "final_translation": "Oui."}, headers=headers)

    response = client.post("/api/evaluations", json={"annotation_id": created.json()["id"], "score": 4}, headers=headers)
    assert response.status_code == 403


def test_batch_assess_returns_207_on_partial_failure(client, admin, make_sentence, auth_headers, fake_scorer):
    s1, s2 = make_sentence(), make_sentence()
    fake_scorer.fail_for.add(s2.id)

    response = client.post("/api/mt-quality/batch-assess", json={"sentence_ids": [s1.id, s2.id]}, headers=auth_headers(admin))

    assert response.status_code == 207
    body = response.json()
    assert [a["sentence_id"] for a in body["succeeded"]] == [s1.id]
    assert [f["sentence_id"] for f in body["failed"]] == [s2.id]


def test_batch_assess_all_good_is_200(client, admin, make_sentence, auth_headers):
    sentence = make_sentence()
    response = client.post("/api/mt-quality/batch-assess", json={"sentence_ids": [sentence.id]}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["failed"] == []


def test_single_assess_scoring_failure_is_502(client, admin, make_sentence, auth_headers, fake_scorer):
    sentence = make_sentence()
    fake_scorer.fail_for.add(sentence.id)
    response = client.post("/api/mt-quality/assess", json={"sentence_id": sentence.id}, headers=auth_headers(admin))
    assert response.status_code == 502

    lookup = client.get(f"/api/mt-quality/sentence/{sentence.id}", headers=auth_headers(admin))
    assert lookup.json()["found"] is True
    assert lookup.json()["assessment"]["status"] == "pending"


def test_onboarding_test_resubmission_is_409(client, make_user, make_question, auth_headers):
    questions = [make_question(language="Spanish", correct_answer=1) for _ in range(3)]
    headers = auth_headers(make_user())

    created = client.post("/api/onboarding-tests", json={"language": "spanish"}, headers=headers)
    assert created.status_code == 201
    test_id = created.json()["id"]
    answers = [{"question_id": q.id, "selected_answer": 1} for q in questions]

    first = client.post(f"/api/onboarding-tests/{test_id}/submit", json={"answers": answers}, headers=headers)
    assert first.status_code == 200
    assert first.json()["passed"] is True

    second = client.post(f"/api/onboarding-tests/{test_id}/submit", json={"answers": answers}, headers=headers)
    assert second.status_code == 409

    mismatched = client.post(f"/api/onboarding-tests/{test_id}/submit", json={"test_id": test_id + 1, "answers": []}, headers=headers)
    assert mismatched.status_code == 400


def test_proficiency_questions_by_language(client, make_user, make_question, auth_headers):
    make_question(language="French")
    make_question(language="German")
    response = client.get("/api/language-proficiency-questions", params={"languages": "french"}, headers=auth_headers(make_user()))
    assert response.status_code == 200
    assert [q["language"] for q in response.json()] == ["French"]
    assert "correct_answer" not in response.json()[0]


def test_upload_voice(client, annotator, make_sentence, auth_headers):
    headers = auth_headers(annotator)
    created = client.post("/api/annotations", json={"sentence_id": make_sentence().id, "final_translation": "Salut."}, headers=headers)
    annotation_id = created.json()["id"]

    response = client.post(
        "/api/annotations/upload-voice",
        files={"audio_file": ("take.webm", b"fake-audio", "audio/webm")},
        data={"annotation_id": str(annotation_id), "duration": "2.5"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["voice_recording_url"].startswith(f"voice/{annotator.id}/")

    too_big = client.post(
        "/api/annotations/upload-voice",
        files={"audio_file": ("big.webm", b"x" * 2048, "audio/webm")},
        headers=headers,
    )
    assert too_big.status_code == 400


def test_admin_csv_import_and_stats(client, admin, auth_headers):
    headers = auth_headers(admin)
    csv_bytes = b"source_text,source_language,target_language\nHello.,English,French\nBye.,English,French\n"

    imported = client.post("/api/admin/sentences/import-csv", files={"file": ("s.csv", csv_bytes, "text/csv")}, headers=headers)
    assert imported.status_code == 200
    assert imported.json()["imported_count"] == 2

    wrong_type = client.post("/api/admin/sentences/import-csv", files={"file": ("s.txt", csv_bytes, "text/plain")}, headers=headers)
    assert wrong_type.status_code == 400

    counts = client.get("/api/admin/sentences/counts", headers=headers)
    assert counts.json() == {"English-French": 2}

    stats = client.get("/api/admin/stats", headers=headers)
    assert stats.json()["active_sentences"] == 2
    assert stats.json()["completion_rate"] == 0.0


def test_delete_user_with_history_is_409(client, admin, annotator, make_sentence, auth_headers):
    client.post("/api/annotations", json={"sentence_id": make_sentence().id, "final_translation": "Oui."}, headers=auth_headers(annotator))
    response = client.delete(f"/api/admin/users/{annotator.id}", headers=auth_headers(admin))
    assert response.status_code == 409
