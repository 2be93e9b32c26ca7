import json
import os

from sqlalchemy.orm import Session

from apis.auth_api import verify_password
from conftest import QUIZ_JSON, register
from models import User
from pipeline.errors import GenerationFailed

PNG = ("diagram.png", b"\x89PNG\r\n\x1a\nfake image bytes", "image/png")


def data_of(resp):
    body = resp.json()
    assert body["status"] == "SUCCESS", body
    return json.loads(body["data"])


def upload(client, headers, user_id, path="/flashcards", file=PNG, **fields):
    form = {"user_id": str(user_id), "number_of_cards": "2", **fields}
    return client.post(path, files={"file": file}, data=form, headers=headers)


def stored_files(settings):
    found = []
    for root, _, files in os.walk(settings.upload_dir):
        found.extend(files)
    return found


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_login_with_wrong_password_is_401(client, user):
    resp = client.post("/auth/login", json={"user_email": "student@example.org", "user_password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["status"] == "FAIL"


def test_password_is_stored_as_bcrypt_hash(client, user, engine):
    user_id, _ = user
    with Session(engine) as db:
        stored = db.get(User, user_id).password_hash
    assert stored.startswith("$2b$")
    assert "correct-horse" not in stored
    assert verify_password("correct-horse", stored)
    assert not verify_password("wrong-horse", stored)


def test_login_again_revokes_previous_token(client, user):
    _, old_headers = user
    resp = client.post("/auth/login", json={"user_email": "student@example.org", "user_password": "correct-horse"})
    new_headers = {"Authorization": f"Bearer {json.loads(resp.json()['data'])['token']}"}

    assert client.get("/documents", headers=old_headers).status_code == 401
    assert client.get("/documents", headers=new_headers).status_code == 200


def test_generation_requires_token(client, user):
    user_id, _ = user
    resp = upload(client, {}, user_id)
    assert resp.status_code == 401
    assert resp.json() == {
        "status": "FAIL",
        "statusCode": 401,
        "message": "Unauthorized: missing or invalid authentication token",
        "data": "",
    }


def test_unknown_token_is_401(client, user):
    user_id, _ = user
    resp = upload(client, {"Authorization": "Bearer not-a-token"}, user_id)
    assert resp.status_code == 401


def test_user_id_mismatch_is_403(client, user, fake_llm):
    user_id, headers = user
    resp = upload(client, headers, user_id + 1)
    assert resp.status_code == 403
    assert fake_llm.calls == []


def test_missing_file_is_400(client, user):
    user_id, headers = user
    resp = client.post("/flashcards", data={"user_id": str(user_id)}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "File or user ID missing"


def test_unsupported_format_is_400(client, user, fake_llm):
    user_id, headers = user
    resp = upload(client, headers, user_id, file=("notes.txt", b"plain text", "text/plain"))
    assert resp.status_code == 400
    assert "Unsupported file type" in resp.json()["message"]
    assert fake_llm.calls == []


def test_oversized_file_is_400(client, user, settings):
    user_id, headers = user
    big = ("big.png", b"0" * (settings.max_upload_bytes + 1), "image/png")
    assert upload(client, headers, user_id, file=big).status_code == 400


def test_invalid_item_count_is_400(client, user):
    user_id, headers = user
    assert upload(client, headers, user_id, number_of_cards="many").status_code == 400
    assert upload(client, headers, user_id, number_of_cards="0").status_code == 400


def test_flashcards_are_generated_and_stored(client, user, fake_llm, fake_describer, settings):
    user_id, headers = user
    resp = upload(client, headers, user_id, focus_topics="chloroplasts")

    assert resp.status_code == 200
    result = data_of(resp)
    assert result["itemCount"] == 2
    assert result["parseStrategy"] == "direct"
    assert "chloroplasts" in fake_llm.calls[0]["user"]
    assert fake_describer.description in fake_llm.calls[0]["user"]

    listing = data_of(client.get(f"/flashcard-lists/{result['listId']}", headers=headers))
    assert listing["card_count"] == len(listing["cards"]) == 2
    assert listing["cards"][0]["question"] == "What does photosynthesis produce?"

    docs = data_of(client.get("/documents", headers=headers))
    assert [(d["document_id"], d["title"], d["file_type"]) for d in docs] == [(result["documentId"], "diagram.png", "png")]
    assert len(stored_files(settings)) == 1


def test_quiz_is_generated_with_decoded_options(client, user, fake_llm):
    user_id, headers = user
    fake_llm.response = "Here is your quiz:\n" + QUIZ_JSON
    result = data_of(upload(client, headers, user_id, path="/quizzes"))
    assert result["parseStrategy"] == "brackets"

    quiz = data_of(client.get(f"/quizzes/{result['quizId']}", headers=headers))
    assert quiz["title"] == "Quiz - diagram.png"
    question = quiz["questions"][0]
    assert question["options"] == ["Oxygen", "Nitrogen", "Glucose", "Helium"]
    assert question["correctOptions"] == [0, 2]


def test_unparseable_completion_is_stored_as_placeholder(client, user, fake_llm):
    user_id, headers = user
    fake_llm.response = "Sorry, I can't do that."
    result = data_of(upload(client, headers, user_id))
    assert result["parseStrategy"] == "sentinel"
    assert result["itemCount"] == 1

    listing = data_of(client.get(f"/flashcard-lists/{result['listId']}", headers=headers))
    assert listing["card_count"] == 1


def test_generation_failure_persists_nothing(client, user, fake_llm, settings):
    user_id, headers = user
    fake_llm.error = GenerationFailed("AI call failed: RateLimitError")
    resp = upload(client, headers, user_id)

    assert resp.status_code == 500
    assert resp.json()["message"] == "AI call failed: RateLimitError"
    assert data_of(client.get("/documents", headers=headers)) == []
    assert stored_files(settings) == []


def test_regenerate_quiz_from_stored_document(client, user, fake_llm, fake_describer):
    user_id, headers = user
    first = data_of(upload(client, headers, user_id))

    fake_llm.response = QUIZ_JSON
    body = {"document_id": first["documentId"], "user_id": user_id, "number_of_cards": 3}
    result = data_of(client.post("/quizzes/from-document", json=body, headers=headers))

    assert result["documentId"] == first["documentId"]
    assert result["itemCount"] == 1
    assert len(fake_describer.calls) == 2
    assert fake_describer.calls[1] == (PNG[1], "image/png")
    assert len(data_of(client.get("/documents", headers=headers))) == 1


def test_from_document_with_bad_body_is_400(client, user):
    _, headers = user
    resp = client.post("/flashcards/from-document", json={"user_id": 1}, headers=headers)
    assert resp.status_code == 400
    assert "document_id" in resp.json()["message"]


def test_from_document_checks_token_before_body(client, user, fake_llm):
    resp = client.post("/quizzes/from-document", json={"number_of_cards": 5})
    assert resp.status_code == 401
    assert client.post("/quizzes/from-document", json=["not", "an", "object"]).status_code == 401
    assert fake_llm.calls == []


def test_from_document_with_non_object_body_is_400(client, user):
    _, headers = user
    resp = client.post("/flashcards/from-document", json=[1, 2], headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Missing or invalid fields")


def test_other_users_content_is_forbidden(client, user):
    user_id, headers = user
    result = data_of(upload(client, headers, user_id))
    other_id, other_headers = register(client, email="other@example.org")

    assert client.get(f"/flashcard-lists/{result['listId']}", headers=other_headers).status_code == 403
    body = {"document_id": result["documentId"], "user_id": other_id}
    assert client.post("/flashcards/from-document", json=body, headers=other_headers).status_code == 403
    assert client.delete(f"/documents/{result['documentId']}", headers=other_headers).status_code == 403
    assert client.get("/flashcard-lists/999", headers=headers).status_code == 404


def test_deleting_document_removes_generated_content(client, user, fake_llm, settings):
    user_id, headers = user
    cards = data_of(upload(client, headers, user_id))
    fake_llm.response = QUIZ_JSON
    data_of(client.post(
        "/quizzes/from-document",
        json={"document_id": cards["documentId"], "user_id": user_id},
        headers=headers,
    ))

    resp = client.delete(f"/documents/{cards['documentId']}", headers=headers)

    assert resp.status_code == 200
    assert data_of(client.get("/flashcard-lists", headers=headers)) == []
    assert data_of(client.get("/quizzes", headers=headers)) == []
    assert stored_files(settings) == []
