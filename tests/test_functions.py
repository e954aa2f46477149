import base64
import json

import pytest

from conftest import API_KEY_HEADER, FakeLLM, FakePdfCo


def _question(i, correct=0):
    return {
        "id": i,
        "question": f"Question {i}?",
        "options": ["A", "B", "C", "D"],
        "correctAnswer": correct,
        "difficulty": "Easy",
        "explanation": "Because.",
    }


@pytest.mark.parametrize(
    "path",
    ["/functions/v1/extract-pdf-text", "/functions/v1/answer-pdf-question", "/functions/v1/generate-quiz-questions"],
)
def test_functions_require_api_key(test_client, path):
    assert test_client.post(path, json={}).status_code == 401
    assert test_client.post(path, json={}, headers={"x-api-key": "wrong"}).status_code == 401


@pytest.mark.parametrize(
    "path, body",
    [
        ("/functions/v1/extract-pdf-text", {"fileName": "a.pdf"}),
        ("/functions/v1/answer-pdf-question", {"question": "Why?"}),
        ("/functions/v1/generate-quiz-questions", {"questionCount": 3}),
    ],
)
def test_functions_missing_fields(test_client, path, body):
    r = test_client.post(path, json=body, headers=API_KEY_HEADER)
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["error"].startswith("Missing")


def test_extract_not_configured(test_client, orchestrator):
    orchestrator.pdfco = FakePdfCo(text="x", configured=False)
    body = {"fileData": base64.b64encode(b"%PDF").decode(), "fileName": "a.pdf"}
    r = test_client.post("/functions/v1/extract-pdf-text", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 500
    assert r.json() == {"error": "PDF.co API key not configured", "success": False}
    assert orchestrator.pdfco.calls == []


def test_extract_invalid_base64(test_client, orchestrator):
    orchestrator.pdfco = FakePdfCo(text="x")
    body = {"fileData": "not base64 !!", "fileName": "a.pdf"}
    r = test_client.post("/functions/v1/extract-pdf-text", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 400


def test_extract_success_limits_pages(test_client, orchestrator):
    orchestrator.pdfco = FakePdfCo(text="Chapter 1")
    body = {"fileData": base64.b64encode(b"%PDF-1.4").decode(), "fileName": "a.pdf"}
    r = test_client.post("/functions/v1/extract-pdf-text", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 200, r.text
    assert r.json() == {"text": "Chapter 1", "success": True}
    assert orchestrator.pdfco.calls == [{"file_name": "a.pdf", "pages": "1-50", "size": 8}]


def test_extract_provider_failure(test_client, orchestrator):
    body = {"fileData": base64.b64encode(b"%PDF").decode(), "fileName": "a.pdf"}
    r = test_client.post("/functions/v1/extract-pdf-text", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 500
    assert r.json()["success"] is False
    assert "network error" in r.json()["error"]


def test_answer_truncates_content(test_client, orchestrator):
    orchestrator.llm = FakeLLM(replies=["42"])
    body = {"question": "What is the answer?", "pdfContent": "x" * 12000, "fileName": "a.pdf"}
    r = test_client.post("/functions/v1/answer-pdf-question", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 200, r.text
    assert r.json() == {"answer": "42", "success": True}
    prompt = orchestrator.llm.prompts[0]
    assert "x" * 10000 in prompt
    assert "x" * 10001 not in prompt


def test_answer_not_configured(test_client, orchestrator):
    orchestrator.llm = FakeLLM(configured=False)
    body = {"question": "Why?", "pdfContent": "text"}
    r = test_client.post("/functions/v1/answer-pdf-question", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 500
    assert orchestrator.llm.prompts == []


def test_generate_quiz_questions(test_client, orchestrator):
    payload = {"questions": [_question(1), _question(1, 2), {"id": 3, "options": ["A"]}], "hasMathContent": True}
    orchestrator.llm = FakeLLM(replies=["```json\n" + json.dumps(payload) + "\n```"])
    body = {"pdfContent": "y" * 9000, "questionCount": 5}
    r = test_client.post("/functions/v1/generate-quiz-questions", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["success"] is True
    assert data["hasMathContent"] is True
    assert [q["id"] for q in data["questions"]] == ["1", "1-2"]
    assert data["questions"][0]["difficulty"] == "easy"

    prompt = orchestrator.llm.prompts[0]
    assert "exactly 5 multiple choice" in prompt
    assert "y" * 8001 not in prompt


def test_generate_quiz_questions_bad_json(test_client, orchestrator):
    orchestrator.llm = FakeLLM(replies=["not json"])
    body = {"pdfContent": "text", "questionCount": 3}
    r = test_client.post("/functions/v1/generate-quiz-questions", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 500
    assert "Invalid JSON" in r.json()["error"]
