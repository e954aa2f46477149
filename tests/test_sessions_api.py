import asyncio

from conftest import FakeFunctions, FakeLLM, FakePdfCo
from pdfmind.core.config import get_settings
from pdfmind.core.errors import ProviderError
from pdfmind.services import flow

SYLLABUS = "Chapter 1: Intro...\n" + "\n".join(
    f"Section {i}" if i % 3 else "" for i in range(1, 25)
)


def _new_session(client):
    r = client.post("/v1/sessions")
    assert r.status_code == 201, r.text
    assert r.json()["mode"] == "upload"
    return r.json()["sessionId"]


def _upload(client, sid, name="syllabus.pdf", content=b"%PDF-1.4\n%EOF\n", mime="application/pdf"):
    return client.post(f"/v1/sessions/{sid}/document", files={"file": (name, content, mime)})


def _ready_session(client, orchestrator, text=SYLLABUS):
    orchestrator.pdfco = FakePdfCo(text=text)
    sid = _new_session(client)
    assert _upload(client, sid).status_code == 200
    assert client.post(f"/v1/sessions/{sid}/continue").status_code == 200
    return sid


def test_end_to_end_quiz_with_fallbacks(test_client, orchestrator):
    orchestrator.pdfco = FakePdfCo(error=ProviderError("network error"))
    orchestrator.functions = FakeFunctions({"extract-pdf-text": {"text": SYLLABUS, "success": True}})
    orchestrator.llm = FakeLLM()

    sid = _new_session(test_client)
    r = _upload(test_client, sid)
    assert r.status_code == 200, r.text
    snap = r.json()
    assert snap["mode"] == "preview"
    assert snap["document"]["name"] == "syllabus.pdf"

    r = test_client.get(f"/v1/sessions/{sid}/preview")
    preview = r.json()
    lines = [l for l in SYLLABUS.split("\n") if l.strip()]
    assert preview["lines"] == lines[:10]
    assert preview["lines"][0] == "Chapter 1: Intro..."
    assert preview["totalLines"] == len(lines)

    assert test_client.post(f"/v1/sessions/{sid}/continue").json()["mode"] == "select-mode"

    r = test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "generate-quiz", "count": 5})
    assert r.status_code == 200, r.text
    quiz = r.json()["quiz"]
    assert quiz["source"] == "bank"
    assert len(quiz["questions"]) == 5
    assert len({q["id"] for q in quiz["questions"]}) == 5
    assert "correctAnswer" not in quiz["questions"][0]
    assert quiz["timeLeft"] <= 1800

    # banque locale : bonnes réponses [0, 1, 1, 1, 1] -> 3 justes
    for q, choice in zip(quiz["questions"], [0, 1, 1, 0, 0]):
        r = test_client.post(f"/v1/sessions/{sid}/quiz/answer", json={"questionId": q["id"], "choiceIndex": choice})
        assert r.status_code == 200, r.text

    r = test_client.post(f"/v1/sessions/{sid}/quiz/submit")
    assert r.status_code == 200, r.text
    result = r.json()
    assert (result["score"], result["total"], result["percentage"]) == (3, 5, 60)

    perf = test_client.get(f"/v1/sessions/{sid}/performance").json()
    assert perf == {"totalTests": 1, "averageScore": 60, "bestScore": 60}

    # seconde soumission : sans effet
    assert test_client.post(f"/v1/sessions/{sid}/quiz/submit").json() == result
    assert test_client.get(f"/v1/sessions/{sid}/performance").json() == perf

    state = test_client.get(f"/v1/sessions/{sid}/quiz").json()
    assert state["showResults"] is True
    assert state["result"]["details"][3]["isCorrect"] is False


def test_upload_rejects_non_pdf_without_network_call(test_client, orchestrator):
    sid = _new_session(test_client)
    r = _upload(test_client, sid, name="photo.png", content=b"\x89PNG", mime="image/png")
    assert r.status_code == 415
    assert "PDF" in r.json()["detail"]
    assert orchestrator.pdfco.calls == []
    assert orchestrator.functions.calls == []
    assert test_client.get(f"/v1/sessions/{sid}").json()["mode"] == "upload"


def test_upload_accepts_empty_pdf(test_client, orchestrator):
    orchestrator.pdfco = FakePdfCo(text="")
    sid = _new_session(test_client)
    r = _upload(test_client, sid, name="empty.pdf", content=b"")
    assert r.status_code == 200, r.text
    preview = test_client.get(f"/v1/sessions/{sid}/preview").json()
    assert preview["lines"] == [
        "Unable to extract text from empty.pdf. Please ensure the PDF contains selectable text."
    ]


def test_upload_rejects_oversized_file(test_client, orchestrator, monkeypatch):
    monkeypatch.setenv("MAX_UPLOAD_MB", "1")
    get_settings.cache_clear()
    sid = _new_session(test_client)
    r = _upload(test_client, sid, content=b"0" * (1024 * 1024 + 1))
    assert r.status_code == 413
    assert orchestrator.pdfco.calls == []


def test_extraction_failure_surfaces_message(test_client, orchestrator):
    sid = _new_session(test_client)
    r = _upload(test_client, sid, content=b"garbage")
    assert r.status_code == 502
    body = r.json()
    assert body["detail"] == "Failed to process the PDF file. Please try again."
    assert body["operation"] == "extraction"
    assert len(body["stages"]) == 3
    assert test_client.get(f"/v1/sessions/{sid}").json()["mode"] == "upload"


def test_upload_only_from_upload_screen(test_client, orchestrator):
    sid = _ready_session(test_client, orchestrator)
    assert _upload(test_client, sid).status_code == 409


def test_ask_greeting_and_title_locally(test_client, orchestrator):
    text = "Introduction\nIntroduction\nMachine Learning Basics\nChapter 1 ..."
    sid = _ready_session(test_client, orchestrator, text=text)
    r = test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "ask-question"})
    assert r.status_code == 200
    assert r.json()["messages"][0]["author"] == "assistant"

    r = test_client.post(f"/v1/sessions/{sid}/ask", json={"question": "hi"})
    assert r.status_code == 200, r.text
    assert '"Machine Learning Basics"' in r.json()["answer"]["text"]

    r = test_client.post(f"/v1/sessions/{sid}/ask", json={"question": "What is the title of the document?"})
    assert r.json()["answer"]["text"] == 'The document\'s main title appears to be: "Machine Learning Basics".'

    assert orchestrator.functions.calls == []
    assert orchestrator.llm.prompts == []
    messages = test_client.get(f"/v1/sessions/{sid}/messages").json()["messages"]
    assert [m["author"] for m in messages] == ["assistant", "user", "assistant", "user", "assistant"]


def test_ask_uses_generative_provider(test_client, orchestrator):
    sid = _ready_session(test_client, orchestrator)
    orchestrator.llm = FakeLLM(replies=["Chapter 1 introduces the course."])
    test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "ask-question"})

    r = test_client.post(f"/v1/sessions/{sid}/ask", json={"question": "What does chapter 1 cover?"})
    assert r.json()["answer"]["text"] == "Chapter 1 introduces the course."

    r = test_client.post(f"/v1/sessions/{sid}/ask", json={"question": "   "})
    assert r.status_code == 400


def test_ask_outside_question_screen(test_client, orchestrator):
    sid = _ready_session(test_client, orchestrator)
    r = test_client.post(f"/v1/sessions/{sid}/ask", json={"question": "Why?"})
    assert r.status_code == 409


def test_navigation_back(test_client, orchestrator):
    sid = _ready_session(test_client, orchestrator)
    test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "generate-quiz", "count": 3})
    modes = [test_client.post(f"/v1/sessions/{sid}/back").json()["mode"] for _ in range(3)]
    assert modes == ["select-mode", "preview", "upload"]
    assert test_client.post(f"/v1/sessions/{sid}/back").status_code == 409


def test_regenerate_and_test_again(test_client, orchestrator):
    sid = _ready_session(test_client, orchestrator)
    test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "generate-quiz", "count": 3})

    r = test_client.post(f"/v1/sessions/{sid}/quiz/regenerate", json={"count": 12})
    assert r.status_code == 200, r.text
    assert len(r.json()["questions"]) == 12
    assert r.json()["answers"] == {}

    r = test_client.post(f"/v1/sessions/{sid}/quiz/submit")
    assert r.status_code == 409

    r = test_client.post(f"/v1/sessions/{sid}/quiz/test-again")
    assert r.json()["mode"] == "select-mode"
    assert r.json()["quiz"] is None
    assert test_client.post(f"/v1/sessions/{sid}/quiz/regenerate").status_code == 409


def test_quiz_count_validation(test_client, orchestrator):
    sid = _ready_session(test_client, orchestrator)
    r = test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "generate-quiz", "count": 51})
    assert r.status_code == 422


def test_unknown_session(test_client):
    assert test_client.get("/v1/sessions/sess_missing").status_code == 404
    assert test_client.delete("/v1/sessions/sess_missing").status_code == 404


def test_delete_session(test_client):
    sid = _new_session(test_client)
    assert test_client.delete(f"/v1/sessions/{sid}").json() == {"ok": True, "id": sid}
    assert test_client.get(f"/v1/sessions/{sid}").status_code == 404


def test_submit_runs_on_the_event_loop_with_armed_timer(test_client, orchestrator, monkeypatch):
    sid = _ready_session(test_client, orchestrator)
    quiz = test_client.post(f"/v1/sessions/{sid}/mode", json={"mode": "generate-quiz", "count": 3}).json()["quiz"]
    for q in quiz["questions"]:
        test_client.post(f"/v1/sessions/{sid}/quiz/answer", json={"questionId": q["id"], "choiceIndex": 0})

    seen = []
    submit = flow.submit_quiz

    def recording_submit(state, auto=False):
        # lève RuntimeError hors de la boucle (thread de travail)
        loop = asyncio.get_running_loop()
        seen.append((loop.is_running(), state.quiz.timer.running))
        return submit(state, auto)

    monkeypatch.setattr(flow, "submit_quiz", recording_submit)
    r = test_client.post(f"/v1/sessions/{sid}/quiz/submit")
    assert r.status_code == 200, r.text
    assert seen == [(True, True)]

    perf = test_client.get(f"/v1/sessions/{sid}/performance").json()
    assert perf["totalTests"] == 1
