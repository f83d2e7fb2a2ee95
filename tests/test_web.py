import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeAsyncClient, FakeClient
from search_term_analyzer import classifier, context, web


@pytest.fixture
def client():
    return TestClient(web.app)


def parse_events(body: str) -> list[tuple[str, str]]:
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.split("\n"))
        events.append((lines["event"], lines["data"]))
    return events


def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Search Term Analyzer" in resp.text


def test_analyze_streams_records(client, monkeypatch, streamed_lines):
    monkeypatch.setattr(
        classifier, "make_async_client",
        lambda: FakeAsyncClient(chunks=["\n".join(streamed_lines) + "\n"]),
    )

    resp = client.post("/api/analyze", json={"csv": "a\nb\nc", "location": "San Diego, CA"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = parse_events(resp.text)
    names = [name for name, _ in events]
    assert names[-1] == "complete"
    assert json.loads(events[-1][1]) == {"count": 3}
    records = [json.loads(data) for name, data in events if name == "record"]
    assert [r["category"] for r in records] == ["Positive", "Negative", "Competitor"]
    ctx = json.loads(next(data for name, data in events if name == "context"))
    assert ctx["location"] == "San Diego, CA"


def test_analyze_with_website(client, monkeypatch, streamed_lines):
    async def no_snapshot(url):
        return None

    monkeypatch.setattr("search_term_analyzer.main.fetch_homepage", no_snapshot)
    monkeypatch.setattr(
        context, "make_client",
        lambda: FakeClient(text='{"location": "Reno, NV", "competitors": ["Acme"], "services": []}'),
    )
    monkeypatch.setattr(classifier, "make_async_client", lambda: FakeAsyncClient(chunks=[streamed_lines[1]]))

    resp = client.post("/api/analyze", json={"csv": "plumber jobs", "url": "https://example.com"})

    events = parse_events(resp.text)
    ctx = json.loads(next(data for name, data in events if name == "context"))
    assert ctx["location"] == "Reno, NV"
    assert ctx["competitors"] == ["Acme"]
    assert events[-1][0] == "complete"


def test_analyze_without_url_or_location_reports_error(client):
    resp = client.post("/api/analyze", json={"csv": "a"})
    events = parse_events(resp.text)
    assert events == [("error", "Please provide a Website URL or a manual Targeting Location.")]


def test_export(client):
    resp = client.post(
        "/api/export",
        json={"records": [{"term": 'a"b', "category": "Generic"}]},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.text.split("\n")[1] == '"a""b","Generic","","","","",""'


def test_disconnect_cancels_running_analysis(monkeypatch):
    seen = {}

    async def slow_analysis(run, on_progress, on_record, on_context):
        seen["run"] = run
        on_progress("Classifying search terms...")
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            seen["cancelled"] = True
            raise

    monkeypatch.setattr(web, "analyze_search_terms", slow_analysis)

    async def _run():
        response = await web.analyze(web.AnalyzeRequest(csv="a", location="Reno, NV"))
        first = await response.body_iterator.__anext__()
        # Client disconnects after the first event
        await response.body_iterator.aclose()
        return first

    first = asyncio.run(_run())

    assert first == "event: progress\ndata: Classifying search terms...\n\n"
    assert seen["cancelled"] is True
    assert seen["run"].cancelled.is_set()


def test_serve_binds_from_environment(monkeypatch):
    calls = []
    monkeypatch.setattr(web.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    web.serve()
    monkeypatch.setenv("PORT", "9001")
    web.serve()

    assert calls == [
        (web.app, {"host": "127.0.0.1", "port": 8000}),
        (web.app, {"host": "127.0.0.1", "port": 9001}),
    ]
