"""FastAPI web app for search term analysis."""

import asyncio
import contextlib
import json
import logging
import os

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from pydantic import BaseModel

from .errors import AnalyzerError
from .export import records_to_csv
from .main import AnalysisRun, analyze_search_terms
from .models import AnalysisRecord, BusinessContext

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="Search Term Analyzer")


class AnalyzeRequest(BaseModel):
    csv: str
    url: str = ""
    location: str = ""


class ExportRequest(BaseModel):
    records: list[dict[str, str]]


@app.get("/", response_class=HTMLResponse)
async def index():
    return INDEX_HTML


@app.post("/api/analyze")
async def analyze(req: AnalyzeRequest):
    """Stream analysis records via Server-Sent Events."""
    run = AnalysisRun(csv_text=req.csv, website_url=req.url, manual_location=req.location)

    async def event_stream():
        queue: asyncio.Queue[str | None] = asyncio.Queue()

        def on_progress(msg: str):
            queue.put_nowait(_sse("progress", msg))

        def on_context(context: BusinessContext):
            queue.put_nowait(_sse("context", json.dumps({
                "location": context.location,
                "competitors": list(context.competitors),
                "services": list(context.services),
                "sources": list(context.sources),
            })))

        def on_record(record: AnalysisRecord):
            queue.put_nowait(_sse("record", json.dumps(record.to_dict())))

        async def worker():
            try:
                records = await analyze_search_terms(
                    run,
                    on_progress=on_progress,
                    on_record=on_record,
                    on_context=on_context,
                )
                queue.put_nowait(_sse("complete", json.dumps({"count": len(records)})))
            except AnalyzerError as e:
                queue.put_nowait(_sse("error", str(e)))
            except Exception as e:
                logger.exception("Analysis failed")
                queue.put_nowait(_sse("error", f"Analysis failed: {e}"))
            finally:
                queue.put_nowait(None)

        task = asyncio.create_task(worker())
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            # Client went away mid-stream
            if not task.done():
                run.cancel()
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


@app.post("/api/export")
async def export_csv(req: ExportRequest):
    return Response(
        content=records_to_csv(req.records),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="search_terms_analysis.csv"'},
    )


def _sse(event: str, data: str) -> str:
    data = data.replace("\r", " ").replace("\n", " ")
    return f"event: {event}\ndata: {data}\n\n"


def serve():
    """Run the app with uvicorn (the search-terms-web script). HOST and PORT override the bind."""
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


# ---------------------------------------------------------------------------
# Inline HTML, single page app
# ---------------------------------------------------------------------------

INDEX_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Search Term Analyzer</title>
<style>
  *, *::before, *::after { margin: 0; padding: 0; box-sizing: border-box; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
    background: #f0f2f5;
    color: #1a1a2e;
    min-height: 100vh;
    display: flex;
    flex-direction: column;
    align-items: center;
    padding: 40px 20px;
  }

  .card {
    background: white;
    border-radius: 16px;
    box-shadow: 0 1px 3px rgba(0,0,0,0.08), 0 8px 24px rgba(0,0,0,0.06);
    padding: 40px;
    width: 100%;
    max-width: 1100px;
  }

  h1 { font-size: 24px; font-weight: 700; margin-bottom: 6px; }

  .subtitle { font-size: 14px; color: #6b7280; margin-bottom: 28px; }

  label {
    display: block;
    font-size: 13px;
    font-weight: 600;
    color: #4a5568;
    margin: 14px 0 6px;
  }

  input[type="text"], textarea {
    width: 100%;
    padding: 12px 16px;
    border: 1px solid #d1d5db;
    border-radius: 10px;
    font-size: 15px;
    font-family: inherit;
    outline: none;
  }

  input[type="text"]:focus, textarea:focus {
    border-color: #4ecdc4;
    box-shadow: 0 0 0 3px rgba(78,205,196,0.15);
  }

  button {
    margin-top: 20px;
    padding: 12px 24px;
    background: #1a1a2e;
    color: white;
    border: none;
    border-radius: 10px;
    font-size: 15px;
    font-weight: 600;
    cursor: pointer;
  }

  button:hover { background: #2a2a4e; }
  button:disabled { background: #9ca3af; cursor: not-allowed; }
  button.secondary { background: #4ecdc4; color: #1a1a2e; margin-left: 8px; }

  #progress { margin-top: 20px; font-size: 14px; color: #6b7280; }

  #context { margin-top: 12px; font-size: 13px; color: #4a5568; display: none; }
  #context a { color: #2a7f79; }

  #results { margin-top: 24px; display: none; }

  table { width: 100%; border-collapse: collapse; font-size: 13px; margin-top: 12px; }
  th, td { text-align: left; padding: 8px 10px; border-bottom: 1px solid #eef0f3; }
  th { background: #f7f8fa; font-weight: 600; color: #4a5568; }

  tbody tr { animation: fadeIn 0.2s ease both; }

  @keyframes fadeIn { from { opacity: 0; transform: translateY(4px); } to { opacity: 1; } }

  .cat-Positive { color: #15803d; font-weight: 600; }
  .cat-Negative { color: #b91c1c; font-weight: 600; }
  .cat-Competitor { color: #7e22ce; font-weight: 600; }
  .cat-Generic { color: #a16207; font-weight: 600; }

  .error-msg {
    margin-top: 16px;
    padding: 12px 16px;
    background: #fef2f2;
    border: 1px solid #fecaca;
    border-radius: 10px;
    color: #991b1b;
    font-size: 14px;
    display: none;
  }
</style>
</head>
<body>
<div class="card">
  <h1>Search Term Analyzer</h1>
  <p class="subtitle">Upload a search terms CSV and classify every term as Positive, Negative, Competitor or Generic.</p>

  <form id="form">
    <label for="csv-file">Search Terms CSV</label>
    <input type="file" id="csv-file" accept=".csv,text/csv,text/plain">

    <label for="url">Website URL</label>
    <input type="text" id="url" placeholder="https://example.com">

    <label for="location">Targeting Location (optional, overrides the website location)</label>
    <textarea id="location" rows="2" placeholder="San Diego, CA"></textarea>

    <button type="submit" id="btn" disabled>Analyze Terms</button>
  </form>

  <div class="error-msg" id="error"></div>
  <div id="progress"></div>
  <div id="context"></div>

  <div id="results">
    <button type="button" class="secondary" id="copy-btn">Copy as CSV</button>
    <button type="button" class="secondary" id="download-btn">Download CSV</button>
    <table>
      <thead>
        <tr>
          <th>Search Term</th><th>Category</th><th>Ad Group</th><th>Positive Phrase</th>
          <th>Negative Phrase</th><th>Competitor</th><th>Location Exclusion</th>
        </tr>
      </thead>
      <tbody id="results-tbody"></tbody>
    </table>
  </div>
</div>

<script>
const FIELDS = ['term', 'category', 'adGroup', 'positivePhrase', 'negativePhrase', 'competitorBrand', 'locationExclusion'];
const HEADERS = ['Search Term', 'Category', 'Ad Group', 'Positive Phrase', 'Negative Phrase', 'Competitor', 'Location Exclusion'];

const form = document.getElementById('form');
const fileInput = document.getElementById('csv-file');
const btn = document.getElementById('btn');
const progressEl = document.getElementById('progress');
const contextEl = document.getElementById('context');
const resultsEl = document.getElementById('results');
const tbody = document.getElementById('results-tbody');
const errorEl = document.getElementById('error');
const copyBtn = document.getElementById('copy-btn');

let records = [];

fileInput.addEventListener('change', () => {
  btn.disabled = !fileInput.files.length;
});

function showError(message) {
  errorEl.textContent = message;
  errorEl.style.display = 'block';
}

function setLoading(loading) {
  btn.disabled = loading;
  btn.textContent = loading ? 'Analyzing...' : 'Analyze Terms';
}

function addRow(item) {
  records.push(item);
  const row = tbody.insertRow();
  FIELDS.forEach((f) => {
    const cell = row.insertCell();
    cell.textContent = item[f] || '';
    if (f === 'category') cell.className = 'cat-' + item[f];
  });
  row.style.animationDelay = ((records.length % 50) * 20) + 'ms';
}

function showContext(ctx) {
  let html = '<strong>Location:</strong> ' + escapeHtml(ctx.location);
  if (ctx.competitors.length) html += ' &middot; <strong>Competitors:</strong> ' + escapeHtml(ctx.competitors.join(', '));
  if (ctx.services.length) html += ' &middot; <strong>Services:</strong> ' + escapeHtml(ctx.services.join(', '));
  if (ctx.sources.length) {
    html += '<br><strong>Sources:</strong> ' + ctx.sources.map(
      (u) => '<a href="' + escapeHtml(u) + '" target="_blank" rel="noopener">' + escapeHtml(u) + '</a>'
    ).join(', ');
  }
  contextEl.innerHTML = html;
  contextEl.style.display = 'block';
}

function escapeHtml(s) {
  const d = document.createElement('div');
  d.textContent = s;
  return d.innerHTML;
}

function handleEvent(event, data) {
  if (event === 'progress') progressEl.textContent = data;
  else if (event === 'context') showContext(JSON.parse(data));
  else if (event === 'record') addRow(JSON.parse(data));
  else if (event === 'error') showError(data);
  else if (event === 'complete') progressEl.textContent = JSON.parse(data).count + ' search terms analyzed.';
}

async function streamAnalysis(body) {
  const resp = await fetch('/api/analyze', {
    method: 'POST',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify(body),
  });
  if (!resp.ok) throw new Error('HTTP ' + resp.status);

  const reader = resp.body.getReader();
  const decoder = new TextDecoder();
  let buffer = '';
  while (true) {
    const { value, done } = await reader.read();
    if (done) break;
    buffer += decoder.decode(value, { stream: true });
    let sep;
    while ((sep = buffer.indexOf('\\n\\n')) !== -1) {
      const block = buffer.slice(0, sep);
      buffer = buffer.slice(sep + 2);
      let event = 'message', data = '';
      block.split('\\n').forEach((line) => {
        if (line.startsWith('event: ')) event = line.slice(7);
        else if (line.startsWith('data: ')) data = line.slice(6);
      });
      handleEvent(event, data);
    }
  }
}

form.addEventListener('submit', async (e) => {
  e.preventDefault();
  const file = fileInput.files[0];
  if (!file) { showError('Please select a CSV file first.'); return; }
  const url = document.getElementById('url').value.trim();
  const location = document.getElementById('location').value.trim();
  if (!url && !location) {
    showError('Please provide a Website URL or a manual Targeting Location.');
    return;
  }

  records = [];
  tbody.innerHTML = '';
  errorEl.style.display = 'none';
  contextEl.style.display = 'none';
  resultsEl.style.display = 'block';
  setLoading(true);

  try {
    const csv = await file.text();
    await streamAnalysis({ csv, url, location });
  } catch (err) {
    showError('Analysis failed: ' + err.message);
  } finally {
    setLoading(false);
  }
});

function toCsv() {
  const quote = (v) => '"' + String(v || '').replace(/"/g, '""') + '"';
  const rows = records.map((r) => FIELDS.map((f) => quote(r[f])).join(','));
  return [HEADERS.map(quote).join(','), ...rows].join('\\n');
}

copyBtn.addEventListener('click', () => {
  navigator.clipboard.writeText(toCsv()).then(() => {
    copyBtn.textContent = 'Copied!';
  }).catch(() => {
    copyBtn.textContent = 'Failed!';
  }).finally(() => {
    setTimeout(() => { copyBtn.textContent = 'Copy as CSV'; }, 2000);
  });
});

document.getElementById('download-btn').addEventListener('click', async () => {
  const resp = await fetch('/api/export', {
    method: 'POST',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify({ records }),
  });
  const blob = await resp.blob();
  const a = document.createElement('a');
  a.href = URL.createObjectURL(blob);
  a.download = 'search_terms_analysis.csv';
  a.click();
  URL.revokeObjectURL(a.href);
});
</script>
</body>
</html>
"""
