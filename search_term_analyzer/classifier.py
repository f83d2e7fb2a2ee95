"""Streaming classification: newline-delimited JSON decoded as chunks arrive.

The model is asked for one minified JSON object per line, but transport
chunks split the text anywhere. Text is accumulated in a buffer and every
complete line is decoded as soon as its newline arrives; whatever remains
when the stream ends is decoded once more.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

import anthropic

from .config import make_async_client, model_name
from .errors import AnalysisCancelled, RecordParseWarning, StreamError
from .models import AnalysisRecord

logger = logging.getLogger(__name__)

MAX_TOKENS = 16000


def parse_record_line(line: str) -> AnalysisRecord | None:
    """
    Decode one streamed line into an AnalysisRecord.

    Lines that are not a whole JSON object, or that lack a term or a
    category, are logged and dropped. Never raises.
    """
    line = line.strip()
    if not line:
        return None

    # A fragment cut at a chunk boundary is dropped, not buffered further
    if not (line.startswith("{") and line.endswith("}")):
        _warn("not a JSON object", line)
        return None

    try:
        item = json.loads(line)
    except json.JSONDecodeError as e:
        _warn(str(e), line)
        return None

    if not isinstance(item, dict) or not item.get("term") or not item.get("category"):
        _warn("missing term or category", line)
        return None

    return AnalysisRecord.from_dict(item)


def _warn(reason: str, line: str) -> None:
    logger.warning("%s: could not parse streaming JSON line (%s): %.200s",
                   RecordParseWarning.__name__, reason, line)


async def iter_records(
    chunks: AsyncIterable[str | None],
    cancel: asyncio.Event | None = None,
) -> AsyncIterator[AnalysisRecord]:
    """
    Yield records from an async stream of text fragments, in arrival order.

    Raises:
        AnalysisCancelled: cancel was set while the stream was open
    """
    buffer = ""
    async for chunk in chunks:
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled("Analysis cancelled.")
        if not chunk:
            continue
        buffer += chunk

        newline_index = buffer.find("\n")
        while newline_index != -1:
            line = buffer[:newline_index].strip()
            buffer = buffer[newline_index + 1:]
            if line:
                record = parse_record_line(line)
                if record is not None:
                    yield record
            newline_index = buffer.find("\n")

    if buffer.strip():
        record = parse_record_line(buffer)
        if record is not None:
            yield record


async def classify(
    prompt: str,
    client: anthropic.AsyncAnthropic | None = None,
    cancel: asyncio.Event | None = None,
) -> AsyncIterator[AnalysisRecord]:
    """
    Stream the classification call and yield each decoded record.

    Raises:
        StreamError: any failure opening or reading the stream; records
            already yielded stay with the caller
        AnalysisCancelled: cancel was set
    """
    client = client or make_async_client()
    try:
        async with client.messages.stream(
            model=model_name(),
            max_tokens=MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        ) as stream:
            async for record in iter_records(stream.text_stream, cancel):
                yield record
    except AnalysisCancelled:
        raise
    except Exception as e:
        # SDK errors and raw httpx transport errors from text_stream alike
        raise StreamError(f"Analysis stream failed: {e}") from e
