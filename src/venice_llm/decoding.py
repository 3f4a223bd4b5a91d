"""Incremental decoder for line-framed JSON streams.

Network chunks arrive cut at arbitrary points. ``StreamFrameDecoder`` keeps
the trailing incomplete line between calls and hands back each JSON frame as
soon as its text is complete.

Two framings are supported:

* Server-Sent Events (default): frames are ``data:`` lines, blank lines
  delimit events, ``:`` comment lines are heartbeats, and ``data: [DONE]``
  marks the end of the stream.
* Newline-delimited JSON (``line_prefix=None``): every non-blank line is a
  frame.

Lines that start with ``{`` or ``[`` are taken as frames under either
framing.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data:"
END_SENTINELS = frozenset({"[DONE]"})


class StreamFrameDecoder:
    """Reassembles fragmented chunks into parsed JSON frames.

    Args:
        line_prefix: Prefix marking a data line, or None when every line is
            data.
        sentinels: Payloads that mark control frames and are never parsed.
    """

    def __init__(
        self,
        line_prefix: str | None = SSE_DATA_PREFIX,
        sentinels: frozenset[str] = END_SENTINELS,
    ) -> None:
        self._line_prefix = line_prefix
        self._sentinels = sentinels
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def buffered(self) -> str:
        """The trailing text not yet resolved into a frame."""
        return self._buffer

    def feed(self, chunk: str | bytes) -> list[Any]:
        """Add a chunk and return every frame it completes, in order."""
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        if not chunk:
            return []

        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")

        frames: list[Any] = []
        for line in lines:
            self._decode_line(line, frames)

        if self._buffer.strip() and self._try_eager(frames):
            self._buffer = ""
        return frames

    def finish(self) -> list[Any]:
        """Flush what is left at stream end.

        A truncated trailing fragment is discarded, not reported.
        """
        tail = self._utf8.decode(b"", final=True)
        remaining, self._buffer = self._buffer + tail, ""
        frames: list[Any] = []
        for line in remaining.split("\n"):
            self._decode_line(line, frames)
        return frames

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _payload(self, line: str) -> str | None:
        """Return the data carried by *line*, or None for non-data lines."""
        line = line.strip()
        if not line:
            return None
        if self._line_prefix is None or line[0] in "{[":
            # bare JSON is accepted even when a prefix is expected
            return line
        if not line.startswith(self._line_prefix):
            # event:, id:, retry: fields and ":" heartbeat comments
            return None
        return line[len(self._line_prefix):].strip() or None

    def _decode_line(self, line: str, frames: list[Any]) -> None:
        payload = self._payload(line)
        if payload is None:
            return
        if payload in self._sentinels:
            logger.debug("Skipping stream control frame %s", payload)
            return
        try:
            frames.append(json.loads(payload))
        except json.JSONDecodeError as exc:
            logger.debug("Dropping unparseable frame (%s): %.200s", exc, payload)

    def _try_eager(self, frames: list[Any]) -> bool:
        """Parse an unterminated trailing line if it is already a full value.

        Only objects and arrays qualify; a bare scalar could still grow.
        """
        payload = self._payload(self._buffer)
        if payload is None or payload[0] not in "{[":
            return False
        try:
            frames.append(json.loads(payload))
        except json.JSONDecodeError:
            return False
        return True
