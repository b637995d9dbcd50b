"""GhostTutor JSON-lines server entry point.

Usage: python -m ghosttutor.server

Reads JSON requests from stdin (one per line), writes JSON responses and
difficulty notifications to stdout. All logging goes to stderr to keep
the protocol clean.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

from ghosttutor.config.settings import Settings

from .handler import ServerHandler
from .protocol import Notification, Response

logger = logging.getLogger("ghosttutor.server")


async def main() -> None:
    loop = asyncio.get_running_loop()
    settings = Settings.load()
    logging.basicConfig(
        stream=sys.stderr,
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    def write_line(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_notification(notification: Notification) -> None:
        write_line(notification.to_json_line())

    handler = ServerHandler(settings=settings, write_notification=write_notification)
    logger.info("ghosttutor-server: ready")

    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)

    while True:
        line = await reader.readline()
        if not line:
            break  # stdin closed

        line_str = line.decode("utf-8", errors="replace").strip()
        if not line_str:
            continue

        try:
            msg = json.loads(line_str)
        except json.JSONDecodeError as e:
            write_line(Response(id=0, error=f"Invalid JSON: {e}").to_json_line())
            continue

        if not isinstance(msg, dict):
            write_line(Response(id=0, error="Request must be a JSON object").to_json_line())
            continue

        req_id = msg.get("id", 0)
        try:
            result = await handler.dispatch(msg)
            resp = Response(id=req_id, result=result)
        except Exception as e:
            logger.warning("Request %s failed: %s", req_id, e, exc_info=True)
            resp = Response(id=req_id, error=str(e))

        write_line(resp.to_json_line())


if __name__ == "__main__":
    asyncio.run(main())
