#!/usr/bin/env python3
"""
Fake stdio MCP server used by the test suite.

Reads newline-delimited JSON-RPC from stdin and answers on stdout:
- ping          -> {"jsonrpc":"2.0","id":<id>,"result":"ok"}
- initialize    -> server info result
- tools/list    -> {"tools": [...]} (exits afterwards if FAKE_EXIT_AFTER_TOOLS=1)
- getenv        -> value of params.name in this process's environment
- delayed       -> reply after params.delay seconds (other requests keep flowing)
- silent        -> never replies
- exit          -> exits immediately (stdout closes)
- notifications (no id) are ignored; invalid JSON gets a -32700 error with null id

Every raw line received is appended to $FAKE_RECORD_FILE when set.
"""

import json
import os
import sys
import threading

_out_lock = threading.Lock()


def send(message: dict) -> None:
    line = json.dumps(message, separators=(",", ":"))
    with _out_lock:
        sys.stdout.write(line + "\n")
        sys.stdout.flush()


def reply(request_id, result) -> None:
    send({"jsonrpc": "2.0", "id": request_id, "result": result})


def record(line: bytes) -> None:
    path = os.environ.get("FAKE_RECORD_FILE")
    if path:
        with open(path, "ab") as f:
            f.write(line)


def handle(request: dict) -> None:
    method = request.get("method")
    request_id = request.get("id")
    params = request.get("params") or {}

    if method == "exit":
        os._exit(0)
    if request_id is None:
        return

    if method == "ping":
        reply(request_id, "ok")
    elif method == "initialize":
        reply(request_id, {"protocolVersion": "2024-11-05", "serverInfo": {"name": "fake", "version": "0.1"}})
    elif method == "tools/list":
        reply(request_id, {"tools": [{"name": "echo"}]})
        if os.environ.get("FAKE_EXIT_AFTER_TOOLS") == "1":
            os._exit(0)
    elif method == "getenv":
        reply(request_id, os.environ.get(params.get("name", "")))
    elif method == "delayed":
        timer = threading.Timer(float(params.get("delay", 0.2)), reply, args=(request_id, params.get("tag")))
        timer.daemon = True
        timer.start()
    elif method == "silent":
        pass
    else:
        send({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32601, "message": f"Method not found: {method}"}})


def main() -> None:
    for line in sys.stdin.buffer:
        record(line)
        text = line.strip()
        if not text:
            continue
        try:
            request = json.loads(text)
        except ValueError as e:
            send({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": f"Parse error: {e}"}})
            continue
        if isinstance(request, dict):
            handle(request)


if __name__ == "__main__":
    main()
