from __future__ import annotations

import argparse
import json
import time
import urllib.request
from pathlib import Path

DEFAULT_SOURCE = Path(__file__).resolve().parents[1] / "examples" / "process" / "quickstart.txt"


def request_json(url: str, method: str = "GET", payload: dict | None = None) -> tuple[int, dict]:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req = urllib.request.Request(url, data=data, method=method)
    req.add_header("Content-Type", "application/json")
    with urllib.request.urlopen(req, timeout=10) as resp:
        return resp.status, json.loads(resp.read().decode("utf-8"))


def wait_for(url: str, timeout: int) -> dict:
    deadline = time.time() + timeout
    last_error: Exception | None = None
    while time.time() < deadline:
        try:
            status, body = request_json(url)
            if status == 200:
                return body
        except Exception as exc:
            last_error = exc
        time.sleep(1)
    raise RuntimeError(f"Timed out waiting for {url}: {last_error}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test for a running flowlane service.")
    parser.add_argument("--base-url", default="http://localhost:8080")
    parser.add_argument("--source", type=Path, default=DEFAULT_SOURCE)
    parser.add_argument("--timeout", type=int, default=60)
    args = parser.parse_args()

    base = args.base_url.rstrip("/")
    wait_for(f"{base}/api/syntax", args.timeout)

    text = args.source.read_text(encoding="utf-8")
    _, diagram = request_json(f"{base}/api/diagram", method="POST", payload={"text": text})
    if not diagram.get("nodes"):
        raise RuntimeError("Diagram payload has no nodes")

    _, session = request_json(f"{base}/api/session/source", method="PUT", payload={"text": text})
    if session.get("error"):
        raise RuntimeError(f"Session update failed: {session['error']}")

    print("Smoke test passed.")


if __name__ == "__main__":
    main()
