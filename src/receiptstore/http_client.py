from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request


class HttpRequestError(RuntimeError):
    pass


def post_json(url: str, payload: dict, *, timeout_s: float = 5.0) -> dict:
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=data,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
        method="POST",
    )
    return _send(req, timeout_s=timeout_s)


def get_json(url: str, *, timeout_s: float = 5.0) -> dict:
    req = urllib.request.Request(url, headers={"Accept": "application/json"}, method="GET")
    return _send(req, timeout_s=timeout_s)


def _send(req: urllib.request.Request, *, timeout_s: float) -> dict:
    url = req.full_url
    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            body = resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
        raise HttpRequestError(f"HTTP {exc.code} from {url}: {body}") from exc
    except urllib.error.URLError as exc:
        raise HttpRequestError(f"Request to {url} failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise HttpRequestError(f"Request to {url} timed out after {timeout_s}s") from exc
    except (http.client.HTTPException, OSError) as exc:
        raise HttpRequestError(f"Request to {url} failed: {exc!r}") from exc

    if not body:
        return {}
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise HttpRequestError(f"Invalid JSON from {url}: {exc}") from exc
