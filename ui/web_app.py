"""
ui/web_app.py — FastAPI web surface for DotDecoder.

Serves the single-page dot board at http://localhost:<port>/ and accepts
gestures, typed text and host lifecycle signals over REST or a WebSocket.
All handlers run on the event loop thread, so events are applied strictly
in arrival order.

REST endpoints
--------------
GET  /           HTML dot board
GET  /health     JSON health check
GET  /state      Current board snapshot
POST /gesture    {"kind": "touch_start", "index": 3} | {"kind": "touch_move", "target": "4"}
POST /text       {"value": "aban"}
POST /reset      {}
POST /host       {"signal": "offline"}

WebSocket
---------
ws://<host>:<port>/ws — same payloads with an ``action`` key
(``gesture`` | ``text`` | ``reset`` | ``host`` | ``state``). Every message
is answered with one of:
  {"type": "state",  "locked": false, "bits": [...], ...}
  {"type": "locked", "detail": "..."}
  {"type": "error",  "detail": "..."}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ValidationError

from core.constants import GestureKind
from core.logger import get_logger
from pipeline.controller import DecoderController
from safety.exposure_guard import ExposureGuard, HostSignal

_log = get_logger()

# ── Static file path ──────────────────────────────────────────────────────────
_STATIC_DIR = Path(__file__).parent / "static"

# ── FastAPI app ───────────────────────────────────────────────────────────────
app = FastAPI(title="DotDecoder", version="1.0")
app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")

# ── Shared state ──────────────────────────────────────────────────────────────
_controller: Optional[DecoderController] = None
_guard: Optional[ExposureGuard] = None

_LOCKED_DETAIL = "network detected: switch the device to airplane mode"


# ── Request models ────────────────────────────────────────────────────────────

class GestureRequest(BaseModel):
    """One raw pointer / touch primitive."""

    kind: GestureKind
    # Passed through raw; the gesture controller ignores anything but an int in [0, 11].
    index: Any = None
    target: Any = None


class TextRequest(BaseModel):
    """Current contents of the word field."""

    value: str = ""


class HostRequest(BaseModel):
    """Lifecycle / network notification from the page."""

    signal: HostSignal


# ── Wiring ────────────────────────────────────────────────────────────────────

def wire(controller: DecoderController, guard: ExposureGuard) -> None:
    """Install the controller and guard the routes operate on."""
    global _controller, _guard
    _controller = controller
    _guard = guard
    _log.info("web", "controller_wired", {"locked": guard.locked})


def _state_message() -> Dict[str, Any]:
    assert _controller is not None and _guard is not None
    return {"type": "state", "locked": _guard.locked, **_controller.snapshot()}


def _apply(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply one client action and return the reply message.

    Raises:
        ValidationError: If the payload does not match the action's model.
        KeyError: If *action* is unknown.
    """
    assert _controller is not None and _guard is not None

    if action == "state":
        return _state_message()
    if action == "reset":
        _controller.reset_all(reason="user")
        return _state_message()
    if action == "host":
        req = HostRequest.model_validate(payload)
        _guard.notify(req.signal)
        return _state_message()
    if action == "gesture":
        req = GestureRequest.model_validate(payload)
        if _guard.locked:
            return {"type": "locked", "detail": _LOCKED_DETAIL}
        _controller.handle_gesture(req.kind, index=req.index, point=req.target)
        return _state_message()
    if action == "text":
        req = TextRequest.model_validate(payload)
        if _guard.locked:
            return {"type": "locked", "detail": _LOCKED_DETAIL}
        _controller.set_text(req.value)
        return _state_message()
    raise KeyError(action)


def _reply(msg: Dict[str, Any]) -> JSONResponse:
    status = 423 if msg["type"] == "locked" else 200
    return JSONResponse(msg, status_code=status)


def _not_ready() -> JSONResponse:
    return JSONResponse({"error": "controller not ready"}, status_code=503)


# ── Routes ────────────────────────────────────────────────────────────────────

@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the single-page dot board."""
    html_path = _STATIC_DIR / "index.html"
    return HTMLResponse(html_path.read_text(encoding="utf-8"))


@app.get("/health")
async def health() -> JSONResponse:
    ready = _controller is not None and _guard is not None
    return JSONResponse({
        "status": "ok" if ready else "controller_not_ready",
        "locked": _guard.locked if _guard is not None else True,
    })


@app.get("/state")
async def state() -> JSONResponse:
    if _controller is None:
        return _not_ready()
    return JSONResponse(_state_message())


@app.post("/gesture")
async def gesture(body: GestureRequest) -> JSONResponse:
    if _controller is None:
        return _not_ready()
    return _reply(_apply("gesture", body.model_dump()))


@app.post("/text")
async def text(body: TextRequest) -> JSONResponse:
    if _controller is None:
        return _not_ready()
    return _reply(_apply("text", body.model_dump()))


@app.post("/reset")
async def reset() -> JSONResponse:
    if _controller is None:
        return _not_ready()
    return _reply(_apply("reset", {}))


@app.post("/host")
async def host(body: HostRequest) -> JSONResponse:
    if _controller is None:
        return _not_ready()
    return _reply(_apply("host", body.model_dump()))


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket) -> None:
    await ws.accept()
    if _controller is None:
        await ws.send_text(json.dumps({"type": "error", "detail": "controller not ready"}))
        await ws.close()
        return

    await ws.send_text(json.dumps(_state_message()))
    _log.info("web", "ws_connected", {})

    try:
        while True:
            raw = await ws.receive_text()
            await ws.send_text(json.dumps(_handle_client_msg(raw)))
    except WebSocketDisconnect:
        pass
    finally:
        _log.info("web", "ws_disconnected", {})


def _handle_client_msg(raw: str) -> Dict[str, Any]:
    """Decode one WebSocket frame and apply it."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {"type": "error", "detail": "malformed JSON"}
    if not isinstance(data, dict):
        return {"type": "error", "detail": "expected a JSON object"}

    action = str(data.pop("action", ""))
    try:
        return _apply(action, data)
    except ValidationError as exc:
        return {"type": "error", "detail": exc.errors(include_url=False, include_context=False, include_input=False)}
    except KeyError:
        return {"type": "error", "detail": f"unknown action {action!r}"}


# ── Public launcher ───────────────────────────────────────────────────────────

def start_web_server(
    controller: DecoderController,
    guard: ExposureGuard,
    host: str = "127.0.0.1",
    port: int = 7860,
) -> None:
    """
    Wire the collaborators and start uvicorn in the current thread.

    Blocking.

    Args:
        controller: Board state owner.
        guard: Exposure guard sharing the controller's reset.
        host: Bind address.
        port: TCP port.
    """
    wire(controller, guard)

    import uvicorn  # type: ignore
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="warning",
        access_log=False,
    )
    server = uvicorn.Server(config)
    _log.info("web", "server_start", {"host": host, "port": port})
    server.run()
