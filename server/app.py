"""
app.py: FastAPI application entry point.
HTTP + WebSocket surface for the vehicle-link QKD session.

Provides:
  - REST operations on the single session (start secure / unsafe, renew,
    beam intersection, reset) and read access to its state and log
  - Narrative analysis of the latest event
  - A WebSocket stream of beam, hostile-actor, log and state events

Session operations are ``async def`` endpoints so they run on the event
loop one at a time; the analysis call runs in the threadpool and never
holds up the session.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

import config
from controller.intersection import IntersectionGate
from controller.session_controller import SessionController
from services.narrative import NarrativeClient

from .models import (
    AnalysisResponse,
    LogResponse,
    OperationRequest,
    OperationResponse,
    SessionStateResponse,
)
from .websocket_manager import ConnectionManager, EventRecorder

logger = logging.getLogger(__name__)


def create_app(
    controller: Optional[SessionController] = None,
    narrative: Optional[NarrativeClient] = None,
    intersection_cooldown: float = config.INTERSECTION_COOLDOWN,
) -> FastAPI:
    recorder = EventRecorder()
    if controller is None:
        controller = SessionController(
            sink=recorder, observers=[recorder], photon_count=config.PHOTON_COUNT,
        )
    else:
        controller.add_observer(recorder)
        controller.set_sink(recorder)
    ws_manager = ConnectionManager()
    gate = IntersectionGate(controller.auto_renew, cooldown=intersection_cooldown)
    narrative = narrative or NarrativeClient()

    app = FastAPI(
        title="Vehicle-Link QKD Simulator",
        description="BB84 key establishment between two vehicles under drone interference",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.controller = controller
    app.state.recorder = recorder
    app.state.ws_manager = ws_manager
    app.state.gate = gate
    app.state.narrative = narrative

    # Start the log the same way a reset does
    controller.reset()
    recorder.drain()

    async def _finish(request: Request, accepted: bool) -> OperationResponse:
        state = request.app.state
        await state.ws_manager.broadcast_all(state.recorder.drain())
        return OperationResponse(
            accepted=accepted,
            state=SessionStateResponse.from_state(state.controller.state),
        )

    # ================================================================= #
    #  SESSION ROUTES                                                     #
    # ================================================================= #

    @app.get("/api/session", response_model=SessionStateResponse)
    async def get_session(request: Request):
        return SessionStateResponse.from_state(request.app.state.controller.state)

    @app.get("/api/session/log", response_model=LogResponse)
    async def get_log(request: Request):
        return LogResponse(lines=request.app.state.controller.log)

    @app.post("/api/session/secure", response_model=OperationResponse)
    async def start_secure(body: OperationRequest, request: Request):
        accepted = request.app.state.controller.start_secure(body.eve_active)
        return await _finish(request, accepted)

    @app.post("/api/session/unsafe", response_model=OperationResponse)
    async def start_unsafe(body: OperationRequest, request: Request):
        accepted = request.app.state.controller.start_unsafe(body.eve_active)
        return await _finish(request, accepted)

    @app.post("/api/session/renew", response_model=OperationResponse)
    async def renew(body: OperationRequest, request: Request):
        accepted = request.app.state.controller.renew(body.eve_active)
        return await _finish(request, accepted)

    @app.post("/api/session/intersection", response_model=OperationResponse)
    async def beam_intersection(request: Request):
        """Intersection signal from a renderer; cooldown-gated, then auto-renew."""
        accepted = request.app.state.gate.signal()
        return await _finish(request, accepted)

    @app.post("/api/session/reset", response_model=OperationResponse)
    async def reset(request: Request):
        request.app.state.controller.reset()
        request.app.state.gate.reset()
        return await _finish(request, True)

    # ================================================================= #
    #  ANALYSIS                                                           #
    # ================================================================= #

    @app.post("/api/analysis", response_model=AnalysisResponse)
    def analyse(request: Request):
        last_event = request.app.state.controller.state.last_event
        text = request.app.state.narrative.explain(last_event)
        return AnalysisResponse(
            event_type=last_event.type.value if last_event else None,
            text=text,
        )

    # ================================================================= #
    #  WEBSOCKET                                                          #
    # ================================================================= #

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        manager = websocket.app.state.ws_manager
        client_id = await manager.connect(websocket)
        await manager.send_personal(
            client_id,
            manager.make_event("log_snapshot", {"lines": websocket.app.state.controller.log}),
        )
        try:
            while True:
                data = await websocket.receive_json()
                msg_type = data.get("type", "")

                if msg_type == "intersection":
                    websocket.app.state.gate.signal()
                    await manager.broadcast_all(websocket.app.state.recorder.drain())

                elif msg_type == "ping":
                    await manager.send_personal(client_id, manager.make_event("pong"))

        except WebSocketDisconnect:
            manager.disconnect(client_id)

    # ================================================================= #
    #  HEALTH                                                             #
    # ================================================================= #

    @app.get("/api/health")
    async def health(request: Request):
        state = request.app.state
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "websocket_clients": len(state.ws_manager.get_clients()),
            "phase": state.controller.state.connection_phase.value,
            "narrative_configured": state.narrative.configured,
        }

    return app


app = create_app()


# ===================================================================== #
#  RUN                                                                    #
# ===================================================================== #

def main() -> None:
    import uvicorn
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    uvicorn.run("server.app:app", host=config.SERVER_HOST, port=config.SERVER_PORT)


if __name__ == "__main__":
    main()
