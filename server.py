#!/usr/bin/env python3
"""Virtual Things console - a local stand-in for the gateway"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from adapter import VirtualThingsAdapter
from config import AdapterConfig, load_settings
from errors import InvalidCredentials, InvalidPin, ReadOnlyViolation, UnknownAction, UnknownProperty
from gateway import Gateway
from logs import configure_logging, get_logger

logger = get_logger(__name__)


# ============================================================================
# Request models
# ============================================================================

class PropertyWrite(BaseModel):
    value: Any = None


class ActionRequest(BaseModel):
    input: Optional[Any] = None


class PinRequest(BaseModel):
    pin: str


class CredentialsRequest(BaseModel):
    username: str
    password: str


# ============================================================================
# Gateway side of the console
# ============================================================================

class ConsoleGateway(Gateway):
    """Turns adapter notifications into websocket messages."""

    def __init__(self):
        self._websockets: List[WebSocket] = []
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task = None

    def _push(self, message):
        self._queue.put_nowait(message)

    def property_changed(self, prop):
        self._push({"messageType": "propertyStatus", "id": prop.device.id,
                    "data": {prop.name: prop.value}})

    def event_notify(self, event):
        self._push({"messageType": "event", "id": event.device.id, "data": event.as_dict()})

    def action_notify(self, action):
        self._push({"messageType": "actionStatus", "id": action.device.id, "data": action.as_dict()})

    def attach(self, ws):
        self._websockets.append(ws)

    def detach(self, ws):
        if ws in self._websockets:
            self._websockets.remove(ws)

    def start(self):
        if self._task is None:
            self._task = asyncio.create_task(self._broadcast_loop())

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

    async def _broadcast_loop(self):
        while True:
            message = await self._queue.get()
            dead = []
            for ws in self._websockets:
                try:
                    await ws.send_json(message)
                except (WebSocketDisconnect, RuntimeError):
                    dead.append(ws)
            for ws in dead:
                self.detach(ws)


class Console:
    def __init__(self):
        self.gateway: Optional[ConsoleGateway] = None
        self.adapter: Optional[VirtualThingsAdapter] = None

    def open(self, adapter_config=None):
        settings = load_settings()
        self.gateway = ConsoleGateway()
        self.gateway.start()
        self.adapter = VirtualThingsAdapter(
            gateway=self.gateway,
            adapter_config=adapter_config or AdapterConfig(),
            settings=settings,
        )
        self.adapter.start()

    async def close(self):
        if self.adapter is not None:
            self.adapter.unload()
            self.adapter = None
        if self.gateway is not None:
            await self.gateway.stop()
            self.gateway = None

    def device(self, device_id):
        dev = self.adapter.get_device(device_id) if self.adapter else None
        if dev is None:
            raise HTTPException(status_code=404, detail="Thing not found")
        return dev


console = Console()


@asynccontextmanager
async def lifespan(app: FastAPI):
    console.open()
    logger.info("console_started", things=len(console.adapter.devices))
    yield
    await console.close()
    logger.info("console_stopped")


app = FastAPI(
    title="Virtual Things Console",
    description="Drive simulated smart-home things without a gateway",
    version="1.0.0",
    lifespan=lifespan,
)


# ============================================================================
# Routes
# ============================================================================

@app.get("/api/things")
async def get_things():
    return {"things": [d.as_dict() for d in console.adapter.devices.values()]}


@app.get("/api/things/{device_id}")
async def get_thing(device_id: str):
    return console.device(device_id).as_dict()


@app.delete("/api/things/{device_id}")
async def remove_thing(device_id: str):
    console.device(device_id)
    console.adapter.remove_thing(device_id)
    return {"status": "ok"}


@app.get("/api/things/{device_id}/properties")
async def get_properties(device_id: str) -> Dict[str, Any]:
    dev = console.device(device_id)
    return {name: p.read() for name, p in dev.properties.items()}


@app.get("/api/things/{device_id}/properties/{name}")
async def get_property(device_id: str, name: str):
    dev = console.device(device_id)
    try:
        return {name: dev.get_property_value(name)}
    except UnknownProperty:
        raise HTTPException(status_code=404, detail="Property not found")


@app.put("/api/things/{device_id}/properties/{name}")
async def put_property(device_id: str, name: str, body: PropertyWrite):
    dev = console.device(device_id)
    try:
        value = dev.set_property(name, body.value)
    except UnknownProperty:
        raise HTTPException(status_code=404, detail="Property not found")
    except ReadOnlyViolation as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {name: value}


@app.post("/api/things/{device_id}/actions/{name}", status_code=201)
async def post_action(device_id: str, name: str, body: ActionRequest):
    dev = console.device(device_id)
    try:
        dev.perform_action(name, body.input)
    except UnknownAction:
        raise HTTPException(status_code=404, detail="Action not found")
    return {"status": "pending", "action": name}


@app.post("/api/pairing")
async def start_pairing():
    console.adapter.start_pairing()
    return {"things": len(console.adapter.devices)}


@app.post("/api/things/{device_id}/pin")
async def set_pin(device_id: str, body: PinRequest):
    try:
        console.adapter.set_pin(device_id, body.pin)
    except InvalidPin as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"status": "ok"}


@app.post("/api/things/{device_id}/credentials")
async def set_credentials(device_id: str, body: CredentialsRequest):
    try:
        console.adapter.set_credentials(device_id, body.username, body.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"status": "ok"}


# ============================================================================
# WebSocket
# ============================================================================

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    console.gateway.attach(websocket)
    try:
        await websocket.send_json({
            "messageType": "things",
            "data": [d.as_dict() for d in console.adapter.devices.values()],
        })
        while True:
            data = await websocket.receive_json()
            if data.get("messageType") == "setProperty":
                dev = console.adapter.get_device(data.get("id"))
                if dev is None:
                    continue
                for name, value in (data.get("data") or {}).items():
                    try:
                        dev.set_property(name, value)
                    except (UnknownProperty, ReadOnlyViolation) as e:
                        await websocket.send_json({"messageType": "error", "data": {"message": str(e)}})
    except WebSocketDisconnect:
        pass
    finally:
        console.gateway.detach(websocket)


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    uvicorn.run(app, host="0.0.0.0", port=8000)
