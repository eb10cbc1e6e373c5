"""Mock temperature device serving the same endpoints as the ESP32 firmware."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from device.datalog import DataLog, build_default_datalog
from logging_config import configure_logging

logger = logging.getLogger(__name__)

ReadingSource = Callable[[], float]


@dataclass
class NetworkConfig:
    """Wi-Fi credentials the device would keep in flash."""

    ssid: Optional[str] = "sensor-net"
    password: Optional[str] = field(default="changeme", repr=False)

    def reset(self) -> None:
        self.ssid = None
        self.password = None


class RandomWalk:
    """Slowly drifting temperature readings."""

    def __init__(self, start: float = 21.0, step: float = 0.2, seed: Optional[int] = None) -> None:
        self._value = start
        self._step = step
        self._random = random.Random(seed)

    def __call__(self) -> float:
        self._value += self._random.uniform(-self._step, self._step)
        return self._value


def create_device_app(
    datalog: Optional[DataLog] = None,
    network: Optional[NetworkConfig] = None,
    readings: Optional[ReadingSource] = None,
    interval: float = 1.0,
) -> FastAPI:
    configure_logging()
    log = datalog if datalog is not None else build_default_datalog()
    config = network if network is not None else NetworkConfig()
    source = readings if readings is not None else RandomWalk()

    app = FastAPI(
        title="Mock Temperature Device",
        description="Local stand-in for the sensor firmware's web endpoints.",
        version="0.1.0",
    )
    app.state.datalog = log
    app.state.network = config

    @app.get("/getData")
    async def get_data() -> dict:
        return log.to_payload()

    @app.get("/mockData.json")
    async def mock_data() -> dict:
        return log.to_payload()

    @app.get("/deleteDataLog")
    async def delete_data_log() -> dict[str, object]:
        removed = log.clear()
        logger.info("Data log cleared", extra={"sample_count": removed})
        return {"status": "ok", "removed": removed}

    @app.get("/deleteNetwork")
    async def delete_network() -> dict[str, str]:
        config.reset()
        logger.info("Network configuration cleared")
        return {"status": "ok"}

    @app.websocket("/wsden")
    async def live_readings(websocket: WebSocket) -> None:
        await websocket.accept()

        async def push_readings() -> None:
            while True:
                await websocket.send_text(f"{source():.2f}")
                await asyncio.sleep(interval)

        sender = asyncio.create_task(push_readings())
        try:
            # Clients never send; receiving only surfaces the disconnect.
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Live client disconnected")
        finally:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)

    return app


app = create_device_app()
