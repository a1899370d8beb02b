# 📄 phishsim/simulation.py – the simulation service (server side of the private channel)

import logging
from functools import lru_cache

from fastapi import FastAPI, Depends, HTTPException

from phishsim.config import settings
from phishsim.dispatcher import SendDispatcher, UnknownPattern, dispatch_message
from phishsim.schemas import ChannelMessage

logger = logging.getLogger(__name__)


@lru_cache
def get_dispatcher() -> SendDispatcher:
    return SendDispatcher.from_settings()


# ────────────── App ──────────────
app = FastAPI(title="Phishing Simulation Service")


@app.post("/messages")
def handle_message(msg: ChannelMessage, dispatcher: SendDispatcher = Depends(get_dispatcher)):
    try:
        return dispatch_message(dispatcher, msg.pattern, msg.data)
    except UnknownPattern:
        raise HTTPException(status_code=404, detail=f"No handler for pattern '{msg.pattern}'")


@app.get("/health")
def health(dispatcher: SendDispatcher = Depends(get_dispatcher)):
    return dispatcher.handle_health_check().to_wire()


# ────────────── CLI Entrypoint ──────────────
if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=settings.LOG_LEVEL)
    uvicorn.run("phishsim.simulation:app", host="0.0.0.0", port=3333)
