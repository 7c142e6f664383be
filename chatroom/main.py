# chatroom/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, Header, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from . import config
from . import messages, participants
from .database import async_session, engine, init_db
from .errors import ChatError, NotFoundError, StoreError
from .observability import setup_logging
from .store import ChatStore
from .sweeper import LivenessSweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    try:
        await init_db()
        logger.info("Database ready")
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database initialization failed: %s", exc)

    store = ChatStore(async_session)
    app.state.store = store

    # fresh room on every boot
    if config.RESET_PARTICIPANTS_ON_STARTUP:
        try:
            cleared = await store.clear_participants()
            logger.info("Cleared %d participants from previous run", cleared)
        except StoreError as exc:
            logger.error("Could not reset participants: %s", exc.message)

    sweeper = LivenessSweeper(
        store,
        interval=config.SWEEP_INTERVAL_SECONDS,
        ttl=config.PARTICIPANT_TTL_SECONDS,
    )
    sweeper.start()
    app.state.sweeper = sweeper
    yield
    await sweeper.stop()
    await engine.dispose()


app = FastAPI(title="Chat Room API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Dependency for endpoints
def get_store(request: Request) -> ChatStore:
    return request.app.state.store


class ParticipantIn(BaseModel):
    name: str


class MessageIn(BaseModel):
    to: str
    text: str
    type: str


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError):
    log = logger.error if exc.http_status >= 500 else logger.info
    log("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                    }
                    for e in exc.errors()
                ],
            }
        },
    )


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}},
    )


@app.post("/participants", status_code=status.HTTP_201_CREATED)
async def create_participant(body: ParticipantIn, store: ChatStore = Depends(get_store)):
    participant = await participants.register(store, body.name)
    return participant.to_public()


@app.get("/participants")
async def get_participants(store: ChatStore = Depends(get_store)):
    return [p.to_public() for p in await participants.list_participants(store)]


@app.post("/messages", status_code=status.HTTP_201_CREATED)
async def create_message(
    body: MessageIn,
    user: Optional[str] = Header(None),
    store: ChatStore = Depends(get_store),
):
    try:
        message = await messages.post(store, user, body.to, body.text, body.type)
    except NotFoundError as exc:
        # unknown sender is unprocessable here, not 404
        return JSONResponse(status_code=422, content=exc.to_response())
    return message.to_public()


@app.get("/messages")
async def get_messages(
    limit: Optional[str] = None,
    user: Optional[str] = Header(None),
    store: ChatStore = Depends(get_store),
):
    return [m.to_public() for m in await messages.list_messages(store, user, limit)]


@app.post("/status")
async def post_status(user: Optional[str] = Header(None), store: ChatStore = Depends(get_store)):
    await participants.heartbeat(store, user)
    return Response(status_code=status.HTTP_200_OK)


def run():
    import uvicorn

    uvicorn.run("chatroom.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
