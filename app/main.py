# app/main.py

import os
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.common.session_registry import SessionRegistry
from app.core.config import settings
from app.core.exceptions import StoreUnavailableError
from app.core.logger import logger
from app.db.base_class import Base
from app.db.session import SessionLocal, engine
from app.models import friendship, user  # noqa: F401  register tables on Base.metadata
from app.repositories.relationship_store import SqlRelationshipStore
from app.routers import friends, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")

    Base.metadata.create_all(bind=engine)
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    app.state.session_registry = SessionRegistry(ttl=timedelta(minutes=settings.SESSION_TTL_MINUTES))
    app.state.relationship_store = SqlRelationshipStore(SessionLocal)

    yield

    logger.info(f"Shutting down {settings.APP_NAME}, dropping {len(app.state.session_registry)} live sessions")
    app.state.session_registry.clear()


app = FastAPI(title="helloworld", description="Friends and accounts API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage is temporarily unavailable, try again"},
    )


app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(friends.router, prefix="/my-friends", tags=["friends"])


@app.get("/")
def read_root():
    return {"message": f"{settings.APP_NAME} API is running!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
