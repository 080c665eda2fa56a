import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lifetracker import config, database
from lifetracker.routers import auth, boards, debug, diet, finance, habit_tracker, habits, health, smoking, tasks
from lifetracker.validation import first_error_message

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        database.ensure_indexes(database.db)
    else:
        logger.warning("DATABASE_URL / DATABASE_NAME not set, requests needing the database will fail")
    yield


# App setup
app = FastAPI(title="Life Tracker", version=config.APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": first_error_message(exc.errors())},
    )


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(auth.router)
app.include_router(boards.router)
app.include_router(tasks.router)
for router in finance.routers + diet.routers + health.routers:
    app.include_router(router)
app.include_router(habits.router)
app.include_router(habit_tracker.router)
app.include_router(smoking.router)
app.include_router(debug.router)


@app.get("/")
def read_root():
    return {"message": "Life tracker backend running"}


@app.get("/api/version")
def version():
    return {"version": config.APP_VERSION}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
