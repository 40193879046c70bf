from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from alerts import router as alerts_router
from applications import router as applications_router
from auth import router as auth_router
from bookmarklet import router as bookmarklet_router
from contacts import router as contacts_router
from core import config, db
from core.logger import get_logger, setup_logging
from coverletters import router as coverletters_router
from cron import router as cron_router
from followups import router as followups_router
from interviews import router as interviews_router
from matching import router as matching_router
from opportunities import router as opportunities_router
from profiles import router as profiles_router
from resumes import router as resumes_router
from settings import router as settings_router
from skills import router as skills_router
from sources import router as sources_router
from stats import router as stats_router

setup_logging(config.log_level())
logger = get_logger(__name__)

OPEN_CORS_PREFIX = "/bookmarklet"


class SplitCORSMiddleware:
    """
    Open CORS for the bookmarklet (it runs on any job board), configured
    origins for everything else.
    """

    def __init__(self, app: ASGIApp, *, allow_origins: list[str]) -> None:
        self.open = CORSMiddleware(
            app,
            allow_origins=["*"],
            allow_methods=["POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )
        self.restricted = CORSMiddleware(
            app,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(OPEN_CORS_PREFIX):
            await self.open(scope, receive, send)
        else:
            await self.restricted(scope, receive, send)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="job-tracker", lifespan=lifespan)

app.add_middleware(SplitCORSMiddleware, allow_origins=config.cors_allow_origins())


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


app.include_router(auth_router.router, tags=["auth"])
app.include_router(profiles_router.router, tags=["profile"])
app.include_router(settings_router.router, tags=["settings"])
app.include_router(applications_router.router, tags=["applications"])
app.include_router(opportunities_router.router, tags=["opportunities"])
app.include_router(matching_router.router, tags=["ai"])
app.include_router(sources_router.router, tags=["sources"])
app.include_router(interviews_router.router, tags=["interviews"])
app.include_router(followups_router.router, tags=["follow-ups"])
app.include_router(contacts_router.router, tags=["contacts"])
app.include_router(resumes_router.router, tags=["resumes"])
app.include_router(coverletters_router.router, tags=["cover-letters"])
app.include_router(skills_router.router, tags=["skills"])
app.include_router(alerts_router.router, tags=["alerts"])
app.include_router(stats_router.router, tags=["stats"])
app.include_router(bookmarklet_router.router, tags=["bookmarklet"])
app.include_router(cron_router.router, tags=["cron"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "job-tracker api"}
