from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import os
import logging
from dotenv import load_dotenv

from middleware.security import SecurityHeadersMiddleware, HTTPSRedirectMiddleware, resolve_cors_configuration
from core.db import database, ensure_indexes
from core.exceptions import TrueFitError
from api.auth import router as auth_router
from api.users import router as users_router
from api.forum import router as forum_router
from api.classes import router as classes_router
from api.applications import router as applications_router
from api.payments import router as payments_router
from api.reviews import router as reviews_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TrueFit API")

# HTTPS redirect (only in production)
if os.getenv("ENVIRONMENT") == "production":
    app.add_middleware(HTTPSRedirectMiddleware)

app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware - added last so it runs first and answers preflight requests
app.add_middleware(CORSMiddleware, **resolve_cors_configuration())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(TrueFitError)
async def truefit_exception_handler(request: Request, exc: TrueFitError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} failed: {exc.message} {exc.context}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.on_event("startup")
async def startup_initialization():
    database.connect()
    try:
        await ensure_indexes(database.db)
    except Exception as e:
        logger.warning(f"⚠️ Failed to create MongoDB indexes: {e}")
    logger.info("🎉 Startup initialization completed")


@app.on_event("shutdown")
async def shutdown():
    database.close()


app.include_router(auth_router)
app.include_router(users_router, tags=["users"])
app.include_router(forum_router, tags=["forum"])
app.include_router(classes_router, tags=["classes"])
app.include_router(applications_router, tags=["applications"])
app.include_router(payments_router, tags=["payments"])
app.include_router(reviews_router, tags=["reviews"])


@app.get("/")
def read_root():
    return PlainTextResponse("Hello from True Fit Server...")


@app.get("/health")
async def health():
    if await database.ping():
        return {"status": "ok", "database": "connected"}
    return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
