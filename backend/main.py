import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import ApiError

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Philly Sports Hub API",
    description="Philadelphia schedules, scores, standings and odds, plus the fan coin ledger",
    version="1.0.0",
)

# Read CORS configuration from environment
cors_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
if cors_origins.strip() == "*":
    allow_origins = ["*"]
else:
    allow_origins = [o.strip() for o in cors_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR ENVELOPE
# ============================================================================
#
# Every failure renders as {"error": "<message>", ...}.
#

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        message = "Method not allowed"
    elif exc.status_code == 404 and exc.detail == "Not Found":
        message = "Not found"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Import routers
from routes.schedule_routes import router as schedule_router
from routes.sportsdata_routes import router as sportsdata_router
from routes.game_routes import router as game_router
from routes.standings_routes import router as standings_router
from routes.predictions_routes import router as predictions_router
from routes.coins_routes import router as coins_router
from routes.tips_routes import router as tips_router
from routes.content_routes import router as content_router
from routes.webhook_routes import router as webhook_router

from db.mongo import get_db

app.include_router(schedule_router)
app.include_router(sportsdata_router)
app.include_router(game_router)
app.include_router(standings_router)
app.include_router(predictions_router)
app.include_router(coins_router)
app.include_router(tips_router)
app.include_router(content_router)
app.include_router(webhook_router)


@app.on_event("startup")
async def startup_event():
    """Initialize database indexes on startup"""
    from db.mongo import ensure_indexes
    try:
        ensure_indexes()
    except Exception as e:
        # Provider endpoints keep working without the database
        logger.error(f"Could not ensure database indexes: {e}")


@app.get("/")
def root():
    return {
        "status": "ok",
        "service": "Philly Sports Hub API",
        "version": "1.0.0",
    }


@app.get("/health")
def health_check(db: Database = Depends(get_db)):
    """Health check for load balancers"""
    try:
        db.command("ping")
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        return {"status": "unhealthy", "database": "disconnected", "error": str(e)}
