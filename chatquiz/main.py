"""
Chat Quiz API - Main Application
Seeded multiple-choice questions about an imported two-person conversation
FILE: main.py
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import time

from chatquiz.core.config import settings
from chatquiz.db.json_store import JsonMessageStore
from chatquiz.db.message_store import MessageStore, MongoMessageStore
from chatquiz.db.mongodb import connect_to_mongo, close_mongo_connection, get_database
from chatquiz.api.question import router as question_router
from chatquiz.services.llm_client import health_check as llm_health_check
from chatquiz.services.question_generator import build_question_generator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def open_message_store() -> MessageStore:
    """Open the configured message store backend"""
    if settings.store_backend == "json":
        return JsonMessageStore.from_file(settings.corpus_file)

    await connect_to_mongo()
    store = MongoMessageStore(
        get_database(),
        messages_collection=settings.messages_collection,
        participants_collection=settings.participants_collection
    )
    await store.ensure_indexes()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("🚀 Starting Chat Quiz API...")

    try:
        store = await open_message_store()
        logger.info(f"✓ Message store ready ({settings.store_backend})")

        app.state.store = store
        app.state.question_generator = await build_question_generator(store, settings)

        logger.info("✓ Question generator initialized")

    except Exception as e:
        logger.error(f"❌ Startup error: {e}")
        await close_mongo_connection()
        raise

    yield

    # Shutdown
    logger.info("🛑 Shutting down Chat Quiz API...")
    await close_mongo_connection()
    logger.info("✓ Cleanup complete")


app = FastAPI(
    title="Chat Quiz API",
    description="""
    Multiple-choice questions about a two-person conversation.

    ## Features
    - **Seeded questions**: The same seed gives the same question
    - **Variants**: continue, duration, next, platform, react, when, who
    - **Storage**: MongoDB or a JSON corpus export

    ## Endpoints
    - **Question**: `/api/question?seed=...` - Generate a question
    - **Seed**: `/api/seed` - Get a fresh shareable seed
    - **Metadata**: `/api/metadata` - Corpus snapshot used for generation
    - **Variants**: `/api/variants` - Variants in use and the ones left out
    - **Health**: `/health` - Overall service health check
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers"""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000  # Convert to ms
    response.headers["X-Process-Time-Ms"] = str(round(process_time, 2))
    return response


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    logger.info(f"📨 {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(
        f"📤 {request.method} {request.url.path} - "
        f"Status: {response.status_code}"
    )
    return response


# ==================== INCLUDE ROUTERS ====================

app.include_router(question_router, tags=["Questions"])


# ==================== ROOT ENDPOINTS ====================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Chat Quiz API",
        "version": "1.0.0",
        "status": "operational",
        "endpoints": {
            "docs": "/docs",
            "redoc": "/redoc",
            "question": "/api/question",
            "seed": "/api/seed",
            "metadata": "/api/metadata",
            "variants": "/api/variants",
            "health": "/health"
        }
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check for the message store and the alternative provider

    Returns:
        Health status for all components, 503 when the store is unreachable
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "components": {}
    }

    overall_healthy = True

    # Check message store
    store = getattr(request.app.state, "store", None)
    try:
        if store is not None and await store.ping():
            health_status["components"]["store"] = {
                "status": "healthy",
                "backend": settings.store_backend
            }
            logger.debug("✓ Store health check passed")
        else:
            overall_healthy = False
            health_status["components"]["store"] = {
                "status": "unhealthy",
                "message": "Store not reachable"
            }
            logger.error("❌ Store health check failed")

    except Exception as e:
        overall_healthy = False
        health_status["components"]["store"] = {
            "status": "unhealthy",
            "message": str(e)
        }
        logger.error(f"❌ Store health check failed: {e}")

    # Check alternative provider (optional component)
    if settings.llm_provider:
        health_status["components"]["llm"] = llm_health_check(settings.llm_provider)
    else:
        health_status["components"]["llm"] = {"status": "disabled"}

    # Set overall status
    health_status["status"] = "healthy" if overall_healthy else "degraded"

    # Add API info
    health_status["api"] = {
        "title": app.title,
        "version": app.version,
        "status": "operational"
    }

    status_code = 200 if overall_healthy else 503

    return JSONResponse(
        status_code=status_code,
        content=health_status
    )


# ==================== RUN APPLICATION ====================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chatquiz.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info"
    )
