from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy import text
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from dealerops.api import auth, commissions, customers, leads, sales, trade_ins, users, vehicles
from dealerops.core.config import settings
from dealerops.core.exceptions import DealerOpsError, ValidationError
from dealerops.core.logging_config import configure_logging
from dealerops.core.redis import init_redis, close_redis, ping_redis
from dealerops.core.metrics import request_count, request_duration, db_connected, redis_connected, get_metrics_text
from dealerops.db.session import engine
from dealerops.models import audit, customer, lead, sale, trade_in, user, vehicle  # noqa: F401
from dealerops.models.base import Base
import time
import logging

configure_logging()
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status = 500
        
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")
    
    logger.info("Initializing Redis connection...")
    try:
        await init_redis()
        redis_connected.set(1)
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        redis_connected.set(0)
    
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if settings.DB_CREATE_ALL:
                await conn.run_sync(Base.metadata.create_all)
                logger.info("Database tables created")
        db_connected.set(1)
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        db_connected.set(0)
    
    yield
    
    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(auth.router)
app.include_router(leads.router)
app.include_router(customers.router)
app.include_router(vehicles.router)
app.include_router(sales.router)
app.include_router(trade_ins.router)
app.include_router(users.router)
app.include_router(commissions.router)


@app.exception_handler(DealerOpsError)
async def dealerops_error_handler(request: Request, exc: DealerOpsError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": ValidationError.kind, "detail": "Invalid request", "errors": errors},
    )


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if await ping_redis() else "disconnected",
        }
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
