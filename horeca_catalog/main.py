from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.semconv.trace import SpanAttributes
from opentelemetry.trace import Status, StatusCode

from horeca_catalog.api.api import api_router
from horeca_catalog.config.database import close_mongo_client, ensure_indexes, get_database, ping_database
from horeca_catalog.config.logging import get_configured_logger, initialize_logging
from horeca_catalog.config.otel import instrument_fastapi_app, setup_telemetry, shutdown_telemetry
from horeca_catalog.core.config import settings

# --- 1. 로깅 설정 (가장 먼저) ---
initialize_logging()
logger = get_configured_logger(__name__)

# --- 2. OpenTelemetry 트레이싱 / PyMongo 계측 ---
setup_telemetry()

tracer = trace.get_tracer("horeca_catalog.main")


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """애플리케이션 생명주기 관리: 시작 시 인덱스 생성, 종료 시 클라이언트 정리"""
    with tracer.start_as_current_span("app.lifespan.startup") as startup_span:
        try:
            await ensure_indexes(get_database())
            startup_span.set_status(Status(StatusCode.OK))
            logger.info("Application startup sequence completed.")
        except Exception as e:
            # MongoDB 가 늦게 뜨는 경우에도 서비스는 올라오고 readiness 로 드러난다
            logger.error("Lifespan: index setup failed", extra={"error": str(e)}, exc_info=True)
            startup_span.record_exception(e)
            startup_span.set_status(Status(StatusCode.ERROR, "Index setup failed"))

    yield

    logger.info("Starting application shutdown sequence...")
    close_mongo_client()
    shutdown_telemetry()
    logger.info("Application shutdown sequence completed.")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="호레카 용품 카탈로그 / 견적 문의 API",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(api_router, prefix=settings.API_PREFIX)

instrument_fastapi_app(app)


@app.get("/health/live")
async def liveness():
    """Liveness probe - 컨테이너가 살아있는지 확인"""
    logger.debug("Liveness probe called")
    return {"status": "alive"}


@app.get("/health/ready")
async def readiness():
    """Readiness probe - MongoDB ping"""
    with tracer.start_as_current_span("app.health.readiness_check") as readiness_span:
        readiness_span.set_attribute(SpanAttributes.HTTP_METHOD, "GET")
        readiness_span.set_attribute(SpanAttributes.HTTP_ROUTE, "/health/ready")
        try:
            await ping_database()
        except Exception as e:
            logger.error("Readiness: MongoDB ping failed", extra={"error": str(e)}, exc_info=True)
            readiness_span.record_exception(e)
            readiness_span.set_status(Status(StatusCode.ERROR, "Readiness checks failed"))
            return JSONResponse(
                status_code=503,
                content={"status": "not ready", "details": {"mongodb": "failed"}, "errors": [f"MongoDB: {str(e)}"]},
            )

        readiness_span.set_status(Status(StatusCode.OK))
        return {"status": "ready", "details": {"mongodb": "connected"}}


@app.get("/")
async def read_root():
    """API 루트 엔드포인트"""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("horeca_catalog.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
