"""FastAPI 애플리케이션 메인 파일"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from cj_bridge.adapters.persistence.models import init_models
from cj_bridge.app.di import get_engine
from cj_bridge.app.routes import cj, health
from cj_bridge.shared.config import get_settings
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def create_app() -> FastAPI:
    """FastAPI 애플리케이션 생성"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """애플리케이션 생명주기 관리"""
        logger.info("CJ 연동 서비스 시작")

        engine = get_engine()
        await init_models(engine)
        logger.info("설정 저장소 준비 완료")

        yield

        await engine.dispose()
        logger.info("CJ 연동 서비스 종료")

    app = FastAPI(
        title="CJ Bridge",
        description="CJ Dropshipping 카탈로그 / 재고 / 배송비 연동 API",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS 미들웨어
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 실제 운영시 특정 도메인만 허용
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_router = APIRouter(prefix="/api/v1")
    api_router.include_router(health.router, tags=["health"])
    api_router.include_router(cj.router, prefix="/cj", tags=["cj"])

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return {
            "message": "CJ Bridge API 서버",
            "docs": "/docs",
            "health": "/api/v1/health"
        }

    return app


# 애플리케이션 인스턴스
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cj_bridge.app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower()
    )
