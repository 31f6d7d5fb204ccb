"""
Volleyball Club Manager - FastAPI 웹 서버

선수, 팀, 출석, 코치, 클럽 설정 API (/api)
데이터 소스: STORE_BACKEND (memory | supabase)
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.config import get_settings
from app.auth.router import router as auth_router
from app.club.errors import ClubError, TransportError
from app.club.router import router as club_router

settings = get_settings()

# FastAPI 앱
app = FastAPI(
    title="Volleyball Club Manager",
    description="배구 클럽 선수/팀/출석 관리 API",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(club_router)


@app.exception_handler(ClubError)
async def club_error_handler(request: Request, exc: ClubError):
    """도메인 오류 -> HTTP 상태 코드"""
    if isinstance(exc, TransportError):
        logger.error(f"{request.method} {request.url.path}: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.kind} {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ==================== API Endpoints ====================

@app.on_event("startup")
async def startup_event():
    """서버 시작"""
    logger.info(f"Club manager started (store: {settings.STORE_BACKEND})")


@app.on_event("shutdown")
async def shutdown_event():
    """서버 종료 시 정리"""
    logger.info("Club manager stopped")


@app.get("/api/status")
async def api_status():
    """서버 상태"""
    return {
        "status": "ok",
        "store": settings.STORE_BACKEND,
    }


# ==================== 서버 실행 ====================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.server:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info"
    )
