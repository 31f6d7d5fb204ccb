"""
배구 클럽 관리 서버 메인
"""
import sys

import uvicorn
from loguru import logger

from app.config import get_settings


def configure_logging(level: str = "INFO"):
    """로깅 설정"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level
    )
    logger.add(
        "logs/club_{time:YYYY-MM-DD}.log",
        rotation="1 day",
        retention="30 days",
        level="DEBUG"
    )


def main():
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Starting club manager on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        "app.server:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
