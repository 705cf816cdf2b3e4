"""FastAPI 애플리케이션 진입점. 미들웨어와 API 라우터를 등록합니다."""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import teams, projects, tasks, comments, history, notifications, exports, users, useful_links

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="팀 작업 관리 시스템",
    description="팀/프로젝트/작업 단위의 가시 범위, 통계 보고서, 변경 이력과 알림을 제공하는 백엔드",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(teams.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(comments.router)
app.include_router(history.router)
app.include_router(notifications.router)
app.include_router(exports.router)
app.include_router(users.router)
app.include_router(useful_links.router)


@app.on_event("startup")
def ensure_schema():
    # 누락된 테이블만 생성한다. 컬럼 변경은 별도 마이그레이션으로 처리한다.
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "팀 작업 관리 시스템"}
