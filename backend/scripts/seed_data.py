"""Seed the database with sample teams, projects and tasks."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime, timedelta
from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.team import Team, TeamMember
from app.models.project import Project
from app.models.task import Task, Subtask
from app.models.useful_link import UsefulLink


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(email="root@company.com", first_name="시스템", last_name="관리자", role="superadmin"),
            User(email="kim.admin@company.com", first_name="철수", last_name="김", role="admin"),
            User(email="lee.dev@company.com", first_name="영희", last_name="이", role="member"),
            User(email="park.dev@company.com", first_name="민준", last_name="박", role="member"),
            User(email="choi.design@company.com", first_name="수연", last_name="최", role="member"),
        ]
        db.add_all(users)
        db.flush()
        root, admin, lee, park, choi = users

        platform = Team(name="플랫폼팀", description="백엔드/인프라", created_by=admin.user_id)
        platform.members = [
            TeamMember(user_id=admin.user_id, role="admin"),
            TeamMember(user_id=lee.user_id, role="member"),
            TeamMember(user_id=park.user_id, role="member"),
        ]
        design = Team(name="디자인팀", description="UX/UI", color="#F59E0B", created_by=admin.user_id)
        design.members = [
            TeamMember(user_id=admin.user_id, role="admin"),
            TeamMember(user_id=choi.user_id, role="admin"),
        ]
        db.add_all([platform, design])
        db.flush()

        portal = Project(
            name="고객 포털 개편",
            description="플랫폼팀과 디자인팀 공동 프로젝트",
            priority="high",
            start_date=date.today(),
            end_date=date.today() + timedelta(days=60),
            created_by=admin.user_id,
        )
        portal.tags = ["portal", "2026"]
        portal.teams = [platform, design]
        # 구 스키마(단일 팀 참조)로 만들어진 프로젝트
        infra = Project(name="모니터링 정비", team_id=platform.team_id, created_by=admin.user_id)
        db.add_all([portal, infra])
        db.flush()

        login = Task(
            project_id=portal.project_id,
            title="로그인 화면 개선",
            status="in_progress",
            priority="urgent",
            due_date=datetime.now() + timedelta(days=3),
            created_by=admin.user_id,
        )
        login.assignees = [lee, choi]
        login.subtasks = [
            Subtask(title="시안 검토", is_completed=True),
            Subtask(title="API 연동"),
        ]
        alerts = Task(
            project_id=infra.project_id,
            title="알림 규칙 정리",
            priority="medium",
            due_date=datetime.now() - timedelta(days=2),
            created_by=lee.user_id,
        )
        alerts.assignees = [park]
        db.add_all([login, alerts])

        wiki = UsefulLink(title="사내 위키", url="https://wiki.company.com", created_by=admin.user_id)
        wiki.assignees = [lee, park, choi]
        db.add(wiki)

        db.commit()
        print("Seed data created successfully.")
        print(f"  Users: {len(users)} (superadmin: {root.email})")
        print("  Teams: 2, Projects: 2, Tasks: 2, Links: 1")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
