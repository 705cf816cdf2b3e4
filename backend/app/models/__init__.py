"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.team import Team, TeamMember
from app.models.project import Project, project_teams
from app.models.task import Task, Subtask, task_assignees
from app.models.comment import Comment, comment_mentions
from app.models.history import History
from app.models.notification import Notification
from app.models.useful_link import UsefulLink, useful_link_assignees

__all__ = [
    "User",
    "Team", "TeamMember",
    "Project", "project_teams",
    "Task", "Subtask", "task_assignees",
    "Comment", "comment_mentions",
    "History",
    "Notification",
    "UsefulLink", "useful_link_assignees",
]
