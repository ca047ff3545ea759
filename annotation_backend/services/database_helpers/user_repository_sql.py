# /annotation_backend/services/database_helpers/user_repository_sql.py

"""
Raw SQLAlchemy queries for the User table, plus the dependency counts used to
decide whether a user may be hard-deleted.
"""

from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...db.models.annotation_models import Annotation, Evaluation
from ...db.models.mt_quality_models import MTQualityAssessment
from ...db.models.onboarding_models import LanguageProficiencyQuestion
from ...db.models.user_models import User


def _as_dicts(rows) -> List[Dict]:
    return [{c.name: getattr(obj, c.name) for c in obj.__table__.columns} for obj in rows]


class UserRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def add_user(self, record: Dict) -> User:
        """Creates a user. A duplicate email/username surfaces as IntegrityError after rollback."""
        new_user = User(**record)
        self.db.add(new_user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(new_user)
        return new_user

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.username) == username.lower()).first()

    def get_user_by_login(self, identifier: str) -> Optional[User]:
        """Looks a user up by email or username, case-insensitively."""
        lowered = identifier.strip().lower()
        return (
            self.db.query(User)
            .filter(or_(func.lower(User.email) == lowered, func.lower(User.username) == lowered))
            .first()
        )

    def list_users(
        self,
        skip: int = 0,
        limit: int = 100,
        role: Optional[str] = None,
        active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[User]:
        query = self.db.query(User)
        if role == "admin":
            query = query.filter(User.is_admin.is_(True))
        elif role == "evaluator":
            query = query.filter(User.is_evaluator.is_(True))
        elif role == "annotator":
            query = query.filter(User.is_admin.is_(False), User.is_evaluator.is_(False))
        if active is not None:
            query = query.filter(User.is_active.is_(active))
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(User.email).like(pattern),
                    func.lower(User.username).like(pattern),
                    func.lower(User.first_name).like(pattern),
                    func.lower(User.last_name).like(pattern),
                )
            )
        return query.order_by(User.id.asc()).offset(skip).limit(limit).all()

    def update_user(self, user: User, data: Dict) -> User:
        for key, value in data.items():
            setattr(user, key, value)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def count_dependencies(self, user_id: int) -> Dict[str, int]:
        """Counts the history records that reference a user."""
        return {
            "annotations": (
                self.db.query(func.count(Annotation.id))
                .filter(or_(Annotation.annotator_id == user_id, Annotation.deleted_by_id == user_id))
                .scalar() or 0
            ),
            "evaluations": self.db.query(func.count(Evaluation.id)).filter(Evaluation.evaluator_id == user_id).scalar() or 0,
            "assessments": (
                self.db.query(func.count(MTQualityAssessment.id))
                .filter(or_(MTQualityAssessment.requested_by_id == user_id, MTQualityAssessment.reviewed_by_id == user_id))
                .scalar() or 0
            ),
        }

    def delete_user(self, user: User) -> None:
        """Hard-deletes a user without history; their tests and answers go with them in one transaction."""
        self.db.query(LanguageProficiencyQuestion).filter(
            LanguageProficiencyQuestion.created_by_id == user.id
        ).update({"created_by_id": None}, synchronize_session=False)
        self.db.delete(user)
        self.db.commit()

    # --- Stats Helpers ---

    def get_users_as_dicts(self) -> List[Dict]:
        return _as_dicts(self.db.query(User).all())
