"""
Comment (tip) service.
"""
from typing import List, Tuple
from sqlalchemy.orm import Session, joinedload

from database.models import Comment, MissingPerson, NotificationType
from services.notification_service import NotificationService
from core.logger import logger

ANONYMOUS_NAME = "Anonymous"


class CommentService:
    """Service for case comments."""

    @staticmethod
    def list_for_case(db: Session, missing_person_id: int) -> List[Comment]:
        """Comments on a case, newest first."""
        return (
            db.query(Comment)
            .options(joinedload(Comment.user))
            .filter(Comment.missing_person_id == missing_person_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    @staticmethod
    def create_comment(
        db: Session,
        case: MissingPerson,
        author_id: int,
        text: str,
        is_anonymous: bool = False,
    ) -> Tuple[Comment, bool]:
        """
        Add a comment and notify the case reporter unless they wrote it.

        The author id is stored even for anonymous comments.

        Returns:
            Tuple of (comment, whether the reporter was notified)
        """
        comment = Comment(
            missing_person_id=case.id,
            user_id=author_id,
            comment=text.strip(),
            is_anonymous=bool(is_anonymous),
        )
        db.add(comment)
        db.flush()

        notified = False
        if case.reporter_id != author_id:
            NotificationService.notify(
                db,
                user_id=case.reporter_id,
                title="New Comment",
                message=f"Someone commented on the case: {case.full_name}",
                notification_type=NotificationType.COMMENT,
                missing_person_id=case.id,
            )
            notified = True

        db.commit()
        db.refresh(comment)
        logger.info(f"Comment {comment.id} on case {case.case_number} (reporter notified: {notified})")
        return comment, notified

    @staticmethod
    def to_dict(comment: Comment) -> dict:
        if comment.is_anonymous or comment.user is None:
            user_name = ANONYMOUS_NAME
        else:
            user_name = comment.user.full_name
        return {
            "id": comment.id,
            "missing_person_id": comment.missing_person_id,
            "user_id": None if comment.is_anonymous else comment.user_id,
            "comment": comment.comment,
            "is_anonymous": bool(comment.is_anonymous),
            "created_at": comment.created_at.isoformat() if comment.created_at else None,
            "user_name": user_name,
        }
