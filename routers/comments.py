"""
Comment (tip) endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional

from auth.dependencies import TokenClaims, get_current_user, get_db_session
from services.case_service import CaseService
from services.comment_service import CommentService


router = APIRouter(prefix="/api/comments", tags=["comments"])


class CommentCreate(BaseModel):
    missing_person_id: Optional[int] = None
    comment: Optional[str] = None
    is_anonymous: bool = False


@router.get("")
async def list_comments(
    missing_person_id: Optional[int] = Query(None),
    db: Session = Depends(get_db_session)
):
    """
    Comments on a case, newest first.
    Public endpoint.
    """
    if missing_person_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing person ID is required"
        )
    comments = CommentService.list_for_case(db, missing_person_id)
    return {"data": [CommentService.to_dict(c) for c in comments]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    Leave a tip on a case. The reporter is notified unless they wrote it.
    """
    if payload.missing_person_id is None or not (payload.comment or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing person ID and comment are required"
        )

    case = CaseService.get_case(db, payload.missing_person_id)
    if case is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Missing person not found"
        )

    comment, _ = CommentService.create_comment(
        db,
        case,
        author_id=current_user.id,
        text=payload.comment,
        is_anonymous=payload.is_anonymous,
    )
    return {
        "message": "Comment added successfully",
        "data": CommentService.to_dict(comment),
    }
