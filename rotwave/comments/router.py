"""Comment API endpoints.

| Method | Path                                     |
|--------|------------------------------------------|
| GET    | /comments/{content_id}                   |
| POST   | /comments                                |
| DELETE | /comments/{comment_id}                   |
| POST   | /comments/reply                          |
| DELETE | /comments/reply/{comment_id}/{reply_id}  |
"""

from fastapi import APIRouter, status

from .dependencies import CommentServiceDep, handle_comment_error
from .schemas import (
    CommentResponse,
    CreateCommentRequest,
    CreateReplyRequest,
    DeleteCommentResponse,
    DeleteReplyResponse,
)
from .service import CommentError


router = APIRouter(prefix="/comments", tags=["comments"])


@router.get(
    "/{content_id}",
    response_model=list[CommentResponse],
    summary="List comments for content",
)
async def list_comments(
    content_id: str,
    comment_service: CommentServiceDep,
) -> list[CommentResponse]:
    """Get all comments for a content item, newest first."""
    try:
        comments = await comment_service.list_comments(content_id)
    except CommentError as e:
        raise handle_comment_error(e) from e
    return [CommentResponse.from_comment(c) for c in comments]


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
) -> CommentResponse:
    """Create a new comment on a content item."""
    try:
        comment = await comment_service.create_comment(
            content_id=data.content_id,
            text=data.text,
            email=data.email,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e
    return CommentResponse.from_comment(comment)


@router.post(
    "/reply",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add reply",
)
async def add_reply(
    data: CreateReplyRequest,
    comment_service: CommentServiceDep,
) -> CommentResponse:
    """Append a reply to a comment and return the updated comment."""
    try:
        comment = await comment_service.add_reply(
            parent_comment_id=data.parent_comment_id,
            text=data.text,
            email=data.email,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e
    return CommentResponse.from_comment(comment)


@router.delete(
    "/reply/{comment_id}/{reply_id}",
    response_model=DeleteReplyResponse,
    summary="Delete reply",
)
async def delete_reply(
    comment_id: str,
    reply_id: str,
    comment_service: CommentServiceDep,
) -> DeleteReplyResponse:
    """Remove one reply from a comment."""
    try:
        comment = await comment_service.delete_reply(comment_id, reply_id)
    except CommentError as e:
        raise handle_comment_error(e) from e
    return DeleteReplyResponse(comment=CommentResponse.from_comment(comment))


@router.delete(
    "/{comment_id}",
    response_model=DeleteCommentResponse,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: str,
    comment_service: CommentServiceDep,
) -> DeleteCommentResponse:
    """Delete a comment together with all of its replies."""
    try:
        deleted = await comment_service.delete_comment(comment_id)
    except CommentError as e:
        raise handle_comment_error(e) from e
    return DeleteCommentResponse(deleted_comment=CommentResponse.from_comment(deleted))
