"""FastAPI dependencies for the comment API."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import CommentError, CommentService, InvalidInputError


async def get_comment_service(request: Request) -> CommentService:
    """Get comment service from app state.

    Raises:
        HTTPException: 503 when the service was not initialized.
    """
    service = getattr(request.app.state, "comment_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment service not available",
        )
    return service


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


STATUS_MAP = {
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "comment_not_found": status.HTTP_404_NOT_FOUND,
    "reply_not_found": status.HTTP_404_NOT_FOUND,
    "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "store_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def handle_comment_error(error: CommentError) -> HTTPException:
    """Convert comment errors to HTTP exceptions.

    Validation details ride along in ``detail`` as a dict so the global
    handler can render them into the ``details`` list.
    """
    status_code = STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    detail: str | dict[str, object] = error.message
    if isinstance(error, InvalidInputError) and error.details:
        detail = {"message": error.message, "details": error.details}

    return HTTPException(status_code=status_code, detail=detail)
