from fastapi import APIRouter, Depends, HTTPException
import logging
from ..schemas.posts import CommentIn
from ..schemas.common import ActionOkOut
from ..crud import create_comment, resolve_author
from ..auth import get_current_user
from ..core import get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('', response_model=ActionOkOut, status_code=201)
async def create(payload: CommentIn, current_user: dict = Depends(get_current_user), store=Depends(get_store)):
    try:
        author = await resolve_author(store, current_user)
        if not author:
            raise HTTPException(401, 'Unknown user')
        comment = await create_comment(store, author, payload)
        if comment is None:
            raise HTTPException(404, 'Post not found')
    except HTTPException:
        raise
    except Exception:
        logger.exception({'msg': 'create_comment_failed', 'username': current_user['username']})
        raise HTTPException(500, 'An error occurred while creating the comment')
    return {'message': 'Comment created successfully', 'id': str(comment['_id'])}
