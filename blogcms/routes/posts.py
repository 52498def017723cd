from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging
from ..schemas.posts import PostIn, PostOut
from ..schemas.common import ActionOkOut
from ..crud import create_post, list_posts, resolve_author
from ..auth import get_current_user
from ..core import get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('', response_model=ActionOkOut, status_code=201)
async def create(payload: PostIn, current_user: dict = Depends(get_current_user), store=Depends(get_store)):
    try:
        author = await resolve_author(store, current_user)
        if not author:
            raise HTTPException(401, 'Unknown user')
        post = await create_post(store, author, payload)
    except HTTPException:
        raise
    except Exception:
        logger.exception({'msg': 'create_post_failed', 'username': current_user['username']})
        raise HTTPException(500, 'An error occurred while creating the post')
    return {'message': 'Post created successfully', 'id': str(post['_id'])}


@router.get('', response_model=List[PostOut])
async def list_all(store=Depends(get_store)):
    try:
        return await list_posts(store)
    except Exception:
        logger.exception({'msg': 'list_posts_failed'})
        raise HTTPException(500, 'An error occurred while retrieving the posts')
