from fastapi import APIRouter, Depends, HTTPException
import logging
from ..schemas.users import RegisterIn, LoginIn, TokenOut
from ..schemas.common import ActionOkOut
from ..crud import register_user, authenticate_user
from ..core import get_store
from ..storage import DuplicateUserError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/register', response_model=ActionOkOut, status_code=201)
async def register(payload: RegisterIn, store=Depends(get_store)):
    try:
        user = await register_user(store, payload)
    except DuplicateUserError:
        raise HTTPException(409, 'Username already exists')
    except Exception:
        logger.exception({'msg': 'register_failed'})
        raise HTTPException(500, 'An error occurred while registering the user')
    return {'message': 'User registered successfully', 'id': str(user['_id'])}


@router.post('/login', response_model=TokenOut)
async def login(payload: LoginIn, store=Depends(get_store)):
    try:
        token = await authenticate_user(store, payload.username, payload.password)
    except Exception:
        logger.exception({'msg': 'login_failed'})
        raise HTTPException(500, 'An error occurred while logging in')
    if not token:
        raise HTTPException(status_code=401, detail='Invalid username or password')
    return {'token': token}
