import os
import logging
from passlib.context import CryptContext
from .auth import create_access_token
from .core import AUTH_EVENTS, CONTENT_WRITES
from .storage import DuplicateUserError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '12'))

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=BCRYPT_ROUNDS)


async def register_user(store, payload):
    try:
        user = await store.create_user(payload.username, pwd_ctx.hash(payload.password))
    except DuplicateUserError:
        AUTH_EVENTS.labels(event='register', outcome='duplicate').inc()
        raise
    AUTH_EVENTS.labels(event='register', outcome='ok').inc()
    logger.info({'msg': 'user_registered', 'username': user['username']})
    return user


async def authenticate_user(store, username: str, password: str):
    """Return a signed token for valid credentials, None otherwise"""
    user = await store.get_user_by_username(username)
    if not user:
        AUTH_EVENTS.labels(event='login', outcome='unknown_user').inc()
        return None
    if not pwd_ctx.verify(password, user['password_hash']):
        AUTH_EVENTS.labels(event='login', outcome='bad_password').inc()
        return None
    AUTH_EVENTS.labels(event='login', outcome='ok').inc()
    return create_access_token({'id': str(user['_id']), 'username': user['username']})


async def resolve_author(store, identity: dict):
    # tokens name the user; the stored document is the source of truth for its id
    return await store.get_user_by_username(identity['username'])


async def create_post(store, author: dict, payload):
    post = await store.create_post(payload.title, payload.content, author['_id'])
    CONTENT_WRITES.labels(kind='post').inc()
    logger.info({'msg': 'post_created', 'post_id': str(post['_id']), 'author': author['username']})
    return post


async def list_posts(store):
    return [post_out(doc) for doc in await store.list_posts()]


async def create_comment(store, author: dict, payload):
    """Store a comment, None when the referenced post cannot be found"""
    post = await store.get_post(payload.post_id)
    if not post:
        return None
    comment = await store.create_comment(post['_id'], payload.content, author['_id'])
    CONTENT_WRITES.labels(kind='comment').inc()
    logger.info({'msg': 'comment_created', 'comment_id': str(comment['_id']), 'post_id': str(post['_id'])})
    return comment


def post_out(doc: dict) -> dict:
    author = doc.get('author')
    return {
        'id': str(doc['_id']),
        'title': doc['title'],
        'content': doc['content'],
        'author': {'id': str(author['_id']), 'username': author['username']} if author else None,
    }
