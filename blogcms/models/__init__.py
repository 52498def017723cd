"""Document shapes and collection names for the Mongo backend."""
from pymongo import ASCENDING

USERS = 'users'
POSTS = 'posts'
COMMENTS = 'comments'


async def ensure_indexes(db):
    # username uniqueness is what makes duplicate registrations fail
    await db[USERS].create_index([('username', ASCENDING)], unique=True, name='uix_username')
    await db[POSTS].create_index([('author_id', ASCENDING)], name='ix_post_author')
    await db[COMMENTS].create_index([('post_id', ASCENDING)], name='ix_comment_post')


from .users import user_document  # noqa: F401,E402
from .posts import post_document  # noqa: F401,E402
from .comments import comment_document  # noqa: F401,E402
