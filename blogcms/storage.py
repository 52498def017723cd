"""
Credential and content storage
Two interchangeable backends: MongoDB through motor, and an in-process store
for development and tests. Both hand back plain documents keyed by ``_id``.
"""
import asyncio
import copy
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from .models import USERS, POSTS, COMMENTS, ensure_indexes
from .models import user_document, post_document, comment_document

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """Raised when a username is already registered"""

    def __init__(self, username: str):
        super().__init__(f'username already exists: {username}')
        self.username = username


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Coerce a wire id into an ObjectId, None when it is not a valid id"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _public_author(user: Optional[dict]) -> Optional[dict]:
    if not user:
        return None
    return {'_id': user['_id'], 'username': user['username']}


class MongoStore:
    """Stores users, posts and comments in a Mongo database"""

    def __init__(self, db):
        self.db = db

    async def setup(self):
        await ensure_indexes(self.db)

    async def create_user(self, username: str, password_hash: str) -> dict:
        doc = user_document(username, password_hash)
        try:
            await self.db[USERS].insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateUserError(username)
        return doc

    async def get_user_by_username(self, username: str) -> Optional[dict]:
        return await self.db[USERS].find_one({'username': username})

    async def create_post(self, title: str, content: str, author_id: ObjectId) -> dict:
        doc = post_document(title, content, author_id)
        await self.db[POSTS].insert_one(doc)
        return doc

    async def get_post(self, post_id) -> Optional[dict]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        return await self.db[POSTS].find_one({'_id': oid})

    async def list_posts(self) -> List[dict]:
        pipeline = [
            {'$sort': {'_id': 1}},
            {'$lookup': {
                'from': USERS,
                'localField': 'author_id',
                'foreignField': '_id',
                'as': 'authors',
            }},
        ]
        posts = []
        async for doc in self.db[POSTS].aggregate(pipeline):
            authors = doc.pop('authors', [])
            doc['author'] = _public_author(authors[0] if authors else None)
            posts.append(doc)
        return posts

    async def create_comment(self, post_id: ObjectId, content: str, author_id: ObjectId) -> dict:
        doc = comment_document(post_id, content, author_id)
        await self.db[COMMENTS].insert_one(doc)
        return doc

    async def list_comments(self, post_id) -> List[dict]:
        oid = to_object_id(post_id)
        if oid is None:
            return []
        cursor = self.db[COMMENTS].find({'post_id': oid}).sort('_id', 1)
        return [doc async for doc in cursor]


class MemoryStore:
    """Process-local store with the same contract as MongoStore"""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._users: Dict[ObjectId, dict] = {}
        self._usernames: Dict[str, ObjectId] = {}
        self._posts: Dict[ObjectId, dict] = {}
        self._comments: Dict[ObjectId, dict] = {}

    async def setup(self):
        pass

    async def create_user(self, username: str, password_hash: str) -> dict:
        async with self._lock:
            if username in self._usernames:
                raise DuplicateUserError(username)
            doc = user_document(username, password_hash)
            self._users[doc['_id']] = doc
            self._usernames[username] = doc['_id']
            return copy.deepcopy(doc)

    async def get_user_by_username(self, username: str) -> Optional[dict]:
        user_id = self._usernames.get(username)
        if user_id is None:
            return None
        return copy.deepcopy(self._users[user_id])

    async def create_post(self, title: str, content: str, author_id: ObjectId) -> dict:
        async with self._lock:
            doc = post_document(title, content, author_id)
            self._posts[doc['_id']] = doc
            return copy.deepcopy(doc)

    async def get_post(self, post_id) -> Optional[dict]:
        oid = to_object_id(post_id)
        if oid is None or oid not in self._posts:
            return None
        return copy.deepcopy(self._posts[oid])

    async def list_posts(self) -> List[dict]:
        posts = []
        for doc in self._posts.values():
            item = copy.deepcopy(doc)
            item['author'] = _public_author(self._users.get(doc['author_id']))
            posts.append(item)
        return posts

    async def create_comment(self, post_id: ObjectId, content: str, author_id: ObjectId) -> dict:
        async with self._lock:
            doc = comment_document(post_id, content, author_id)
            self._comments[doc['_id']] = doc
            return copy.deepcopy(doc)

    async def list_comments(self, post_id) -> List[dict]:
        oid = to_object_id(post_id)
        return [copy.deepcopy(c) for c in self._comments.values() if c['post_id'] == oid]
