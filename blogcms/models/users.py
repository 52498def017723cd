from datetime import datetime, timezone
from bson import ObjectId


def user_document(username: str, password_hash: str) -> dict:
    return {
        '_id': ObjectId(),
        'username': username,
        'password_hash': password_hash,
        'created_at': datetime.now(timezone.utc),
    }
