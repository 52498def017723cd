from datetime import datetime, timezone
from bson import ObjectId


def post_document(title: str, content: str, author_id: ObjectId) -> dict:
    return {
        '_id': ObjectId(),
        'title': title,
        'content': content,
        'author_id': author_id,
        'created_at': datetime.now(timezone.utc),
    }
