from datetime import datetime, timezone
from bson import ObjectId


def comment_document(post_id: ObjectId, content: str, author_id: ObjectId) -> dict:
    return {
        '_id': ObjectId(),
        'post_id': post_id,
        'author_id': author_id,
        'content': content,
        'created_at': datetime.now(timezone.utc),
    }
