from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class PostIn(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class AuthorOut(BaseModel):
    id: str
    username: str


class PostOut(BaseModel):
    id: str
    title: str
    content: str
    author: Optional[AuthorOut] = None


class CommentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    post_id: str = Field(..., alias='postId')
    content: str = Field(..., min_length=1)
