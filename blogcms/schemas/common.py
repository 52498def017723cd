from pydantic import BaseModel
from typing import Optional


class ActionOkOut(BaseModel):
    message: str
    id: Optional[str] = None
