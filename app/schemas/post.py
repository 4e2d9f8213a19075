from pydantic import BaseModel
from typing import Optional
from datetime import datetime

# JSON body for a text-only post; multipart is used when an image is attached
class PostCreate(BaseModel):
    content: Optional[str] = None

class CommentCreate(BaseModel):
    comment: str

class FeedItem(BaseModel):
    id: str
    content: str
    image_url: str = ""
    author: dict
    liked_by_current_user: bool
    likes_count: int
    comments_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CommentResponse(BaseModel):
    id: str
    comment: str
    author: dict
    created_at: datetime
