from pydantic import BaseModel
from typing import List
from datetime import datetime

class MessageCreate(BaseModel):
    receiver_id: str
    content: str

class MessageResponse(BaseModel):
    id: str
    sender: str
    receiver: str
    content: str
    read: bool
    created_at: datetime

class ConversationResponse(BaseModel):
    user: dict
    messages: List[MessageResponse]
