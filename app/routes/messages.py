# ========================================
# app/routes/messages.py - DIRECT MESSAGES
# ========================================

from fastapi import APIRouter, Depends, status
from typing import List

from app.database import get_db
from app.schemas.message import ConversationResponse, MessageCreate, MessageResponse
from app.services.messages import MessagingLedger
from app.utils.auth import get_current_user

router = APIRouter(prefix="/api/messages", tags=["Messages"])


def get_ledger(db=Depends(get_db)) -> MessagingLedger:
    return MessagingLedger(db)


# ✅ 1. SEND MESSAGE
@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message: MessageCreate,
    current_user: dict = Depends(get_current_user),
    ledger: MessagingLedger = Depends(get_ledger)
):
    return await ledger.send_message(current_user, message.receiver_id, message.content)


# ✅ 2. CONVERSATIONS
@router.get("/conversations", response_model=List[ConversationResponse])
async def get_conversations(
    current_user: dict = Depends(get_current_user),
    ledger: MessagingLedger = Depends(get_ledger)
):
    """Messages grouped by the other participant, newest first."""
    return await ledger.list_conversations(current_user)


# ✅ 3. MARK AS READ (receiver only)
@router.put("/{message_id}/read", response_model=MessageResponse)
async def mark_message_as_read(
    message_id: str,
    current_user: dict = Depends(get_current_user),
    ledger: MessagingLedger = Depends(get_ledger)
):
    return await ledger.mark_read(current_user, message_id)
