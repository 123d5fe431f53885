from fastapi import APIRouter, Depends
from sqlalchemy import select, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession
from database import get_db
from models import Message
from schemas.message import MessageResponse
from api.deps import get_current_user_id

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/{other_user_id}", response_model=list[MessageResponse])
async def get_conversation(
    other_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Chat history between the caller and another user, oldest first."""
    result = await db.execute(
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
            )
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return [MessageResponse.model_validate(m) for m in result.scalars().all()]
