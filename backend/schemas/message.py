from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    message_text: str
    created_at: datetime | None

    class Config:
        from_attributes = True


class SendMessagePayload(BaseModel):
    """Body of the `sendMessage` socket event. Clients send camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    sender_id: int = Field(alias="senderId")
    receiver_id: int = Field(alias="receiverId")
    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class ReceiveMessagePayload(BaseModel):
    sender_id: int
    message_text: str
