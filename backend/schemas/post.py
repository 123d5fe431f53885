from datetime import datetime
from pydantic import BaseModel, field_validator


class FeedPost(BaseModel):
    post_id: int
    content: str
    title: str | None
    post_type: str
    media_url: str | None
    created_at: datetime | None
    user_id: int
    username: str
    profile_picture_url: str | None
    like_count: int
    comment_count: int
    is_liked_by_user: bool


class PostResponse(BaseModel):
    id: int
    user_id: int
    content: str
    title: str | None
    post_type: str
    media_url: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True


class LikeToggleResponse(BaseModel):
    message: str
    liked: bool
    like_count: int


class CommentCreate(BaseModel):
    comment_text: str

    @field_validator("comment_text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comment cannot be empty")
        return v


class CommentResponse(BaseModel):
    comment_id: int
    comment_text: str
    created_at: datetime | None
    user_id: int
    username: str
