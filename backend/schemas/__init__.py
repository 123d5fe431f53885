from schemas.user import (
    UserRegister, UserLogin, UserResponse, RegisterResponse, TokenResponse,
    PublicUser, ProfileResponse, ProfileUpdate, PhotoUploadResponse,
)
from schemas.post import FeedPost, PostResponse, LikeToggleResponse, CommentCreate, CommentResponse
from schemas.message import MessageResponse, SendMessagePayload, ReceiveMessagePayload

__all__ = [
    "UserRegister", "UserLogin", "UserResponse", "RegisterResponse", "TokenResponse",
    "PublicUser", "ProfileResponse", "ProfileUpdate", "PhotoUploadResponse",
    "FeedPost", "PostResponse", "LikeToggleResponse", "CommentCreate", "CommentResponse",
    "MessageResponse", "SendMessagePayload", "ReceiveMessagePayload",
]
