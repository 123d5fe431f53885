from models.user import User
from models.friendship import Friendship
from models.post import Post, Comment, Like
from models.message import Message

__all__ = ["User", "Friendship", "Post", "Comment", "Like", "Message"]
