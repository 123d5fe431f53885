import logging
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from database import get_db
from models import User, Post, Comment, Like
from schemas.post import FeedPost, PostResponse, LikeToggleResponse, CommentCreate, CommentResponse
from api.deps import get_current_user_id
from services.media import MediaUploader, get_media_uploader, POST_FOLDER

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])


async def _get_post_or_404(db: AsyncSession, post_id: int) -> Post:
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found.")
    return post


async def _like_count(db: AsyncSession, post_id: int) -> int:
    result = await db.execute(select(func.count()).select_from(Like).where(Like.post_id == post_id))
    return result.scalar_one()


# ── Feed ──────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[FeedPost])
async def list_posts(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Every post, newest first, with like/comment counts and the caller's own like flag."""
    like_count = (
        select(func.count()).select_from(Like).where(Like.post_id == Post.id).scalar_subquery()
    )
    comment_count = (
        select(func.count()).select_from(Comment).where(Comment.post_id == Post.id).scalar_subquery()
    )
    liked_by_caller = select(Like.post_id).where(Like.post_id == Post.id, Like.user_id == user_id).exists()

    result = await db.execute(
        select(
            Post.id.label("post_id"),
            Post.content,
            Post.title,
            Post.post_type,
            Post.media_url,
            Post.created_at,
            User.id.label("user_id"),
            User.username,
            User.profile_picture_url,
            like_count.label("like_count"),
            comment_count.label("comment_count"),
            liked_by_caller.label("is_liked_by_user"),
        )
        .join(User, Post.user_id == User.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    return [FeedPost(**row._mapping) for row in result.all()]


# ── Create ────────────────────────────────────────────────────────────────────

@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    content: str = Form(...),
    title: str | None = Form(None),
    post_type: str = Form("text"),
    mediaFile: UploadFile | None = File(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    uploader: MediaUploader = Depends(get_media_uploader),
):
    media_url = None
    if mediaFile is not None:
        data = await mediaFile.read()
        if data:
            # An upload failure aborts the post; nothing is written
            media_url = await uploader.upload(
                data, POST_FOLDER,
                filename=mediaFile.filename, content_type=mediaFile.content_type,
            )

    post = Post(
        user_id=user_id,
        content=content,
        title=title or None,
        post_type=post_type or "text",
        media_url=media_url,
    )
    db.add(post)
    await db.commit()
    await db.refresh(post)
    logger.info(f"User {user_id} created post {post.id}")
    return PostResponse.model_validate(post)


# ── Likes ─────────────────────────────────────────────────────────────────────

@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await _get_post_or_404(db, post_id)

    # Read-then-write; two concurrent toggles for the same pair can race
    existing = await db.get(Like, (user_id, post_id))
    if existing:
        await db.delete(existing)
        await db.commit()
        liked = False
    else:
        db.add(Like(user_id=user_id, post_id=post_id))
        try:
            await db.commit()
        except IntegrityError:
            # Either a concurrent request inserted the same row first or the post went away
            await db.rollback()
            if await db.get(Like, (user_id, post_id)) is None:
                await _get_post_or_404(db, post_id)
                liked = False
            else:
                liked = True
        else:
            liked = True

    return LikeToggleResponse(
        message="Post liked." if liked else "Post unliked.",
        liked=liked,
        like_count=await _like_count(db, post_id),
    )


# ── Comments ──────────────────────────────────────────────────────────────────

@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(
            Comment.id.label("comment_id"),
            Comment.comment_text,
            Comment.created_at,
            User.id.label("user_id"),
            User.username,
        )
        .join(User, Comment.user_id == User.id)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return [CommentResponse(**row._mapping) for row in result.all()]


@router.post("/{post_id}/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    body: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await _get_post_or_404(db, post_id)
    author = await db.get(User, user_id)
    if not author:
        raise HTTPException(status_code=404, detail="User not found")

    comment = Comment(post_id=post_id, user_id=user_id, comment_text=body.comment_text)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return CommentResponse(
        comment_id=comment.id,
        comment_text=comment.comment_text,
        created_at=comment.created_at,
        user_id=user_id,
        username=author.username,
    )


# ── Delete ────────────────────────────────────────────────────────────────────

@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    post = await _get_post_or_404(db, post_id)
    if post.user_id != user_id:
        raise HTTPException(status_code=403, detail="You are not authorized to delete this post.")

    # Not every backend enforces ON DELETE CASCADE, so clear dependents explicitly
    await db.execute(delete(Like).where(Like.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.delete(post)
    await db.commit()
    logger.info(f"User {user_id} deleted post {post_id}")
    return {"message": "Post deleted successfully."}
