"""Friends API — user search, friend requests, friend management."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from database import get_db
from models import User
from models.friendship import Friendship, canonical_pair, PENDING, ACCEPTED
from schemas.user import PublicUser
from api.deps import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/friends", tags=["friends"])

SEARCH_LIMIT = 10


def _like_literal(text: str) -> str:
    """Escape LIKE wildcards so the text matches as a plain substring."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _touches(user_id: int):
    return or_(Friendship.user_one_id == user_id, Friendship.user_two_id == user_id)


async def _get_edge(db: AsyncSession, a: int, b: int) -> Friendship | None:
    user_one_id, user_two_id = canonical_pair(a, b)
    return await db.get(Friendship, (user_one_id, user_two_id))


# ── User search ───────────────────────────────────────────────────────────────

@router.get("/search", response_model=list[PublicUser])
async def search_users(
    query: str | None = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Search users by username (excludes self)."""
    if not query or not query.strip():
        return []
    result = await db.execute(
        select(User)
        .where(User.id != user_id, User.username.ilike(f"%{_like_literal(query.strip())}%", escape="\\"))
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
    )
    return [PublicUser.model_validate(u) for u in result.scalars().all()]


# ── Send friend request ───────────────────────────────────────────────────────

@router.post("/request/{recipient_id}", status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    recipient_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if recipient_id == user_id:
        raise HTTPException(status_code=400, detail="You cannot add yourself as a friend.")

    if not await db.get(User, recipient_id):
        raise HTTPException(status_code=404, detail="User not found")

    if await _get_edge(db, user_id, recipient_id):
        raise HTTPException(
            status_code=409,
            detail="A friendship request already exists or you are already friends.",
        )

    user_one_id, user_two_id = canonical_pair(user_id, recipient_id)
    db.add(Friendship(
        user_one_id=user_one_id,
        user_two_id=user_two_id,
        action_user_id=user_id,
        status=PENDING,
    ))
    await db.commit()
    logger.info(f"Friend request {user_id} -> {recipient_id}")
    return {"message": "Friend request sent.", "status": PENDING}


# ── Pending requests ──────────────────────────────────────────────────────────

@router.get("/pending", response_model=list[PublicUser])
async def get_pending_requests(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Requests waiting on the caller's decision."""
    result = await db.execute(
        select(User)
        .join(Friendship, Friendship.action_user_id == User.id)
        .where(
            _touches(user_id),
            Friendship.status == PENDING,
            Friendship.action_user_id != user_id,
        )
        .order_by(Friendship.created_at.desc())
    )
    return [PublicUser.model_validate(u) for u in result.scalars().all()]


# ── Accept friend request ─────────────────────────────────────────────────────

@router.put("/accept/{requester_id}")
async def accept_friend_request(
    requester_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    friendship = await _get_edge(db, requester_id, user_id)
    if (
        requester_id == user_id
        or not friendship
        or friendship.status != PENDING
        or friendship.action_user_id != requester_id
    ):
        raise HTTPException(status_code=404, detail="No pending request from this user")

    friendship.status = ACCEPTED
    friendship.action_user_id = user_id
    await db.commit()
    logger.info(f"Friend request {requester_id} -> {user_id} accepted")
    return {"message": "Friend request accepted.", "status": ACCEPTED}


# ── Friends list ──────────────────────────────────────────────────────────────

@router.get("/list", response_model=list[PublicUser])
async def get_friends(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(User)
        .join(
            Friendship,
            or_(
                and_(Friendship.user_one_id == user_id, Friendship.user_two_id == User.id),
                and_(Friendship.user_two_id == user_id, Friendship.user_one_id == User.id),
            ),
        )
        .where(Friendship.status == ACCEPTED)
        .order_by(User.username)
    )
    return [PublicUser.model_validate(u) for u in result.scalars().all()]


# ── Remove friend / decline or cancel request ────────────────────────────────

@router.delete("/{other_user_id}")
async def remove_friend(
    other_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    friendship = await _get_edge(db, user_id, other_user_id)
    if not friendship:
        raise HTTPException(status_code=404, detail="No friendship found")

    await db.delete(friendship)
    await db.commit()
    return {"message": "Friendship removed.", "status": "removed"}
