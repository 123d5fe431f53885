from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from database import get_db
from models import User
from schemas.user import ProfileResponse, ProfileUpdate, PhotoUploadResponse
from api.deps import get_current_user_id
from services.media import MediaUploader, get_media_uploader, PROFILE_FOLDER

router = APIRouter(prefix="/api/profile", tags=["profile"])


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)
    return ProfileResponse.model_validate(user)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)
    update_data = body.model_dump(exclude_unset=True)

    if update_data.get("username") is None:
        update_data.pop("username", None)
    else:
        taken = await db.execute(
            select(User.id).where(User.username == update_data["username"], User.id != user_id)
        )
        if taken.scalar_one_or_none() is not None:
            raise HTTPException(status_code=409, detail="Username is already taken")

    for field, value in update_data.items():
        setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    return ProfileResponse.model_validate(user)


@router.post("/upload-photo", response_model=PhotoUploadResponse)
async def upload_photo(
    profilePhoto: UploadFile | None = File(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    uploader: MediaUploader = Depends(get_media_uploader),
):
    if profilePhoto is None:
        raise HTTPException(status_code=400, detail="No file uploaded.")
    content = await profilePhoto.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded.")

    user = await _get_user_or_404(db, user_id)
    url = await uploader.upload(
        content, PROFILE_FOLDER,
        filename=profilePhoto.filename, content_type=profilePhoto.content_type,
    )
    user.profile_picture_url = url
    await db.commit()
    return PhotoUploadResponse(profile_picture_url=url)
