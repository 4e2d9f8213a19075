# ========================================
# app/routes/posts.py - FEED, LIKES, COMMENTS
# ========================================

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.datastructures import UploadFile
from typing import List

from app.database import get_db
from app.schemas.post import CommentCreate, CommentResponse, FeedItem, PostCreate
from app.services.posts import Feed
from app.utils.auth import get_current_user
from app.utils.errors import ValidationFailed
from app.utils.images import get_image_store, read_image_upload

router = APIRouter(prefix="/api/posts", tags=["Posts"])


def get_feed(db=Depends(get_db), image_store=Depends(get_image_store)) -> Feed:
    return Feed(db, image_store)


async def read_post_body(request: Request):
    """Return (content, image) from either a JSON or a multipart body."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationFailed("Invalid JSON body")
        try:
            post = PostCreate.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(e.errors())
        return post.content, None

    form = await request.form()
    content = form.get("content")
    if not isinstance(content, str):
        content = None

    image = form.get("image")
    if not isinstance(image, UploadFile) or not image.filename:
        return content, None
    return content, await read_image_upload(image)


# ✅ 1. CREATE POST (JSON, or multipart with an optional image)
@router.post(
    "",
    response_model=FeedItem,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": PostCreate.model_json_schema()},
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "content": {"type": "string"},
                            "image": {"type": "string", "format": "binary"},
                        },
                    }
                },
            }
        }
    }
)
async def create_post(
    request: Request,
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    content, upload = await read_post_body(request)
    return await feed.create_post(current_user, content, upload)


# ✅ 2. FEED
@router.get("", response_model=List[FeedItem])
async def get_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    """Your recent posts, then your connections', then everyone else's."""
    return await feed.list_feed(current_user, page, limit)


# ✅ 3. TOGGLE LIKE
@router.post("/{post_id}/like")
async def like_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    """Like the post, or unlike it if you already liked it."""
    return await feed.toggle_like(current_user, post_id)


# ✅ 4. ADD COMMENT
@router.post("/{post_id}/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def comment_on_post(
    post_id: str,
    comment: CommentCreate,
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    return await feed.add_comment(current_user, post_id, comment.comment)


# ✅ 5. LIST COMMENTS
@router.get("/{post_id}/comment", response_model=List[CommentResponse])
async def get_post_comments(
    post_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    """Comments, newest first."""
    return await feed.list_comments(post_id, page, limit)


# ✅ 6. DELETE OWN COMMENT
@router.delete("/{post_id}/comment/{comment_id}")
async def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    return await feed.delete_comment(current_user, post_id, comment_id)


# ✅ 7. DELETE OWN POST
@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    feed: Feed = Depends(get_feed)
):
    return await feed.delete_post(current_user, post_id)
