"""
Social feed: posts with embedded likes and comments.
"""

import logging
import random
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from app.utils.errors import Forbidden, NotFound, ValidationFailed
from app.utils.helpers import fetch_users, is_blank, paginate, parse_object_id
from app.utils.images import ImageStore, ImageUpload

logger = logging.getLogger(__name__)

OWN_POSTS_LIMIT = 3
CONNECTION_POSTS_LIMIT = 15
OTHER_POSTS_LIMIT = 200

AUTHOR_FIELDS = ("name", "job_title", "company")
COMMENT_AUTHOR_FIELDS = ("name",)


def feed_item(post: dict, user_id: str, authors: dict) -> dict:
    likes = post.get("likes", [])
    return {
        "id": str(post["_id"]),
        "content": post["content"],
        "image_url": post.get("image_url", ""),
        "author": authors.get(post["author"], {"id": post["author"]}),
        "liked_by_current_user": user_id in likes,
        "likes_count": len(likes),
        "comments_count": len(post.get("comments", [])),
        "created_at": post.get("created_at"),
        "updated_at": post.get("updated_at"),
    }


def serialize_comment(comment: dict, authors: Optional[dict] = None) -> dict:
    author = comment["author"]
    return {
        "id": str(comment["_id"]),
        "comment": comment["comment"],
        "author": (authors or {}).get(author, {"id": author}),
        "created_at": comment["created_at"],
    }


class Feed:
    def __init__(self, db, image_store: Optional[ImageStore] = None):
        self.db = db
        self.image_store = image_store

    async def _get_post(self, post_id: str, projection: Optional[dict] = None) -> dict:
        post = await self.db.posts.find_one({"_id": parse_object_id(post_id, "post ID")}, projection)
        if not post:
            raise NotFound("Post not found")
        return post

    async def _recent_posts(self, query: dict, limit: int) -> List[dict]:
        return await self.db.posts.find(query).sort("created_at", -1).limit(limit).to_list(limit)

    async def create_post(self, author: dict, content: Optional[str], image: Optional[ImageUpload] = None) -> dict:
        if is_blank(content):
            raise ValidationFailed("Content is required")

        author_id = str(author["_id"])
        now = datetime.utcnow()
        post = {
            "content": content,
            "image_url": "",
            "image_id": "",
            "author": author_id,
            "likes": [],
            "comments": [],
            "created_at": now,
            "updated_at": now,
        }

        if image is not None:
            post["image_url"], post["image_id"] = await self.image_store.upload(
                image, folder=f"post_images/{author_id}"
            )

        try:
            result = await self.db.posts.insert_one(post)
        except Exception:
            # Nothing references the uploaded image if the post was not stored
            if self.image_store is not None:
                await self.image_store.discard(post["image_id"])
            raise
        post["_id"] = result.inserted_id

        logger.info("Post %s created by %s", post["_id"], author_id)
        authors = await fetch_users(self.db, [author_id], AUTHOR_FIELDS)
        return feed_item(post, author_id, authors)

    async def list_feed(self, user: dict, page: int = 1, limit: int = 10) -> List[dict]:
        """Own latest posts, then shuffled connection posts, then everyone else."""
        user_id = str(user["_id"])
        connection_ids = list(user.get("connections", []))

        own_posts = await self._recent_posts({"author": user_id}, OWN_POSTS_LIMIT)

        connection_posts = []
        if connection_ids:
            connection_posts = await self._recent_posts(
                {"author": {"$in": connection_ids}}, CONNECTION_POSTS_LIMIT
            )
            # Randomise within the recent window so the same few connections
            # do not always lead the feed
            random.shuffle(connection_posts)

        other_posts = await self._recent_posts(
            {"author": {"$nin": connection_ids + [user_id]}}, OTHER_POSTS_LIMIT
        )

        window = paginate(own_posts + connection_posts + other_posts, page, limit)
        authors = await fetch_users(self.db, [post["author"] for post in window], AUTHOR_FIELDS)

        return [feed_item(post, user_id, authors) for post in window]

    async def list_comments(self, post_id: str, page: int = 1, limit: int = 10) -> List[dict]:
        post = await self._get_post(post_id, {"comments": 1})

        comments = sorted(post.get("comments", []), key=lambda c: c["created_at"], reverse=True)
        window = paginate(comments, page, limit)

        authors = await fetch_users(self.db, [c["author"] for c in window], COMMENT_AUTHOR_FIELDS)
        return [serialize_comment(comment, authors) for comment in window]

    async def toggle_like(self, user: dict, post_id: str) -> dict:
        """Like if not yet liked, otherwise unlike."""
        post = await self._get_post(post_id, {"likes": 1})
        user_id = str(user["_id"])

        liked = user_id not in post.get("likes", [])
        if liked:
            update = {"$addToSet": {"likes": user_id}}
        else:
            update = {"$pull": {"likes": user_id}}

        updated = await self.db.posts.find_one_and_update(
            {"_id": post["_id"]}, update, return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFound("Post not found")

        return {
            "message": "Post liked successfully!" if liked else "Post unliked successfully!",
            "liked": liked,
            "likes_count": len(updated.get("likes", [])),
        }

    async def add_comment(self, user: dict, post_id: str, text: Optional[str]) -> dict:
        if is_blank(text):
            raise ValidationFailed("Comment text is required")

        post_oid = parse_object_id(post_id, "post ID")
        comment = {
            "_id": ObjectId(),
            "comment": text,
            "author": str(user["_id"]),
            "created_at": datetime.utcnow(),
        }

        result = await self.db.posts.update_one({"_id": post_oid}, {"$push": {"comments": comment}})
        if result.matched_count == 0:
            raise NotFound("Post not found")

        return serialize_comment(comment)

    async def delete_comment(self, user: dict, post_id: str, comment_id: str) -> dict:
        post = await self._get_post(post_id, {"comments": 1})
        comment_oid = parse_object_id(comment_id, "comment ID")
        user_id = str(user["_id"])

        comment = next((c for c in post.get("comments", []) if c["_id"] == comment_oid), None)
        if comment is None:
            raise NotFound("Comment not found")
        if comment["author"] != user_id:
            raise Forbidden("Not authorized to delete this comment")

        await self.db.posts.update_one(
            {"_id": post["_id"]},
            {"$pull": {"comments": {"_id": comment_oid, "author": user_id}}}
        )
        return {"message": "Comment deleted successfully!"}

    async def delete_post(self, user: dict, post_id: str) -> dict:
        post = await self._get_post(post_id)

        if post["author"] != str(user["_id"]):
            raise Forbidden("Not authorized to delete this post")

        await self.db.posts.delete_one({"_id": post["_id"]})
        if self.image_store is not None:
            await self.image_store.discard(post.get("image_id"))

        logger.info("Post %s deleted by %s", post["_id"], post["author"])
        return {"message": "Post deleted successfully"}
