from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from ..models import CustomModel
from ..users.groups import normalize
from .models import BlogPost, Comment

class BlogPostCreate(CustomModel):
    title: str = Field(..., min_length=10, max_length=255)
    content: str = Field(..., min_length=20)
    slug: Optional[str] = Field(None, max_length=255)

class CommentCreate(CustomModel):
    content: str = Field(..., min_length=5, max_length=3000)

class BlogPostOut(CustomModel):
    id: int
    title: str
    content: str
    slug: Optional[str] = None
    published: datetime
    author: Optional[dict[str, Any]] = None

    @classmethod
    def from_post(cls, post: BlogPost, group: str) -> "BlogPostOut":
        """author는 해당 그룹(예: get-blog-post-with-author)에 맞춰 축약된 형태로 포함됩니다."""
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            slug=post.slug,
            published=post.published,
            author=normalize(post.author, [group]) if post.author is not None else None,
        )

class CommentOut(CustomModel):
    id: int
    content: str
    published: datetime
    blog_post_id: int
    author: Optional[dict[str, Any]] = None

    @classmethod
    def from_comment(cls, comment: Comment, group: str) -> "CommentOut":
        return cls(
            id=comment.id,
            content=comment.content,
            published=comment.published,
            blog_post_id=comment.blog_post_id,
            author=normalize(comment.author, [group]) if comment.author is not None else None,
        )
