import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..users.models import User
from .models import BlogPost, Comment
from .schemas import BlogPostCreate, CommentCreate

logger = logging.getLogger(__name__)


async def get_post(db: AsyncSession, post_id: int) -> Optional[BlogPost]:
    result = await db.execute(select(BlogPost).where(BlogPost.id == post_id))
    return result.scalar_one_or_none()


async def create_post(db: AsyncSession, author: User, data: BlogPostCreate) -> BlogPost:
    post = BlogPost(title=data.title, content=data.content, slug=data.slug)
    author.add_post(post)
    db.add(post)
    await db.commit()
    await db.refresh(post)
    logger.info(f"Blog post id={post.id} created by user id={author.id}")
    return post


async def delete_post(db: AsyncSession, post: BlogPost) -> None:
    # 글과 함께 삭제되는 댓글들도 작성자 컬렉션에서 정리
    for comment in list(post.comments):
        if comment.author is not None:
            comment.author.remove_comment(comment)
    if post.author is not None:
        post.author.remove_post(post)
    await db.delete(post)
    await db.commit()
    logger.info(f"Blog post id={post.id} deleted")


async def create_comment(db: AsyncSession, post: BlogPost, author: User, data: CommentCreate) -> Comment:
    comment = Comment(content=data.content, blog_post=post)
    author.add_comment(comment)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    logger.info(f"Comment id={comment.id} added to post id={post.id} by user id={author.id}")
    return comment


async def delete_comment(db: AsyncSession, post: BlogPost, comment: Comment) -> None:
    if comment.author is not None:
        comment.author.remove_comment(comment)
    # delete-orphan cascade로 실제 삭제
    post.comments.remove(comment)
    await db.commit()
    logger.info(f"Comment id={comment.id} removed from post id={post.id}")
