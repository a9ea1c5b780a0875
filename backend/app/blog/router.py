from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.dependencies import CurrentUser, require_role
from ..auth.roles import is_granted
from ..database import SessionDep
from ..users.groups import GET_BLOG_POST_WITH_AUTHOR, GET_COMMENT_WITH_AUTHOR
from ..users.models import User, ROLE_WRITER, ROLE_COMMENTATOR, ROLE_EDITOR
from .models import BlogPost
from . import service
from .schemas import BlogPostCreate, BlogPostOut, CommentCreate, CommentOut

router = APIRouter(prefix="/blog_posts", tags=["blog"])


async def _get_post_or_404(post_id: int, db) -> BlogPost:
    post = await service.get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return post


def _require_author_or_editor(author: User | None, current_user: User) -> None:
    if author is not None and author.id == current_user.id:
        return
    if not is_granted(current_user, ROLE_EDITOR):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")


@router.post("/", response_model=BlogPostOut, status_code=status.HTTP_201_CREATED)
async def create_post(body: BlogPostCreate, db: SessionDep, author: User = Depends(require_role(ROLE_WRITER))):
    post = await service.create_post(db, author, body)
    return BlogPostOut.from_post(post, GET_BLOG_POST_WITH_AUTHOR)


@router.get("/{post_id}", response_model=BlogPostOut)
async def get_post(post_id: int, db: SessionDep):
    post = await _get_post_or_404(post_id, db)
    return BlogPostOut.from_post(post, GET_BLOG_POST_WITH_AUTHOR)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, db: SessionDep, current_user: User = CurrentUser):
    post = await _get_post_or_404(post_id, db)
    _require_author_or_editor(post.author, current_user)
    await service.delete_post(db, post)
    return


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(post_id: int, db: SessionDep):
    post = await _get_post_or_404(post_id, db)
    return [CommentOut.from_comment(c, GET_COMMENT_WITH_AUTHOR) for c in post.comments]


@router.post("/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: int,
    body: CommentCreate,
    db: SessionDep,
    author: User = Depends(require_role(ROLE_COMMENTATOR)),
):
    post = await _get_post_or_404(post_id, db)
    comment = await service.create_comment(db, post, author, body)
    return CommentOut.from_comment(comment, GET_COMMENT_WITH_AUTHOR)


@router.delete("/{post_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(post_id: int, comment_id: int, db: SessionDep, current_user: User = CurrentUser):
    post = await _get_post_or_404(post_id, db)
    comment = next((c for c in post.comments if c.id == comment_id), None)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    _require_author_or_editor(comment.author, current_user)
    await service.delete_comment(db, post, comment)
    return
