# backend/app/users/models.py
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

ROLE_COMMENTATOR = "ROLE_COMMENTATOR"
ROLE_WRITER = "ROLE_WRITER"
ROLE_EDITOR = "ROLE_EDITOR"
ROLE_ADMIN = "ROLE_ADMIN"
ROLE_SUPER_ADMIN = "ROLE_SUPER_ADMIN"

DEFAULT_ROLES = (ROLE_COMMENTATOR,)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(180), unique=True, nullable=False, index=True)
    roles = Column(JSON, nullable=False, default=lambda: list(DEFAULT_ROLES))
    password = Column(String(255), nullable=False)  # bcrypt 해시만 저장
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_change_date = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # owning side는 Comment.author / BlogPost.author
    comments = relationship("Comment", back_populates="author", lazy="selectin", order_by="Comment.id")
    posts = relationship("BlogPost", back_populates="author", lazy="selectin", order_by="BlogPost.id")

    def __init__(self, **kwargs):
        kwargs.setdefault("roles", list(DEFAULT_ROLES))
        kwargs.setdefault("comments", [])
        kwargs.setdefault("posts", [])
        super().__init__(**kwargs)

    def add_role(self, role: str) -> "User":
        if role not in (self.roles or []):
            # JSON 컬럼은 in-place 변경을 추적하지 않으므로 새 리스트로 교체
            self.roles = [*(self.roles or []), role]
        return self

    def get_roles(self) -> list[str]:
        return list(dict.fromkeys(self.roles or []))

    def set_roles(self, roles) -> "User":
        self.roles = list(roles)
        return self

    def add_comment(self, comment) -> "User":
        if comment not in self.comments:
            self.comments.append(comment)
            comment.author = self
        return self

    def remove_comment(self, comment) -> "User":
        if comment in self.comments:
            self.comments.remove(comment)
            # set the owning side to None (unless already changed)
            if comment.author is self:
                comment.author = None
        return self

    def add_post(self, post) -> "User":
        if post not in self.posts:
            self.posts.append(post)
            post.author = self
        return self

    def remove_post(self, post) -> "User":
        if post in self.posts:
            self.posts.remove(post)
            if post.author is self:
                post.author = None
        return self

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r}, email={self.email!r}, roles={self.roles!r})"
    def __str__(self) -> str:
        return f"{self.username} ({self.email})"
