# backend/app/blog/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    slug = Column(String(255), nullable=True, index=True)
    published = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    author = relationship("User", back_populates="posts", lazy="selectin")
    comments = relationship(
        "Comment",
        back_populates="blog_post",
        lazy="selectin",
        order_by="Comment.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"BlogPost(id={self.id}, title={self.title!r}, author_id={self.author_id})"
    def __str__(self) -> str:
        return self.title

class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    published = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    blog_post_id = Column(Integer, ForeignKey("blog_posts.id"), nullable=False)

    author = relationship("User", back_populates="comments", lazy="selectin")
    blog_post = relationship("BlogPost", back_populates="comments")

    def __repr__(self) -> str:
        return f"Comment(id={self.id}, blog_post_id={self.blog_post_id}, author_id={self.author_id})"
    def __str__(self) -> str:
        return f"Comment#{self.id}"
