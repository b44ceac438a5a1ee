"""Test models and SQL rendering helpers."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import ClauseElement

Base = declarative_base()


class User(Base):
    """Test model for grid filtering."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100))
    email = Column(String(255))
    status = Column(String(50))
    active = Column(Boolean)
    amount = Column(Float)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime)

    orders = relationship("Order", back_populates="user")
    posts = relationship("Post", back_populates="author")


class Order(Base):
    """Order placed by a user."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    status = Column(String(50))
    total = Column(Float)

    user = relationship("User", back_populates="orders")


class Post(Base):
    """Post written by a user."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    title = Column(String(200))
    body = Column(Text)

    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post")


class Comment(Base):
    """Comment on a post."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id"))
    text = Column(Text)

    post = relationship("Post", back_populates="comments")


def render(clause: ClauseElement) -> str:
    """Compile a statement or predicate with inlined values on one line."""
    sql = str(clause.compile(compile_kwargs={"literal_binds": True}))
    return " ".join(sql.split())


def where_sql(stmt) -> str:
    """Render only the WHERE clause of a select ('' if there is none)."""
    if stmt.whereclause is None:
        return ""
    return render(stmt.whereclause)


def bound_values(clause: ClauseElement) -> list:
    """Bound parameter values of a predicate, in compile order."""
    return list(clause.compile().params.values())
