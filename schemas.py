"""
Database Schemas

Each Pydantic model describes the request body of one collection. Fields
are optional at the model level; the route handlers run the presence check
themselves so a missing field is reported as a 400 with a plain message.

- Music    -> "music" collection
- Book     -> "books" collection
- Blog     -> "blogs" collection
- Category -> "categories" collection
- User     -> "users" collection
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, EmailStr, Field

# category and tags arrive either as a comma separated string or a list
TextOrList = Union[str, List[str]]


class Section(str, Enum):
    music = "music"
    book = "book"
    blog = "blog"


class Role(str, Enum):
    member = "member"
    admin = "admin"


class Music(BaseModel):
    """
    Music collection schema
    Collection name: "music"
    """
    title: Optional[str] = Field(None, description="Song title")
    category: Optional[TextOrList] = Field(None, description="Category label(s)")
    audioUrl: Optional[str] = Field(None, description="Public audio URL")
    tags: Optional[TextOrList] = Field(None, description="Tags")
    lyrics: Optional[str] = Field(None, description="Lyrics text")
    meanings: Optional[str] = Field(None, description="Explanation of the lyrics")


class Book(BaseModel):
    """
    Books collection schema
    Collection name: "books"
    """
    title: Optional[str] = Field(None, description="Book title")
    category: Optional[TextOrList] = Field(None, description="Category label(s)")
    link: Optional[str] = Field(None, description="Download or store link")
    tags: Optional[TextOrList] = Field(None, description="Tags")


class Blog(BaseModel):
    """
    Blogs collection schema
    Collection name: "blogs"
    """
    title: Optional[str] = Field(None, description="Post title")
    category: Optional[TextOrList] = Field(None, description="Category label(s)")
    blog: Optional[str] = Field(None, description="Post content")
    tags: Optional[TextOrList] = Field(None, description="Tags")


class Category(BaseModel):
    """
    Categories collection schema
    Collection name: "categories"
    """
    section: Optional[str] = Field(None, description="Resource kind: music|book|blog")
    category: Optional[str] = Field(None, description="Category label")


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    photo: Optional[str] = None
    role: Role = Role.member


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    photo: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Role


class User(BaseModel):
    """
    Users collection schema
    Collection name: "users"
    """
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Email address, unique")
    password: str = Field(..., description="BCrypt hashed password")
    photo: Optional[str] = Field(None, description="Avatar URL")
    role: Role = Field(Role.member, description="member|admin")
