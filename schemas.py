"""
Database Schemas

MongoDB collection schemas for the site, as Pydantic models. Each model
corresponds to a collection; the collection name is the lowercase of the
class name by convention.

Example: class BulkQuote -> collection "bulkquote"
"""
from datetime import datetime, timezone
from typing import Optional, List, Literal

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

ProjectCategory = Literal["ai", "web", "chatbot", "iot", "mobile", "research", "security"]
CourseLevel = Literal["beginner", "intermediate", "advanced"]
SessionStatus = Literal["pending", "confirmed", "completed", "cancelled"]

PROJECT_CATEGORIES = ProjectCategory.__args__


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Catalog
class Project(BaseModel):
    title: str
    category: ProjectCategory
    image: str = Field(..., description="Image URL, usually /uploads/...")
    description: str
    tags: List[str] = Field(default_factory=list)
    link: str = "#contact"
    badge: Optional[str] = Field(None, description="e.g. 'Top Featured', 'Best Seller'")
    featured: bool = False
    priority: int = Field(0, description="Higher number = higher display priority")
    createdAt: datetime = Field(default_factory=utcnow)


class Course(BaseModel):
    title: str
    level: CourseLevel
    description: str
    duration: str = Field(..., description="Free text, e.g. '3 weeks'")
    features: List[str] = Field(default_factory=list)
    sessionType: str = "training-demo"
    badge: Optional[str] = None
    createdAt: datetime = Field(default_factory=utcnow)


# Lead capture
class Session(BaseModel):
    name: str
    email: str
    phone: str
    sessionType: str = Field(..., description="Free-text tag, not checked against courses")
    sessionMessage: str
    status: SessionStatus = "pending"
    bookedAt: datetime = Field(default_factory=utcnow)
    updatedAt: Optional[datetime] = None


class Hire(BaseModel):
    name: str
    email: str
    phone: str
    message: str
    status: str = "new"
    createdAt: datetime = Field(default_factory=utcnow)


class BulkQuote(BaseModel):
    name: str
    email: str
    phone: str
    organization: Optional[str] = None
    count: int
    requirements: str
    status: str = "new"
    requestedAt: datetime = Field(default_factory=utcnow)


# Users
class User(BaseModel):
    name: str
    email: str = Field(..., description="Unique (index on user.email)")
    password: str = Field(..., description="pbkdf2_sha256 hash")
    mobile: str
    createdAt: datetime = Field(default_factory=utcnow)


class Login(BaseModel):
    """Append-only audit row written on every successful login."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    userId: ObjectId
    name: str
    email: str
    ip: Optional[str] = None
    loggedAt: datetime = Field(default_factory=utcnow)


class SiteStats(BaseModel):
    totalVisits: int = 0
