"""
Remote payload schemas.

Every API response is wrapped in the same envelope:
    {"success": bool, "message": str, "data": {...}}

The `data` member is narrowed with one model per endpoint so that no caller
works with raw dicts.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Any, Optional

from .course import Course
from .progress import Bookmark


class ApiResponse(BaseModel):
    success: bool = True
    message: str = ""
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str = ""
    email: str = ""
    role: str = "student"
    profile_completed: bool = Field(default=False, alias="profileCompleted")


class AuthData(BaseModel):
    user: User
    token: Optional[str] = None


class CourseData(BaseModel):
    course: Optional[Course] = None


class ProgressData(BaseModel):
    progress: dict[str, Annotated[float, Field(allow_inf_nan=False)]] = {}


class BookmarkData(BaseModel):
    bookmark: Optional[Bookmark] = None


class NotesData(BaseModel):
    notes: dict[str, dict[int, str]] = {}
