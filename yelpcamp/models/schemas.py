from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from yelpcamp.errors import ValidationFailure


class CampgroundForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: str = Field("", max_length=20)
    description: str = ""
    location: str = Field(..., min_length=1)

    @field_validator("name", "location")
    @classmethod
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class RegistrationForm(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email", "first_name", "last_name", "avatar")
    @classmethod
    def empty_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class CommentForm(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class ReviewForm(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    text: str = ""


class CampgroundPage(BaseModel):
    """One page of the listing; pages/current are None for search results."""
    campgrounds: List[Any]
    current: Optional[int] = None
    pages: Optional[int] = None
    search: Optional[str] = None


def parse_form(model, data):
    """Build a form model, converting pydantic errors to ValidationFailure."""
    try:
        return model(**data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "Invalid input")
        raise ValidationFailure(f"{field}: {message}" if field else message) from e
