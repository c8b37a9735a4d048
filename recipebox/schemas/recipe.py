"""
RecipeBox Backend: Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the API contract for recipes.
How:   FastAPI serializes responses through these models; form fields are
       coerced through RecipeInput.from_form() and list parameters through
       RecipeQuery.
Who:   Route handlers and RecipeService.

Schemas are separate from the SQLAlchemy model: RecipeResponse fixes the
JSON field types (numbers, booleans, strings) no matter how SQLite stored
them, and RecipeInput carries only the fields a client may set.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from recipebox.exceptions import ValidationError

# Query-string spellings that switch a dietary filter on
TRUTHY_QUERY_VALUES = {"true", "1"}

SQLITE_INTEGER_MIN = -(2**63)
SQLITE_INTEGER_MAX = 2**63 - 1


# ══════════════════════════════════════════════════════════════════════════
# Input Models: what the client sends
# ══════════════════════════════════════════════════════════════════════════


class RecipeInput(BaseModel):
    """
    The mutable fields of a recipe, coerced from form strings.

    Used for both create and update: an update replaces every field,
    so there is no partial variant.

    Coercion rules:
        - protein, carbs: decimal strings ("12", "12.5")
        - cook_time: integer strings
        - is_*: 1/0, true/false, on/off, yes/no
        - blank or missing optional fields fall back to their defaults
        - cook_time must fit a signed 64-bit SQLite INTEGER
        - title must be present; a missing description is stored as ""
    """

    title: str = Field(description="Recipe title")
    description: str = Field(default="", description="Short description")
    protein: float = Field(default=0.0, description="Protein per serving (g)")
    carbs: float = Field(default=0.0, description="Carbohydrates per serving (g)")
    is_vegan: bool = Field(default=False)
    is_vegetarian: bool = Field(default=False)
    is_gluten_free: bool = Field(default=False)
    # SQLite INTEGER is a signed 64-bit value; larger ints overflow in the driver
    cook_time: int = Field(
        default=0, ge=SQLITE_INTEGER_MIN, le=SQLITE_INTEGER_MAX, description="Cook time in minutes"
    )
    difficulty: str = Field(default="medium")
    ingredients: str = Field(default="", description="Free text, opaque to the store")
    instructions: str = Field(default="", description="Free text, opaque to the store")

    model_config = {"allow_inf_nan": False}

    @field_validator(
        "protein", "carbs", "is_vegan", "is_vegetarian", "is_gluten_free",
        "cook_time", "difficulty",
        mode="before",
    )
    @classmethod
    def blank_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """An empty form field means "not supplied"."""
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v

    @classmethod
    def from_form(cls, fields: Mapping[str, Optional[str]]) -> "RecipeInput":
        """
        Build a RecipeInput from raw form values.

        Args:
            fields: Form field name → raw string (None when the field was absent)

        Raises:
            ValidationError: naming the first field that failed coercion
        """
        payload = {name: value for name, value in fields.items() if value is not None}
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as exc:
            errors: List[Dict[str, str]] = [
                {
                    "field": ".".join(str(part) for part in err["loc"]),
                    "message": err["msg"],
                }
                for err in exc.errors()
            ]
            first = errors[0]
            raise ValidationError(
                message=f"Invalid value for '{first['field']}': {first['message']}",
                field=first["field"],
                context={"errors": errors},
            ) from exc


class RecipeQuery(BaseModel):
    """
    Parameters of GET /api/recipes.

    Filter bounds are inclusive; a bound that is None or negative is
    skipped. Dietary flags are None when the parameter was absent,
    otherwise True only for "true" or "1".
    """

    min_protein: Optional[float] = None
    max_protein: Optional[float] = None
    min_carbs: Optional[float] = None
    max_carbs: Optional[float] = None
    vegan: Optional[bool] = None
    vegetarian: Optional[bool] = None
    gluten_free: Optional[bool] = None
    sort_by: Optional[str] = None
    order: str = "desc"

    @field_validator("vegan", "vegetarian", "gluten_free", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() in TRUTHY_QUERY_VALUES
        return v

    @property
    def has_filters(self) -> bool:
        """True when any filter parameter was present in the request."""
        return any(
            value is not None
            for value in (
                self.min_protein, self.max_protein,
                self.min_carbs, self.max_carbs,
                self.vegan, self.vegetarian, self.gluten_free,
            )
        )

    @property
    def has_sorting(self) -> bool:
        return self.sort_by is not None


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class RecipeResponse(BaseModel):
    """Full JSON representation of a stored recipe."""

    id: int = Field(description="Store-assigned identifier")
    title: str
    description: str
    image_url: str = Field(description="'/uploads/<file>' or empty string")
    protein: float
    carbs: float
    is_vegan: bool
    is_vegetarian: bool
    is_gluten_free: bool
    cook_time: int
    difficulty: str
    ingredients: str
    instructions: str
    created_at: datetime = Field(description="Insert time (ISO 8601)")

    model_config = {"from_attributes": True}

    @field_validator("image_url", "ingredients", "instructions", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class RecipeMutationResponse(BaseModel):
    """
    Returned by POST (201) and PUT (200).

    `id` is repeated at the top level so clients can follow up with
    GET /api/recipes/{id} without digging into `recipe`.
    """

    message: str
    id: int
    recipe: RecipeResponse


class RecipeDeleteResponse(BaseModel):
    message: str = "Recipe deleted successfully"
    id: int


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every non-2xx JSON response.

    Example:
        {"error": "Recipe not found", "request_id": "a1b2c3d4"}
    """

    error: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
