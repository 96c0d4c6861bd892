"""
Database (table) records for Pagesmith.

Only the persisted shape lives here; views over these records are rendered
elsewhere.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import CamelModel, utc_now


class PropertyType(str, Enum):
    """Column types a database property can have."""

    TITLE = "title"
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    PERSON = "person"
    FILES = "files"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE = "phone"
    FORMULA = "formula"
    RELATION = "relation"
    ROLLUP = "rollup"
    CREATED_TIME = "created_time"
    CREATED_BY = "created_by"
    LAST_EDITED_TIME = "last_edited_time"
    LAST_EDITED_BY = "last_edited_by"


class ViewType(str, Enum):
    """Ways a database can be displayed."""

    TABLE = "table"
    BOARD = "board"
    GALLERY = "gallery"
    CALENDAR = "calendar"
    TIMELINE = "timeline"


class FilterCondition(str, Enum):
    """Conditions usable in a view filter."""

    EQUALS = "equals"
    DOES_NOT_EQUAL = "does_not_equal"
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "does_not_contain"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL_TO = "greater_than_or_equal_to"
    LESS_THAN_OR_EQUAL_TO = "less_than_or_equal_to"
    IS_BEFORE = "is_before"
    IS_AFTER = "is_after"


class PropertyOption(CamelModel):
    """A choice of a select or multi-select property."""

    id: str
    name: str
    color: str = "default"


class DatabaseProperty(CamelModel):
    """A column definition."""

    id: str
    name: str
    type: PropertyType
    options: Optional[List[PropertyOption]] = None
    required: Optional[bool] = None
    description: Optional[str] = None


class DatabaseEntry(CamelModel):
    """A row: property values keyed by property id."""

    id: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    created_by: str = "system"
    last_edited_by: str = "system"


class DatabaseFilter(CamelModel):
    id: str
    property_id: str
    condition: FilterCondition
    value: Any = None


class DatabaseSort(CamelModel):
    id: str
    property_id: str
    direction: Literal["ascending", "descending"] = "ascending"


class ViewProperty(CamelModel):
    property_id: str
    visible: bool = True
    width: Optional[int] = None


class DatabaseView(CamelModel):
    """A saved way of looking at a database."""

    id: str
    name: str
    type: ViewType = ViewType.TABLE
    filters: List[DatabaseFilter] = Field(default_factory=list)
    sorts: List[DatabaseSort] = Field(default_factory=list)
    group_by: Optional[str] = None
    properties: List[ViewProperty] = Field(default_factory=list)
    is_default: bool = False


class Database(CamelModel):
    """
    A structured collection of entries sharing a property schema.
    """

    id: str = Field(
        ...,
        description="Identifier, unique across all databases"
    )

    title: str = Field(
        "",
        description="Display title"
    )

    description: Optional[str] = None

    properties: List[DatabaseProperty] = Field(
        default_factory=list,
        description="Column definitions"
    )

    entries: List[DatabaseEntry] = Field(
        default_factory=list,
        description="Rows of the database"
    )

    views: List[DatabaseView] = Field(
        default_factory=list,
        description="Saved views"
    )

    workspace_id: str = "default_workspace"
    created_by: str = "system"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
