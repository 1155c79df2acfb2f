"""
Pydantic models for board data.

``BoardRead`` mirrors a row of the ``boards`` table.  ``BoardDetail``
is the fully assembled board returned by ``GET /boards/{name}``:
board columns, the owner and the sections of the requested layout
with their apps and widgets.  Sections and items are returned as
plain dictionaries because their keys depend on the section type
(see ``services.board_mapping``).

``BoardCustomization`` is the request body for updating the
appearance of a board.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

# Board names double as config file names, so only a safe subset of
# characters is allowed.
BOARD_NAME_PATTERN = r"^[a-zA-Z0-9-_]+$"

ColorName = Literal[
    "dark",
    "gray",
    "red",
    "pink",
    "grape",
    "violet",
    "indigo",
    "blue",
    "cyan",
    "green",
    "lime",
    "yellow",
    "orange",
    "teal",
]


class BoardBase(BaseModel):
    name: str = Field(..., example="default")
    allow_guests: bool = False
    is_left_sidebar_visible: bool = False
    is_right_sidebar_visible: bool = False
    is_ping_enabled: bool = False
    app_opacity: int = Field(100, example=100)
    background_image_url: Optional[str] = None
    primary_color: str = Field("red", example="red")
    secondary_color: str = Field("orange", example="orange")
    primary_shade: int = Field(6, example=6)
    custom_css: Optional[str] = None
    page_title: Optional[str] = Field(None, example="Homelab")
    meta_title: Optional[str] = None
    logo_image_url: Optional[str] = None
    favicon_image_url: Optional[str] = None


class BoardRead(BoardBase):
    """Schema for reading a board row from the API."""

    id: str
    owner_id: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class BoardOwner(BaseModel):
    id: str
    name: str


class BoardDetail(BoardBase):
    """A board with the sections, apps and widgets of one layout."""

    id: str
    owner: Optional[BoardOwner] = None
    sections: List[Dict[str, Any]] = Field(default_factory=list)


class BoardSummary(BaseModel):
    """Entry of the board list, computed from a board config file."""

    name: str
    count_apps: int
    count_widgets: int
    count_categories: int
    is_default_for_user: bool


class ContainerApp(BaseModel):
    """An external service (usually a container) to add as an app."""

    name: str = Field(..., example="jellyfin")
    port: Optional[int] = Field(None, ge=1, le=65535, example=8096)


class AddContainerApps(BaseModel):
    apps: List[ContainerApp]


class AccessCustomization(BaseModel):
    allow_guests: bool


class LayoutCustomization(BaseModel):
    left_sidebar_enabled: bool
    right_sidebar_enabled: bool
    pings_enabled: bool


class AppearanceCustomization(BaseModel):
    background_src: str = ""
    primary_color: ColorName = "red"
    secondary_color: ColorName = "orange"
    shade: int = Field(..., ge=0, le=9, example=6)
    opacity: int = Field(..., ge=0, le=100, example=100)
    custom_css: str = ""


class PageMetadataCustomization(BaseModel):
    page_title: str = ""
    meta_title: str = ""
    logo_src: str = ""
    favicon_src: str = ""


class BoardCustomization(BaseModel):
    """Schema for updating the look and access settings of a board."""

    access: AccessCustomization
    layout: LayoutCustomization
    appearance: AppearanceCustomization
    page_metadata: PageMetadataCustomization
