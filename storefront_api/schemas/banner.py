"""Schemas for banner endpoints (/store/banners, /admin/banners)."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BannerOut(BaseModel):
    """Banner as returned to the storefront and admin."""

    id: str
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    image_url: str
    mobile_image_url: str | None = None
    link: str
    alt_text: str | None = None
    placement: str
    section: str | None = None
    grid_size: str = "3x3"
    sort_order: int = 0
    is_active: bool = True
    dark_text: bool = False
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias=AliasChoices("metadata_", "metadata"))
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BannerFields(BaseModel):
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    image_url: str | None = None
    mobile_image_url: str | None = None
    link: str | None = None
    alt_text: str | None = None
    placement: str | None = None
    section: str | None = None
    grid_size: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None
    dark_text: bool | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    metadata: dict[str, Any] | None = None

    def to_changes(self) -> dict[str, Any]:
        """Fields sent by the client, keyed by model attribute."""
        changes = self.model_dump(exclude_unset=True)
        if "metadata" in changes:
            changes["metadata_"] = changes.pop("metadata")
        return changes


class BannerCreate(BannerFields):
    """Create body; image_url, link and placement are checked by the service."""


class BannerUpdate(BannerFields):
    """Partial update body."""


class BannerListResponse(BaseModel):
    banners: list[BannerOut]


class BannerResponse(BaseModel):
    banner: BannerOut
