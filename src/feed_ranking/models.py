"""Catalog item model consumed by the ranker."""

from pydantic import BaseModel, ConfigDict, field_validator


class CatalogItem(BaseModel):
    """A candidate product as returned by catalog retrieval.

    Only ``id`` is required. Every other attribute may be missing on older
    catalog rows; the facets that depend on a missing attribute simply score
    zero for that item.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    name: str = ""
    store_name: str | None = None
    price_tag: float | None = None
    category: str | None = None
    categories: list[str | None] | None = None
    gender: str | None = None
    sizes: str | list[str] | None = None
    eta_text_runtime: str | None = None
    eta_text: str | None = None
    view_count: int | None = None

    @field_validator("view_count")
    @classmethod
    def clamp_view_count(cls, v: int | None) -> int | None:
        """A negative counter is treated as no views."""
        if v is not None and v < 0:
            return 0
        return v

    @property
    def eta_label(self) -> str | None:
        """Delivery-time label, preferring the per-store runtime estimate."""
        return self.eta_text_runtime or self.eta_text
