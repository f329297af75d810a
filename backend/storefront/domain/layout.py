from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from .style import StyleConfig


class SectionKind(str, Enum):
    HERO = "Hero"
    COLLECTIONS = "Collections"
    NEW_ARRIVALS = "NewArrivals"
    BEST_SELLERS = "BestSellers"
    VIDEOS = "Videos"
    TESTIMONIALS = "Testimonials"
    NEWSLETTER = "Newsletter"
    CUSTOM_CODE = "CustomCode"


class Section(BaseModel):
    """
    One configurable block of a page layout.

    Sections are immutable values: edits produce a new Section through
    ``model_copy`` so that references held elsewhere never change.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: SectionKind
    title: Optional[str] = None
    is_active: bool = True
    settings: dict[str, Any] = Field(default_factory=dict)
    code: str = ""
    style: Optional[StyleConfig] = None


class LayoutDocument(BaseModel):
    """Ordered sections bound to one scope (the homepage or an entity page)."""

    model_config = ConfigDict(frozen=True)

    GLOBAL_SCOPE: ClassVar[str] = "global"

    scope_id: str
    sections: tuple[Section, ...] = ()

    @property
    def is_global(self) -> bool:
        return self.scope_id == self.GLOBAL_SCOPE

    def index_of(self, section_id: str) -> Optional[int]:
        for index, section in enumerate(self.sections):
            if section.id == section_id:
                return index
        return None

    def find(self, section_id: str) -> Optional[Section]:
        index = self.index_of(section_id)
        return None if index is None else self.sections[index]
