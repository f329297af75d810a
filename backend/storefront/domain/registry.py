"""
Section registry: the closed set of section kinds, the settings each kind
understands, and factories for new sections.

Settings schemas exist for authoring-time form generation. They are not a
runtime validator: stored settings may be partial or carry unknown keys.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Literal, Mapping, NamedTuple, Optional, get_args, get_origin

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .exceptions import UnknownSectionKind
from .invariants.exceptions import InvariantViolation
from .layout import LayoutDocument, Section, SectionKind
from .style import StyleConfig

logger = logging.getLogger(__name__)

CUSTOM_CODE_PLACEHOLDER = (
    '<div class="py-20 text-center bg-gray-100">\n'
    '  <h2 class="text-4xl font-bold">Custom Title</h2>\n'
    "</div>"
)

ALL_ACTIVE_ITEMS = "all-active"


# ------------------------------------------------------------------
# Settings per kind
# ------------------------------------------------------------------

class SectionSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class HeroSettings(SectionSettings):
    subtitle: str = "Discover the new season"
    image_url: str = ""
    cta_label: str = "Shop Now"
    cta_link: str = "/shop"
    text_position: Literal["left", "center", "right"] = "center"
    overlay: bool = True
    min_height: str = "80vh"


class ProductGridSettings(SectionSettings):
    """Shared by the product listing kinds (collections, new arrivals, best sellers)."""
    subtitle: str = ""
    data_source: str = ALL_ACTIVE_ITEMS
    limit: int = 4
    items_per_row: int = 4
    is_slider: bool = False
    card_style: Literal["standard", "minimal", "bordered", "elevated"] = "standard"
    show_variants: bool = True
    show_wishlist: bool = True
    show_new_badge: bool = True


class VideosSettings(SectionSettings):
    subtitle: str = ""
    data_source: str = ALL_ACTIVE_ITEMS
    limit: int = 6
    autoplay: bool = True
    is_slider: bool = True


class TestimonialsSettings(SectionSettings):
    subtitle: str = ""
    limit: int = 3
    show_rating: bool = True
    is_slider: bool = False


class NewsletterSettings(SectionSettings):
    subtitle: str = "Subscribe for early access and exclusive offers."
    placeholder: str = "Enter your email"
    button_label: str = "Subscribe"
    background_color: str = ""


class CustomCodeSettings(SectionSettings):
    # CustomCode renders its raw markup and bypasses settings-driven rendering
    pass


_REGISTRY: dict[SectionKind, type[SectionSettings]] = {
    SectionKind.HERO: HeroSettings,
    SectionKind.COLLECTIONS: ProductGridSettings,
    SectionKind.NEW_ARRIVALS: ProductGridSettings,
    SectionKind.BEST_SELLERS: ProductGridSettings,
    SectionKind.VIDEOS: VideosSettings,
    SectionKind.TESTIMONIALS: TestimonialsSettings,
    SectionKind.NEWSLETTER: NewsletterSettings,
    SectionKind.CUSTOM_CODE: CustomCodeSettings,
}


class FieldSpec(NamedTuple):
    type: str  # number | string | boolean | enum
    default: Any
    choices: Optional[tuple] = None


# ------------------------------------------------------------------
# Lookups
# ------------------------------------------------------------------

def coerce_kind(kind: Any) -> SectionKind:
    """Accept a SectionKind or its wire name; anything else is unknown."""
    if isinstance(kind, SectionKind):
        resolved = kind
    elif isinstance(kind, str):
        try:
            resolved = SectionKind(kind)
        except ValueError:
            raise UnknownSectionKind(kind) from None
    else:
        raise UnknownSectionKind(kind)

    if resolved not in _REGISTRY:
        raise UnknownSectionKind(kind)
    return resolved


def _field_spec(annotation: Any, default: Any) -> FieldSpec:
    if get_origin(annotation) is Literal:
        return FieldSpec("enum", default, get_args(annotation))
    if annotation is bool:
        return FieldSpec("boolean", default)
    if annotation in (int, float):
        return FieldSpec("number", default)
    return FieldSpec("string", default)


def settings_schema(kind: Any) -> dict[str, FieldSpec]:
    model = _REGISTRY[coerce_kind(kind)]
    return {
        field.alias or name: _field_spec(field.annotation, field.default)
        for name, field in model.model_fields.items()
    }


def required_settings(kind: Any) -> tuple[str, ...]:
    return tuple(settings_schema(kind))


def default_settings(kind: Any) -> dict[str, Any]:
    return _REGISTRY[coerce_kind(kind)]().model_dump(by_alias=True)


def effective_settings(section: Section) -> dict[str, Any]:
    """Stored settings layered over the kind defaults."""
    return {**default_settings(section.kind), **section.settings}


def catalog() -> list[dict]:
    return [
        {
            "type": kind.value,
            "defaultTitle": f"New {kind.value} Section",
            "schema": {
                key: {
                    "type": spec.type,
                    "default": spec.default,
                    **({"choices": list(spec.choices)} if spec.choices else {}),
                }
                for key, spec in settings_schema(kind).items()
            },
        }
        for kind in _REGISTRY
    ]


# ------------------------------------------------------------------
# Factories
# ------------------------------------------------------------------

def new_section_id() -> str:
    return uuid.uuid4().hex


def create_default_section(kind: Any) -> Section:
    """
    Build a new active section of the given kind with every default setting.

    Raises:
        UnknownSectionKind: kind is not registered
    """
    kind = coerce_kind(kind)
    return Section(
        id=new_section_id(),
        kind=kind,
        title=f"New {kind.value} Section",
        is_active=True,
        settings=default_settings(kind),
        code=CUSTOM_CODE_PLACEHOLDER if kind is SectionKind.CUSTOM_CODE else "",
    )


# ------------------------------------------------------------------
# Permissive decode (storage / wire form -> domain)
# ------------------------------------------------------------------

def decode_section(raw: Any) -> Section:
    if not isinstance(raw, Mapping):
        raise InvariantViolation("Each section must be a JSON object")

    kind = coerce_kind(raw.get("type", raw.get("kind")))

    section_id = raw.get("id")
    if not isinstance(section_id, str) or not section_id:
        section_id = new_section_id()
        logger.warning("Section of kind %s had no id, assigned %s", kind.value, section_id)

    title = raw.get("title")
    is_active = raw.get("isActive", True)
    settings = raw.get("settings")
    code = raw.get("code")

    return Section(
        id=section_id,
        kind=kind,
        title=title if isinstance(title, str) else None,
        is_active=is_active if isinstance(is_active, bool) else True,
        settings=dict(settings) if isinstance(settings, Mapping) else {},
        code=code if isinstance(code, str) else "",
        style=StyleConfig.decode(raw.get("style")),
    )


def decode_layout(raw: Any, scope_id: str) -> LayoutDocument:
    if raw is None:
        return LayoutDocument(scope_id=scope_id)
    if not isinstance(raw, Mapping):
        raise InvariantViolation("Layout document must be a JSON object")

    sections = raw.get("sections", [])
    if sections is None:
        sections = []
    if not isinstance(sections, (list, tuple)):
        raise InvariantViolation("'sections' must be a list")

    return LayoutDocument(
        scope_id=scope_id,
        sections=tuple(decode_section(item) for item in sections),
    )
