"""
Responsive style resolution for layout sections.

A section's ``StyleConfig`` holds a base set of visual properties plus
optional ``laptop`` and ``mobile`` override bags. ``resolve()`` maps it to an
ordered list of ``ScopedRule`` entries scoped to the section's rendered
subtree; ``format_css()`` turns those rules into CSS text.

Rules are emitted base -> laptop -> mobile so that applying them in order
with last-wins semantics gives the narrower breakpoint priority.
"""
from __future__ import annotations

import math
import re
from enum import Enum
from itertools import groupby
from typing import Any, Callable, Literal, Mapping, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class Breakpoint(str, Enum):
    BASE = "base"
    LAPTOP = "laptop"
    MOBILE = "mobile"


MEDIA_QUERIES = {
    Breakpoint.LAPTOP: "(max-width: 1024px)",
    Breakpoint.MOBILE: "(max-width: 768px)",
}

_NON_NEGATIVE_NUMBERS = (
    "padding_top",
    "padding_bottom",
    "padding_left",
    "padding_right",
    "image_border_radius",
    "title_font_size",
    "price_font_size",
    "short_desc_font_size",
)
_SIGNED_NUMBERS = ("margin_top", "margin_bottom", "margin_left", "margin_right")
_LENGTHS = ("container_max_width", "image_width", "image_height")
_TEXTS = ("background_color", "text_color")
_TEXT_ALIGNMENTS = ("left", "center", "right", "justify")
_CSS_BREAKOUT = re.compile(r"[;{}<>\\]")

Number = Union[int, float]


def _as_number(value: Any, allow_negative: bool = False) -> Optional[Number]:
    """Return a finite number or None for anything malformed."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        if not math.isfinite(value):
            return None
    except OverflowError:
        return None
    if value < 0 and not allow_negative:
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _as_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    # a value must stay inside its own declaration
    if _CSS_BREAKOUT.search(value):
        return None
    return value or None


def _as_length(value: Any) -> Optional[Union[str, Number]]:
    if isinstance(value, str):
        return _as_text(value)
    return _as_number(value)


class StyleProperties(BaseModel):
    """One tier of visual properties (base, or a breakpoint override)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    padding_top: Optional[Number] = None
    padding_bottom: Optional[Number] = None
    padding_left: Optional[Number] = None
    padding_right: Optional[Number] = None
    margin_top: Optional[Number] = None
    margin_bottom: Optional[Number] = None
    margin_left: Optional[Number] = None
    margin_right: Optional[Number] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    text_align: Optional[str] = None
    container_max_width: Optional[Union[str, Number]] = None
    image_width: Optional[Union[str, Number]] = None
    image_height: Optional[Union[str, Number]] = None
    image_border_radius: Optional[Number] = None
    image_align: Optional[Literal["left", "center", "right"]] = None
    title_font_size: Optional[Number] = None
    price_font_size: Optional[Number] = None
    short_desc_font_size: Optional[Number] = None

    @field_validator(*_NON_NEGATIVE_NUMBERS, mode="before")
    @classmethod
    def _non_negative(cls, value):
        return _as_number(value)

    @field_validator(*_SIGNED_NUMBERS, mode="before")
    @classmethod
    def _signed(cls, value):
        return _as_number(value, allow_negative=True)

    @field_validator(*_LENGTHS, mode="before")
    @classmethod
    def _length(cls, value):
        return _as_length(value)

    @field_validator(*_TEXTS, mode="before")
    @classmethod
    def _text(cls, value):
        return _as_text(value)

    @field_validator("text_align", mode="before")
    @classmethod
    def _text_align(cls, value):
        value = _as_text(value)
        if value is None:
            return None
        value = value.lower()
        return value if value in _TEXT_ALIGNMENTS else None

    @field_validator("image_align", mode="before")
    @classmethod
    def _align(cls, value):
        value = _as_text(value)
        if value is None:
            return None
        value = value.lower()
        return value if value in ("left", "center", "right") else None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class StyleConfig(StyleProperties):
    laptop: Optional[StyleProperties] = None
    mobile: Optional[StyleProperties] = None

    @field_validator("laptop", "mobile", mode="before")
    @classmethod
    def _override(cls, value):
        if isinstance(value, StyleProperties):
            return value
        if isinstance(value, Mapping):
            return StyleProperties.model_validate(dict(value))
        return None

    @classmethod
    def decode(cls, raw: Any) -> Optional["StyleConfig"]:
        """Permissive decode: anything that is not a mapping means 'no style'."""
        if isinstance(raw, StyleConfig):
            return raw
        if not isinstance(raw, Mapping):
            return None
        return cls.model_validate(dict(raw))

    def tier(self, breakpoint: Breakpoint) -> Optional[StyleProperties]:
        if breakpoint is Breakpoint.BASE:
            return self
        return getattr(self, breakpoint.value)


class ScopedRule(NamedTuple):
    selector: str
    breakpoint: Breakpoint
    declarations: tuple[tuple[str, str], ...]


# ------------------------------------------------------------------
# Property mapping
# ------------------------------------------------------------------

def _px(value: Any, allow_negative: bool = False) -> Optional[str]:
    number = _as_number(value, allow_negative=allow_negative)
    return None if number is None else f"{number}px"


def _css_length(value: Any) -> Optional[str]:
    value = _as_length(value)
    if value is None:
        return None
    return value if isinstance(value, str) else f"{value}px"


def _single(css_property: str, convert: Callable[[Any], Optional[str]]):
    def declare(value):
        converted = convert(value)
        return ((css_property, converted),) if converted is not None else ()
    return declare


def _container_width(value):
    width = _css_length(value)
    if width is None:
        return ()
    return (("max-width", width), ("width", "100%"))


_ALIGNMENTS = {
    "left": (("margin-left", "0"), ("margin-right", "auto"), ("text-align", "left")),
    "center": (("margin-left", "auto"), ("margin-right", "auto"), ("text-align", "center")),
    "right": (("margin-left", "auto"), ("margin-right", "0"), ("text-align", "right")),
}


def _image_align(value):
    if not isinstance(value, str):
        return ()
    return _ALIGNMENTS.get(value.strip().lower(), ())


def _signed_px(value):
    return _px(value, allow_negative=True)


# (field, selector suffix, declaration builder); order is emission order
_PROPERTY_MAP = (
    ("padding_top", "", _single("padding-top", _px)),
    ("padding_bottom", "", _single("padding-bottom", _px)),
    ("padding_left", "", _single("padding-left", _px)),
    ("padding_right", "", _single("padding-right", _px)),
    ("margin_top", "", _single("margin-top", _signed_px)),
    ("margin_bottom", "", _single("margin-bottom", _signed_px)),
    ("margin_left", "", _single("margin-left", _signed_px)),
    ("margin_right", "", _single("margin-right", _signed_px)),
    ("background_color", "", _single("background-color", _as_text)),
    ("text_color", "", _single("color", _as_text)),
    ("text_align", "", _single("text-align", _as_text)),
    ("container_max_width", " .dynamic-container", _container_width),
    ("image_width", " .dynamic-img", _single("width", _css_length)),
    ("image_height", " .dynamic-img", _single("height", _css_length)),
    ("image_border_radius", " .dynamic-img", _single("border-radius", _px)),
    # alignment positions the wrapper, not the image itself
    ("image_align", " .img-wrapper", _image_align),
    ("title_font_size", " .dynamic-title", _single("font-size", _px)),
    ("price_font_size", " .dynamic-price", _single("font-size", _px)),
    ("short_desc_font_size", " .dynamic-desc", _single("font-size", _px)),
)

STYLE_PROPERTIES = tuple(field for field, _, _ in _PROPERTY_MAP)


def section_selector(section_id: str) -> str:
    return f"#sec-{section_id}"


def _resolve_tier(root: str, breakpoint: Breakpoint, props: StyleProperties) -> list[ScopedRule]:
    rules = []
    for field, suffix, declare in _PROPERTY_MAP:
        declarations = declare(getattr(props, field, None))
        if declarations:
            rules.append(ScopedRule(f"{root}{suffix}", breakpoint, declarations))
    return rules


def resolve(section_id: str, style: Optional[StyleConfig | Mapping]) -> list[ScopedRule]:
    """
    Resolve a section style into scoped rules.

    Returns one rule per defined property, base rules first, then laptop,
    then mobile. Undefined, empty or malformed values produce no rule.
    Never raises for bad style input.
    """
    if style is None:
        return []
    if not isinstance(style, StyleConfig):
        style = StyleConfig.decode(style)
        if style is None:
            return []

    root = section_selector(section_id)
    rules: list[ScopedRule] = []
    for breakpoint in Breakpoint:
        props = style.tier(breakpoint)
        if props is not None:
            rules.extend(_resolve_tier(root, breakpoint, props))
    return rules


def effective_style(style: Optional[StyleConfig], breakpoint: Breakpoint = Breakpoint.BASE) -> dict:
    """Property values in effect at a breakpoint (wire names)."""
    if style is None:
        return {}
    merged = style.model_dump(by_alias=True, exclude_none=True, exclude={"laptop", "mobile"})
    tiers = {
        Breakpoint.BASE: (),
        Breakpoint.LAPTOP: (style.laptop,),
        Breakpoint.MOBILE: (style.laptop, style.mobile),
    }[Breakpoint(breakpoint)]
    for override in tiers:
        if override is not None:
            merged.update(override.to_dict())
    return merged


def format_css(rules: list[ScopedRule], important: bool = True) -> str:
    """Serialize resolved rules into CSS text, grouping by breakpoint and selector."""
    suffix = " !important" if important else ""
    chunks = []
    for breakpoint, tier_rules in groupby(rules, key=lambda r: r.breakpoint):
        blocks = []
        for selector, selector_rules in groupby(tier_rules, key=lambda r: r.selector):
            body = " ".join(
                f"{prop}: {value}{suffix};"
                for rule in selector_rules
                for prop, value in rule.declarations
            )
            blocks.append(f"{selector} {{ {body} }}")
        if breakpoint is Breakpoint.BASE:
            chunks.extend(blocks)
        else:
            chunks.append(f"@media {MEDIA_QUERIES[breakpoint]} {{ {' '.join(blocks)} }}")
    return "\n".join(chunks)
