"""
Render contract for layout documents.

A storefront renderer receives a render plan: the active sections of a
document in order, each with its effective settings, its scoped style rules
and, for custom code sections, the markup to embed.
"""
from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional, Protocol, Sequence, TypeVar

from bs4 import BeautifulSoup

from storefront.domain.layout import LayoutDocument, Section, SectionKind
from storefront.domain.registry import effective_settings
from storefront.domain.style import Breakpoint, ScopedRule, format_css, resolve

logger = logging.getLogger(__name__)

T = TypeVar("T", covariant=True)

CUSTOM_CODE_POLICIES = ("strip", "trusted")

_UNSAFE_TAGS = ("script", "iframe", "object", "embed")
_URL_ATTRIBUTES = ("href", "src", "action", "formaction")


class RenderItem(NamedTuple):
    section: Section
    settings: dict
    rules: list[ScopedRule]
    markup: Optional[str] = None


class Renderer(Protocol[T]):
    def render(self, items: Sequence[RenderItem]) -> T: ...


def sanitize_custom_code(markup: str, policy: str = "strip") -> str:
    if policy not in CUSTOM_CODE_POLICIES:
        raise ValueError(f"Unknown custom code policy: {policy!r}")
    if policy == "trusted" or not markup:
        return markup or ""

    soup = BeautifulSoup(markup, "html.parser")

    removed = 0
    for tag in soup.find_all(list(_UNSAFE_TAGS)):
        tag.decompose()
        removed += 1

    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            value = tag.attrs[attr]
            if attr.lower().startswith("on"):
                del tag.attrs[attr]
                removed += 1
            elif attr.lower() in _URL_ATTRIBUTES and _is_script_url(value):
                del tag.attrs[attr]
                removed += 1

    if removed:
        logger.debug("Stripped %d unsafe nodes/attributes from custom code", removed)

    return str(soup)


def _is_script_url(value: Any) -> bool:
    if isinstance(value, list):
        value = " ".join(value)
    if not isinstance(value, str):
        return False
    return "".join(value.split()).lower().startswith("javascript:")


def build_render_plan(layout: LayoutDocument, custom_code_policy: str = "strip") -> list[RenderItem]:
    items = []
    for section in layout.sections:
        if not section.is_active:
            continue

        markup = None
        if section.kind is SectionKind.CUSTOM_CODE:
            markup = sanitize_custom_code(section.code, custom_code_policy)

        items.append(
            RenderItem(
                section=section,
                settings=effective_settings(section),
                rules=resolve(section.id, section.style),
                markup=markup,
            )
        )
    return items


def render_css(layout: LayoutDocument) -> str:
    rules = []
    for section in layout.sections:
        if section.is_active:
            rules.extend(resolve(section.id, section.style))

    tiers = list(Breakpoint)
    rules.sort(key=lambda rule: tiers.index(rule.breakpoint))
    return format_css(rules)
