from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic.alias_generators import to_camel, to_snake

from storefront.domain.invariants.exceptions import InvariantViolation
from storefront.domain.layout import LayoutDocument, Section
from storefront.domain.registry import create_default_section
from storefront.domain.style import STYLE_PROPERTIES, Breakpoint, StyleConfig

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


EDITABLE_FIELDS = ("title", "code", "style")


class LayoutAuthoringController:
    """
    In-memory editing session over one layout document.

    Every edit swaps in a new document; sections that were not touched are
    carried over as the same objects. Edits that name a section id not in
    the document leave it unchanged.
    """

    def __init__(self, document: LayoutDocument):
        self._document = document
        self._dirty = False

    @property
    def document(self) -> LayoutDocument:
        return self._document

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    # -------------------------------------------------
    # Structure
    # -------------------------------------------------
    def add_section(self, kind: Any) -> LayoutDocument:
        section = create_default_section(kind)
        logger.debug("Adding %s section %s to '%s'", section.kind.value, section.id, self._document.scope_id)
        return self._replace(self._document.sections + (section,))

    def remove_section(self, section_id: str) -> LayoutDocument:
        if self._document.index_of(section_id) is None:
            return self._document
        return self._replace(s for s in self._document.sections if s.id != section_id)

    def move_section(self, section_id: str, direction: Any) -> LayoutDocument:
        try:
            direction = Direction(direction)
        except ValueError:
            raise InvariantViolation(f"Unknown move direction: {direction!r}")

        index = self._document.index_of(section_id)
        if index is None:
            return self._document

        target = index - 1 if direction is Direction.UP else index + 1
        if target < 0 or target >= len(self._document.sections):
            return self._document

        sections = list(self._document.sections)
        sections[index], sections[target] = sections[target], sections[index]
        return self._replace(sections)

    # -------------------------------------------------
    # Content
    # -------------------------------------------------
    def set_active(self, section_id: str, active: bool) -> LayoutDocument:
        if not isinstance(active, bool):
            raise InvariantViolation(f"'active' must be true or false, got {active!r}")
        return self._update_section(section_id, is_active=active)

    def update_settings(self, section_id: str, key: str, value: Any) -> LayoutDocument:
        if not isinstance(key, str) or not key:
            raise InvariantViolation(f"Setting key must be a non-empty string, got {key!r}")
        section = self._document.find(section_id)
        if section is None:
            return self._document
        return self._update_section(section_id, settings={**section.settings, key: value})

    def update_field(self, section_id: str, field: str, value: Any) -> LayoutDocument:
        if field not in EDITABLE_FIELDS:
            raise InvariantViolation(f"Field {field!r} cannot be edited")

        if field == "style":
            value = StyleConfig.decode(value)
        elif field == "code":
            value = "" if value is None else str(value)
        elif value is not None:
            value = str(value)

        return self._update_section(section_id, **{field: value})

    def update_style(self, section_id: str, key: str, value: Any, breakpoint: Any = Breakpoint.BASE) -> LayoutDocument:
        """
        Set one style property for a breakpoint.

        Base values go into the style itself, laptop and mobile values into
        the matching override. ``None`` clears the property.
        """
        try:
            breakpoint = Breakpoint(breakpoint)
        except ValueError:
            raise InvariantViolation(f"Unknown breakpoint: {breakpoint!r}")

        field = to_snake(key) if isinstance(key, str) else None
        if field not in STYLE_PROPERTIES:
            raise InvariantViolation(f"Unknown style property: {key!r}")

        section = self._document.find(section_id)
        if section is None:
            return self._document

        raw = section.style.to_dict() if section.style is not None else {}
        if breakpoint is Breakpoint.BASE:
            raw[to_camel(field)] = value
        else:
            override = dict(raw.get(breakpoint.value) or {})
            override[to_camel(field)] = value
            raw[breakpoint.value] = override

        return self._update_section(section_id, style=StyleConfig.decode(raw))

    # -------------------------------------------------
    # Session
    # -------------------------------------------------
    def commit(self) -> LayoutDocument:
        return self._document

    def publish(self, store) -> LayoutDocument:
        document = self.commit()
        store.save(document)
        self._dirty = False
        return document

    def apply(self, operations: Iterable[Mapping]) -> LayoutDocument:
        for operation in operations:
            if not isinstance(operation, Mapping):
                raise InvariantViolation("Each operation must be a JSON object")

            op = operation.get("op")
            if op == "add":
                self.add_section(_require(operation, "type"))
            elif op == "remove":
                self.remove_section(_require(operation, "id"))
            elif op == "move":
                self.move_section(_require(operation, "id"), _require(operation, "direction"))
            elif op == "set_active":
                self.set_active(_require(operation, "id"), _require(operation, "active"))
            elif op == "update_settings":
                self.update_settings(
                    _require(operation, "id"),
                    _require(operation, "key"),
                    operation.get("value"),
                )
            elif op == "update_field":
                self.update_field(
                    _require(operation, "id"),
                    _require(operation, "field"),
                    operation.get("value"),
                )
            elif op == "update_style":
                self.update_style(
                    _require(operation, "id"),
                    _require(operation, "key"),
                    operation.get("value"),
                    operation.get("breakpoint", Breakpoint.BASE.value),
                )
            else:
                raise InvariantViolation(f"Unknown layout operation: {op!r}")

        return self._document

    # -------------------------------------------------
    # Internals
    # -------------------------------------------------
    def _replace(self, sections: Iterable[Section]) -> LayoutDocument:
        self._document = self._document.model_copy(update={"sections": tuple(sections)})
        self._dirty = True
        return self._document

    def _update_section(self, section_id: str, **changes) -> LayoutDocument:
        index = self._document.index_of(section_id)
        if index is None:
            logger.debug("Section %s not in '%s', edit ignored", section_id, self._document.scope_id)
            return self._document

        sections = list(self._document.sections)
        sections[index] = sections[index].model_copy(update=changes)
        return self._replace(sections)


def _require(operation: Mapping, key: str) -> Any:
    if key not in operation:
        raise InvariantViolation(f"Operation {operation.get('op')!r} requires '{key}'")
    return operation[key]
