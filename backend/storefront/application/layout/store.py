"""
Layout document store adapter.

Talks to a keyed persistence collaborator (``get(key)`` / ``put(key, doc)``)
and converts between stored JSON documents and ``LayoutDocument`` values.
Saves replace the whole document; there is no per-section patching and no
merge between concurrent authors (last write wins).
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from storefront.domain.exceptions import PersistenceFailure
from storefront.domain.invariants.layout import assert_layout, assert_scope_id
from storefront.domain.layout import LayoutDocument
from storefront.domain.registry import decode_layout
from storefront.normalizers.layout import normalize_layout

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def get(self, key: str) -> Optional[dict]: ...
    def put(self, key: str, document: dict) -> None: ...


class LayoutStore:
    def __init__(self, documents: DocumentStore):
        self.documents = documents

    def load(self, scope_id: str, inherit_from: Optional[str] = None) -> LayoutDocument:
        """
        Fetch the layout for a scope.

        A scope with nothing stored yields an empty layout. When
        ``inherit_from`` names a template scope, a scope with nothing stored
        starts from a copy of the template's sections instead.
        """
        assert_scope_id(scope_id)
        raw = self._get(scope_id)

        if raw is None and inherit_from and inherit_from != scope_id:
            raw = self._get(inherit_from)
            if raw is not None:
                logger.debug("Layout '%s' inherits from '%s'", scope_id, inherit_from)

        if raw is None:
            logger.debug("No layout stored for '%s'", scope_id)

        return decode_layout(raw, scope_id)

    def save(self, layout: LayoutDocument) -> None:
        assert_layout(layout)
        document = normalize_layout(layout)

        try:
            self.documents.put(layout.scope_id, document)
        except PersistenceFailure:
            raise
        except Exception as exc:
            logger.error("Saving layout '%s' failed: %s", layout.scope_id, exc)
            raise PersistenceFailure("save", layout.scope_id, str(exc)) from exc

        logger.info("Saved layout '%s' (%d sections)", layout.scope_id, len(layout.sections))

    def _get(self, scope_id: str) -> Optional[dict]:
        try:
            return self.documents.get(scope_id)
        except PersistenceFailure:
            raise
        except Exception as exc:
            logger.error("Loading layout '%s' failed: %s", scope_id, exc)
            raise PersistenceFailure("load", scope_id, str(exc)) from exc
