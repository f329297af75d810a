from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from storefront.domain.exceptions import PersistenceFailure
from storefront.models.layout_document import LayoutDocumentRecord
from storefront.utils.audit import log_action
from storefront.utils.transaction import transactional


class SqlDocumentStore:
    """
    Keyed JSON document store backed by the ``layout_documents`` table.

    ``put`` upserts the whole document and records an audit entry in the
    same transaction.
    """

    def __init__(self, actor_id: Optional[str] = None):
        self.actor_id = actor_id

    def get(self, key: str) -> Optional[dict]:
        try:
            record = LayoutDocumentRecord.query.filter_by(scope_id=key).first()
        except SQLAlchemyError as exc:
            raise PersistenceFailure("load", key, str(exc)) from exc

        if record is None:
            return None
        return dict(record.document or {})

    def put(self, key: str, document: dict) -> None:
        try:
            with transactional() as session:
                record = LayoutDocumentRecord.query.filter_by(scope_id=key).first()
                created = record is None

                if created:
                    record = LayoutDocumentRecord()
                    record.scope_id = key
                    session.add(record)

                record.document = document
                session.flush()

                log_action(
                    action="layout.save",
                    entity_type="layout",
                    entity_id=key,
                    payload={
                        "created": created,
                        "sections": len(document.get("sections", [])),
                    },
                    actor_id=self.actor_id,
                )
        except SQLAlchemyError as exc:
            raise PersistenceFailure("save", key, str(exc)) from exc
