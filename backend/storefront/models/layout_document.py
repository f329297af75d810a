from storefront.extensions import db
from .base import BaseModel


class LayoutDocumentRecord(BaseModel):
    """One persisted layout per scope ("global" homepage or an entity page)."""
    __tablename__ = "layout_documents"

    scope_id = db.Column(db.String(200), nullable=False, unique=True, index=True)
    document = db.Column(db.JSON, nullable=False, default=dict)
