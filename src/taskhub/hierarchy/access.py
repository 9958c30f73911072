# src/taskhub/hierarchy/access.py

from __future__ import annotations

import logging

from ..core.errors import NotFound
from ..core.ports import Document, EntityStore
from .validation import check_id

logger = logging.getLogger(__name__)


def load_owned(
    store: EntityStore,
    collection: str,
    doc_id: str,
    owner_id: str,
    *,
    entity: str,
) -> Document:
    """
    Fetch a document the caller owns.

    A foreign document is refused with the same NotFound as a missing one, so
    callers can't probe for other users' ids. The distinction is only logged.
    """
    doc_id = check_id(doc_id, f"{entity.lower()} ID")
    doc = store.find_by_id(collection, doc_id)
    if doc is None:
        raise NotFound(entity)
    if doc.get("owner_id") != owner_id:
        logger.info("Ownership check refused %s id=%s for user=%s", collection, doc_id, owner_id)
        raise NotFound(entity)
    return doc


def owns(store: EntityStore, collection: str, doc_id: str, owner_id: str) -> bool:
    """Existence + ownership probe used for reference checks (no exception on miss)."""
    doc = store.find_by_id(collection, doc_id)
    return doc is not None and doc.get("owner_id") == owner_id
