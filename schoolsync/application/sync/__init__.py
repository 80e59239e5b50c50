"""Live mirrors of store collections and records."""

from schoolsync.application.sync.base import MirrorState
from schoolsync.application.sync.collection_sync import CollectionSync, parse_filters
from schoolsync.application.sync.document_sync import DocumentSync

__all__ = ["CollectionSync", "DocumentSync", "MirrorState", "parse_filters"]
