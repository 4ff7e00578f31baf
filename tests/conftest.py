from __future__ import annotations

import copy
from dataclasses import dataclass
from itertools import count
from typing import Any

import pytest
from pymongo.errors import DuplicateKeyError

from jobboard_scraper.service.mongodb_service import MongoDBService


def _matches(document: dict, filters: dict | None) -> bool:
    for key, condition in (filters or {}).items():
        present = key in document
        value = document.get(key)
        if isinstance(condition, dict):
            if "$ne" in condition and value == condition["$ne"]:
                return False
            if "$exists" in condition and present != condition["$exists"]:
                return False
        elif value != condition:
            return False
    return True


@dataclass
class FakeUpdateResult:
    matched_count: int
    modified_count: int


class FakeCursor:
    def __init__(self, documents: list[dict]):
        self._documents = documents

    def sort(self, keys):
        for key, direction in reversed(keys):
            self._documents.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    def limit(self, size: int):
        self._documents = self._documents[:size]
        return self

    def __iter__(self):
        return iter(copy.deepcopy(self._documents))


class FakeCollection:
    """In-memory stand-in for a pymongo collection with a unique jobId index."""

    def __init__(self):
        self.documents: list[dict] = []
        self.indexes: list[Any] = []
        self._ids = count(1)

    def create_indexes(self, indexes):
        self.indexes.extend(indexes)
        return [str(index) for index in indexes]

    def find_one(self, filters=None, projection=None):
        for document in self.documents:
            if _matches(document, filters):
                if projection:
                    return {key: document[key] for key in projection if key in document}
                return copy.deepcopy(document)
        return None

    def find(self, filters=None):
        return FakeCursor([doc for doc in self.documents if _matches(doc, filters)])

    def insert_one(self, document: dict):
        if any(existing.get("jobId") == document.get("jobId") for existing in self.documents):
            raise DuplicateKeyError(f"E11000 duplicate key error jobId: {document.get('jobId')}", 11000)
        stored = copy.deepcopy(document)
        stored["_id"] = next(self._ids)
        self.documents.append(stored)
        return stored["_id"]

    def update_one(self, filters, update):
        for document in self.documents:
            if _matches(document, filters):
                changes = update.get("$set", {})
                modified = any(document.get(key) != value for key, value in changes.items())
                document.update(changes)
                return FakeUpdateResult(matched_count=1, modified_count=int(modified))
        return FakeUpdateResult(matched_count=0, modified_count=0)

    def count_documents(self, filters):
        return sum(1 for document in self.documents if _matches(document, filters))


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def store(collection) -> MongoDBService:
    return MongoDBService(database_name="test", collection_name="jobs", collection=collection)
