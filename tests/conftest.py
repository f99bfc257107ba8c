import pytest
from unittest.mock import patch
from datetime import datetime, timedelta
import os
import sys

import pytz

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=pytz.utc)


class MockFirestoreDocument:
    """Mock Firestore document reference / snapshot"""

    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    @property
    def exists(self):
        return self.id in self.collection.documents

    def get(self):
        return self

    def to_dict(self):
        data = self.collection.documents.get(self.id)
        return dict(data) if data is not None else None


class MockFirestoreQuery:
    """Mock Firestore query supporting the operators the services use"""

    def __init__(self, collection, filters=None, ordering=None, max_results=None):
        self.collection = collection
        self.filters = filters or []
        self.ordering = ordering
        self.max_results = max_results

    def where(self, field, operator, value):
        return MockFirestoreQuery(self.collection, self.filters + [(field, operator, value)],
                                  self.ordering, self.max_results)

    def order_by(self, field, direction='ASCENDING'):
        return MockFirestoreQuery(self.collection, self.filters, (field, direction), self.max_results)

    def limit(self, count):
        return MockFirestoreQuery(self.collection, self.filters, self.ordering, count)

    def _matches(self, doc_id, data):
        for field, operator, value in self.filters:
            if field == '__name__':
                if operator != 'in':
                    raise NotImplementedError(operator)
                if doc_id not in [ref.id for ref in value]:
                    return False
                continue

            if field not in data:
                return False
            actual = data[field]
            if operator == '==' and actual != value:
                return False
            if operator == '>=' and not actual >= value:
                return False
            if operator == 'array_contains' and (not isinstance(actual, list) or value not in actual):
                return False
        return True

    def stream(self):
        self.collection.queries.append(self)
        if self.collection.fail_with is not None:
            raise self.collection.fail_with

        matched = [
            doc_id for doc_id, data in self.collection.documents.items()
            if self._matches(doc_id, data)
        ]
        if self.ordering:
            field, direction = self.ordering
            # Firestore omits documents missing the ordered field
            matched = [doc_id for doc_id in matched if field in self.collection.documents[doc_id]]
            matched.sort(key=lambda doc_id: self.collection.documents[doc_id][field],
                         reverse=direction == 'DESCENDING')
        if self.max_results is not None:
            matched = matched[:self.max_results]

        for doc_id in matched:
            yield MockFirestoreDocument(self.collection, doc_id)


class MockFirestoreCollection(MockFirestoreQuery):
    """Mock Firestore collection backed by a dict of documents"""

    def __init__(self, name):
        super().__init__(self)
        self.name = name
        self.documents = {}
        self.queries = []
        self.fail_with = None

    def document(self, doc_id):
        return MockFirestoreDocument(self, doc_id)

    def add_document(self, doc_id, data):
        self.documents[doc_id] = data


class MockFirestoreClient:
    """In-memory stand-in for firestore.client()"""

    def __init__(self):
        self.collections = {}

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = MockFirestoreCollection(name)
        return self.collections[name]


@pytest.fixture
def mock_db():
    return MockFirestoreClient()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def add_post(mock_db):
    """Insert a post; createdAt defaults to one hour before NOW"""
    counter = {'n': 0}

    def _add_post(user_id, likes=0, bookmarks=0, views=0, created_at=None, doc_id=None, **extra):
        counter['n'] += 1
        data = {
            'userId': user_id,
            'likes': likes,
            'bookmarks': bookmarks,
            'views': views,
            'createdAt': created_at or NOW - timedelta(hours=1, minutes=counter['n']),
        }
        data.update(extra)
        doc_id = doc_id or f"post-{counter['n']:04d}"
        mock_db.collection('posts').add_document(doc_id, data)
        return doc_id

    return _add_post


@pytest.fixture
def add_creator(mock_db):
    def _add_creator(user_id, status='approved', is_creator=True, **extra):
        data = {
            'displayName': f"Creator {user_id}",
            'isCreator': is_creator,
            'creatorStatus': status,
            'followers': 0,
            'monthlyEarnings': 0,
        }
        data.update(extra)
        mock_db.collection('users').add_document(user_id, data)

    return _add_creator


@pytest.fixture
def mock_auth():
    """Mock Firebase Auth used by the auth middleware"""
    with patch('firebase_admin.auth.verify_id_token') as mock_verify:
        mock_verify.return_value = {'uid': 'viewer-1'}
        yield mock_verify
