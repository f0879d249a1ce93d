# core/storage.py
"""
Submission persistence with a durable database backend and an in-memory fallback

The database store is used whenever a database is configured and answers a
ping; otherwise requests fall back to a process-lifetime list. Records are
never copied between the two. Both stores hand back serialized submissions
(plain dicts) so callers never touch ORM state.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from flask import Flask, current_app
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from core.database_models import ContactSubmission, db, isoformat, utcnow

logger = logging.getLogger(__name__)

MEMORY_STORE_KEY = 'contact_memory_store'

Submission = Dict[str, Any]


class StorageError(Exception):
    """Raised when the backing store fails an operation"""
    pass


@dataclass
class MemorySubmission:
    """Submission record kept by the in-memory store"""
    id: int
    name: str
    email: str
    subject: str
    message: str
    status: str = 'new'
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Submission:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'subject': self.subject,
            'message': self.message,
            'status': self.status,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class SubmissionStore(ABC):
    """Persistence interface shared by both backends"""

    source: str

    @abstractmethod
    def create(self, fields: Mapping[str, str]) -> Submission:
        """Store a new submission and return it"""

    @abstractmethod
    def list_all(self) -> List[Submission]:
        """Return every submission, newest first"""

    @abstractmethod
    def get_by_id(self, submission_id: str) -> Optional[Submission]:
        pass

    @abstractmethod
    def update_status(self, submission_id: str, status: str) -> Optional[Submission]:
        pass

    @abstractmethod
    def delete_by_id(self, submission_id: str) -> Optional[Submission]:
        """Remove the submission and return what was removed"""


class InMemorySubmissionStore(SubmissionStore):
    source = 'Memory'

    def __init__(self):
        self._submissions: List[MemorySubmission] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._submissions)

    def create(self, fields: Mapping[str, str]) -> Submission:
        with self._lock:
            submission = MemorySubmission(id=next(self._ids), **fields)
            self._submissions.append(submission)
        logger.info(f"Submission saved to memory: {submission.id}")
        return submission.to_dict()

    def list_all(self) -> List[Submission]:
        with self._lock:
            ordered = sorted(self._submissions,
                             key=lambda s: (s.created_at, s.id),
                             reverse=True)
            return [s.to_dict() for s in ordered]

    def get_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._lock:
            submission = self._find(submission_id)
            return submission.to_dict() if submission else None

    def update_status(self, submission_id: str, status: str) -> Optional[Submission]:
        with self._lock:
            submission = self._find(submission_id)
            if submission is None:
                return None
            submission.status = status
            submission.updated_at = utcnow()
            return submission.to_dict()

    def delete_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._lock:
            submission = self._find(submission_id)
            if submission is None:
                return None
            self._submissions.remove(submission)
            return submission.to_dict()

    def _find(self, submission_id) -> Optional[MemorySubmission]:
        # Only the canonical decimal spelling matches (no "01", "+1", "0_1")
        key = str(submission_id)
        return next((s for s in self._submissions if str(s.id) == key), None)


class DatabaseSubmissionStore(SubmissionStore):
    source = 'Database'

    def __init__(self, session=None):
        self.session = session or db.session

    @contextmanager
    def _transaction(self, action: str):
        try:
            yield self.session
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error while trying to {action}: {e}")
            raise StorageError(f"Failed to {action}") from e

    def create(self, fields: Mapping[str, str]) -> Submission:
        with self._transaction('create submission') as session:
            submission = ContactSubmission(**fields)
            session.add(submission)
            session.commit()
            logger.info(f"Submission saved to database: {submission.id}")
            return submission.to_dict()

    def list_all(self) -> List[Submission]:
        with self._transaction('list submissions') as session:
            query = select(ContactSubmission).order_by(ContactSubmission.created_at.desc())
            return [s.to_dict() for s in session.scalars(query)]

    def get_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._transaction('fetch submission') as session:
            submission = session.get(ContactSubmission, str(submission_id))
            return submission.to_dict() if submission else None

    def update_status(self, submission_id: str, status: str) -> Optional[Submission]:
        with self._transaction('update submission') as session:
            submission = session.get(ContactSubmission, str(submission_id))
            if submission is None:
                return None
            submission.status = status
            # Set explicitly: an unchanged status emits no UPDATE for onupdate to hook
            submission.updated_at = utcnow()
            session.commit()
            return submission.to_dict()

    def delete_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._transaction('delete submission') as session:
            submission = session.get(ContactSubmission, str(submission_id))
            if submission is None:
                return None
            deleted = submission.to_dict()
            session.delete(submission)
            session.commit()
            return deleted


def init_storage(app: Flask) -> InMemorySubmissionStore:
    """Attach the process-lifetime fallback store to the application"""
    store = InMemorySubmissionStore()
    app.extensions[MEMORY_STORE_KEY] = store
    return store


def database_configured(app: Optional[Flask] = None) -> bool:
    app = app or current_app
    return 'sqlalchemy' in app.extensions


def database_connected(app: Optional[Flask] = None) -> bool:
    """Ping the durable backend; False when it is unset or unreachable"""
    if not database_configured(app):
        return False
    try:
        db.session.execute(text('SELECT 1'))
        return True
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning(f"Database unreachable, using in-memory storage: {e}")
        return False


def get_submission_store() -> SubmissionStore:
    """Select the store for the current request"""
    if database_connected():
        return DatabaseSubmissionStore()
    return current_app.extensions[MEMORY_STORE_KEY]
