"""Shared pytest fixtures."""

import copy
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from pymongo import ReturnDocument

from pinnote.config import Config
from pinnote.core.core import Core
from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.file.models import File, Project
from pinnote.core.modules.session.models import Session
from pinnote.core.pagination import Page
from pinnote.utils import now

AUTHOR_ID = UUID("87654321-4321-8765-4321-876543218765")
REVIEWER_ID = UUID("11111111-2222-3333-4444-555555555555")
OUTSIDER_ID = UUID("99999999-8888-7777-6666-555555555555")
PROJECT_ID = UUID("12345678-1234-5678-1234-567812345678")
FILE_ID = UUID("abcdefab-cdef-abcd-efab-cdefabcdefab")
OTHER_FILE_ID = UUID("fedcbafe-dcba-fedc-bafe-dcbafedcbafe")

AUTHOR_TOKEN = "author-token"
REVIEWER_TOKEN = "reviewer-token"
OUTSIDER_TOKEN = "outsider-token"
EXPIRED_TOKEN = "expired-token"


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCursor:
    """Subset of AsyncCursor used by the services: sort, skip, limit, async iteration."""

    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list: str | list[tuple[str, int]], direction: int = 1) -> "FakeCursor":
        keys = [(key_or_list, direction)] if isinstance(key_or_list, str) else key_or_list
        for key, key_direction in reversed(keys):
            self._docs.sort(key=lambda doc, key=key: doc[key], reverse=key_direction == -1)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    def _window(self) -> list[dict[str, Any]]:
        docs = self._docs[self._skip :]
        return docs[: self._limit] if self._limit else docs

    async def to_list(self) -> list[dict[str, Any]]:
        return self._window()

    def __aiter__(self):  # noqa: ANN204
        return self._iterate()

    async def _iterate(self):  # noqa: ANN202
        for doc in self._window():
            yield doc


class InsertOneResult:
    def __init__(self, inserted_id: Any) -> None:
        self.inserted_id = inserted_id


class FakeCollection:
    """In-memory stand-in for the pymongo async collection API the services call."""

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.indexes: list[Any] = []

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return str(len(self.indexes))

    async def insert_one(self, doc: dict[str, Any]) -> InsertOneResult:
        self.docs.append(copy.deepcopy(doc))
        return InsertOneResult(doc.get("_id"))

    async def find_one(self, query: dict[str, Any], sort: list[tuple[str, int]] | None = None) -> dict[str, Any] | None:
        cursor = self.find(query)
        if sort:
            cursor.sort(sort)
        docs = await cursor.to_list()
        return docs[0] if docs else None

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(doc) for doc in self.docs if _matches(doc, query or {})])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for doc in self.docs if _matches(doc, query))

    async def find_one_and_update(
        self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False, return_document: Any = None
    ) -> dict[str, Any] | None:
        doc = next((doc for doc in self.docs if _matches(doc, query)), None)
        if doc is None:
            if not upsert:
                return None
            doc = dict(query)
            self.docs.append(doc)
        for key, amount in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + amount
        assert return_document is ReturnDocument.AFTER
        return copy.deepcopy(doc)


class FakeDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())


@pytest.fixture
def config() -> Config:
    return Config(
        database_url="mongodb://localhost:27017/pinnote_test",
        host="127.0.0.1",
        port=8000,
        debug=True,
        live_queue_size=4,
        live_keepalive_seconds=30.0,
    )


@pytest.fixture
def fake_db() -> FakeDatabase:
    """Database seeded with one project, two files and sessions for members and an outsider."""
    db = FakeDatabase()
    projects = db.get_collection("projects")
    files = db.get_collection("files")
    sessions = db.get_collection("sessions")

    projects.docs.append(Project(id=PROJECT_ID, name="Poster", author_id=AUTHOR_ID, reviewers=[REVIEWER_ID]).to_mongo())
    for file_id in (FILE_ID, OTHER_FILE_ID):
        files.docs.append(
            File(id=file_id, name="poster.png", path="/uploads/poster.png", project_id=PROJECT_ID, author_id=AUTHOR_ID).to_mongo()
        )

    expires = now() + timedelta(days=1)
    for token, user_id in ((AUTHOR_TOKEN, AUTHOR_ID), (REVIEWER_TOKEN, REVIEWER_ID), (OUTSIDER_TOKEN, OUTSIDER_ID)):
        sessions.docs.append(Session(user_id=user_id, auth_token=token, expires_at=expires).to_mongo())
    sessions.docs.append(Session(user_id=AUTHOR_ID, auth_token=EXPIRED_TOKEN, expires_at=now() - timedelta(minutes=1)).to_mongo())
    return db


@pytest_asyncio.fixture
async def core(config: Config, fake_db: FakeDatabase):  # noqa: ANN201
    """Started Core over the fake database."""
    instance = Core(config, fake_db)  # type: ignore[arg-type]
    await instance.on_start()
    yield instance
    await instance.on_stop()


class Seed:
    """Identifiers of the records in fake_db."""

    author_id = AUTHOR_ID
    reviewer_id = REVIEWER_ID
    outsider_id = OUTSIDER_ID
    project_id = PROJECT_ID
    file_id = FILE_ID
    other_file_id = OTHER_FILE_ID
    author_token = AUTHOR_TOKEN
    reviewer_token = REVIEWER_TOKEN
    outsider_token = OUTSIDER_TOKEN
    expired_token = EXPIRED_TOKEN


@pytest.fixture
def seed() -> type[Seed]:
    return Seed


@pytest.fixture
def make_comment():  # noqa: ANN201
    """Factory for Comment values with increasing numbers and timestamps."""
    counter = {"number": 0}
    base = datetime(2026, 1, 1, tzinfo=UTC)

    def factory(
        x: float | None = 50.0,
        y: float | None = 50.0,
        parent: Comment | None = None,
        file_id: UUID = FILE_ID,
        body: str = "Looks off",
    ) -> Comment:
        counter["number"] += 1
        number = counter["number"]
        if parent is not None:
            x = y = None
        return Comment(
            id=uuid4(),
            file_id=file_id,
            author_id=AUTHOR_ID,
            number=number,
            body=body,
            x=x,
            y=y,
            parent_id=parent.id if parent is not None else None,
            created_at=base + timedelta(seconds=number),
        )

    return factory


def page_of(comments: list[Comment], page: int, limit: int) -> Page[Comment]:
    """Slice a newest-first list the way the store would."""
    start = (page - 1) * limit
    return Page(items=comments[start : start + limit], page=page, limit=limit, total=len(comments))


@pytest.fixture
def paginate():  # noqa: ANN201
    return page_of
