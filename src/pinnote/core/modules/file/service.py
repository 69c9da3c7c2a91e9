from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from pinnote.core.core import Service
from pinnote.core.modules.file.models import File, Project
from pinnote.errors import NotFoundError


class FileService(Service):
    """Looks up files and their projects. Upload and storage live outside this service."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._files = database.get_collection("files")
        self._projects = database.get_collection("projects")

    async def on_start(self) -> None:
        await self._files.create_index([("project_id", 1)])
        await self._projects.create_index([("reviewers", 1)])

    async def get_file(self, file_id: UUID) -> File:
        doc = await self._files.find_one({"_id": file_id})
        if doc is None:
            raise NotFoundError("File not found")
        return File.model_validate(doc)

    async def get_project(self, project_id: UUID) -> Project:
        doc = await self._projects.find_one({"_id": project_id})
        if doc is None:
            raise NotFoundError("Project not found")
        return Project.model_validate(doc)
