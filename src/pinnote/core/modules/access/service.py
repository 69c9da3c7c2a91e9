from uuid import UUID

from pinnote.core.core import Service
from pinnote.core.modules.session.models import AuthToken
from pinnote.errors import AccessDeniedError


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken) -> UUID:
        """Ensure the caller is authenticated and return their user id."""
        return await self.core.services.session.get_authenticated_user_id(auth_token)

    async def ensure_file_access(self, auth_token: AuthToken, file_id: UUID) -> UUID:
        """Ensure the caller is the author or a reviewer of the file's project."""
        user_id = await self.ensure_authenticated(auth_token)
        file = await self.core.services.file.get_file(file_id)
        project = await self.core.services.file.get_project(file.project_id)
        if not project.has_member(user_id):
            raise AccessDeniedError(f"Access denied: user '{user_id}' cannot access file '{file_id}'")
        return user_id
