from webfiles.core.core import Service
from webfiles.core.modules.auth.models import AuthContext
from webfiles.errors import AuthenticationError


class AccessService(Service):
    def ensure_authenticated(self, context: AuthContext) -> str:
        """Ensure the request is authenticated and return its identity."""
        if not context.authenticated or not context.identity:
            raise AuthenticationError
        return context.identity

    async def ensure_file_owner(self, context: AuthContext, uid: str) -> AuthContext:
        """Ensure the authenticated identity owns uid, returning the authorized context."""
        identity = self.ensure_authenticated(context)
        if not await self.core.services.ownership.is_owned_by(identity, uid):
            self.logger.info("file_access_denied", identity=identity, uid=uid)
            raise AuthenticationError(f"Unauthorized for file {uid}")
        return context.with_authorized()
