from typing import Any

from strawberry.permission import BasePermission
from strawberry.types import Info

from accounts_api.core.exceptions import AppError, ForbiddenError, UnauthorizedError
from accounts_api.models.user import UserRole


def _extensions(error: AppError) -> dict[str, Any]:
    return {"code": error.code, "status": error.status_code}


class IsAuthenticated(BasePermission):
    message = UnauthorizedError().message
    error_extensions = _extensions(UnauthorizedError())

    def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
        return info.context.user is not None


class HasRole(BasePermission):
    roles: tuple[UserRole, ...] = ()
    message = ForbiddenError().message
    error_extensions = _extensions(ForbiddenError())

    def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
        user = info.context.user
        return user is not None and user.role in {role.value for role in self.roles}


class IsAdmin(HasRole):
    roles = (UserRole.ADMIN,)
