import uuid
from datetime import datetime
from typing import Optional

import strawberry
from strawberry.scalars import JSON

from accounts_api.graphql.errors import validated
from accounts_api.models.user import User, UserRole
from accounts_api.schemas.pagination import PaginationRequest

strawberry.enum(UserRole, name="UserRole", description="Identifies user access level")


@strawberry.type(name="User")
class UserType:
    id: uuid.UUID
    role: UserRole
    username: str
    init_date: datetime = strawberry.field(name="init_date")

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(id=user.id, role=UserRole(user.role), username=user.username, init_date=user.created_at)


@strawberry.type
class UserPage:
    total: int
    data: list[UserType]


@strawberry.type
class LoginResponse:
    jwt: str
    user: UserType


@strawberry.input
class LoginRequest:
    username: str
    password: str


@strawberry.input
class PaginationFilterInput:
    include: Optional[JSON] = None
    exclude: Optional[JSON] = None


@strawberry.input(description="Public pagination query; field names are the public User field names")
class PaginationInput:
    offset: int
    limit: int
    search: Optional[JSON] = None
    sort: Optional[JSON] = None
    filter: Optional[PaginationFilterInput] = None

    def to_request(self) -> PaginationRequest:
        data = {
            "offset": self.offset,
            "limit": self.limit,
            "search": self.search,
            "sort": self.sort or {},
        }
        if self.filter is not None:
            data["filter"] = {"include": self.filter.include, "exclude": self.filter.exclude}
        return validated(PaginationRequest, data)
