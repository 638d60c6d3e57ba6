import uuid
from typing import Optional

import strawberry
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from accounts_api.core.config import settings
from accounts_api.graphql.context import get_context
from accounts_api.graphql.errors import AppErrorExtensions, validated
from accounts_api.graphql.permissions import IsAdmin, IsAuthenticated
from accounts_api.graphql.types import LoginRequest, LoginResponse, PaginationInput, UserPage, UserType
from accounts_api.models.user import UserRole
from accounts_api.schemas.auth import Credentials, NewUser
from accounts_api.services import users as user_service


@strawberry.type
class Query:
    @strawberry.field
    async def get_user(self, info: Info, id: uuid.UUID) -> UserType:
        user = await user_service.user_crud.try_find_by_id(info.context.db, id)
        return UserType.from_model(user)

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def users(self, info: Info, req: PaginationInput) -> UserPage:
        page = await user_service.user_paginator.paginate(
            info.context.sessions,
            req.to_request(),
            user_service.visible_users_filter(info.context.user),
        )
        return UserPage(total=page.total, data=[UserType.from_model(user) for user in page.data])


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_user(self, info: Info, name: str, password: str) -> UserType:
        payload = validated(NewUser, {"username": name, "password": password})
        user = await user_service.create_user(info.context.db, payload)
        return UserType.from_model(user)

    @strawberry.mutation
    async def login(self, info: Info, req: LoginRequest) -> Optional[LoginResponse]:
        credentials = validated(Credentials, {"username": req.username, "password": req.password})
        user = await user_service.find_by_credentials(info.context.db, credentials)
        if user is None:
            return None
        return LoginResponse(jwt=user_service.make_jwt(user), user=UserType.from_model(user))

    @strawberry.mutation(permission_classes=[IsAdmin])
    async def update_user_role(self, info: Info, id: uuid.UUID, role: UserRole) -> UserType:
        user = await user_service.user_crud.try_update_by_id(info.context.db, id, {"role": role.value})
        return UserType.from_model(user)

    @strawberry.mutation(permission_classes=[IsAdmin])
    async def delete_user(self, info: Info, id: uuid.UUID) -> UserType:
        user = await user_service.user_crud.try_delete_by_id(info.context.db, id)
        return UserType.from_model(user)


schema = strawberry.Schema(query=Query, mutation=Mutation, extensions=[AppErrorExtensions])

graphql_router = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphql_ide="graphiql" if settings.GRAPHQL_IDE else None,
)
