from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from strawberry.fastapi import BaseContext

from accounts_api.db.session import get_db, get_session_factory
from accounts_api.models.user import User
from accounts_api.services.authentication import authenticate_jwt


class ResolveContext(BaseContext):
    def __init__(self, db: AsyncSession, sessions: async_sessionmaker[AsyncSession], user: User | None):
        super().__init__()
        self.db = db
        self.sessions = sessions
        self.user = user


async def get_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ResolveContext:
    user = await authenticate_jwt(db, request.headers.get("Authorization"))
    return ResolveContext(db=db, sessions=sessions, user=user)
