import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from accounts_api.db.session import Base
from accounts_api.models.common import TimestampMixin, UUIDMixin
from accounts_api.schemas.pagination import FieldSpec, as_datetime, as_uuid


class UserRole(str, enum.Enum):
    """Identifies user access level."""

    ADMIN = "admin"
    GUEST = "guest"
    REGULAR = "regular"


class User(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "users"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.REGULAR.value)  # admin|guest|regular
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


# Fields open to public pagination queries; password_hash is not queryable.
USER_FIELDS = {
    "id": FieldSpec(required=True, coerce=as_uuid),
    "role": FieldSpec(required=True, coerce=lambda value: UserRole(value).value),
    "username": FieldSpec(required=True),
    "created_at": FieldSpec(required=True, coerce=as_datetime),
    "updated_at": FieldSpec(required=True, coerce=as_datetime),
}
