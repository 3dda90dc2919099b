import sqlmodel
from pydantic import field_serializer

from ._base import BaseModel


class Guild(BaseModel, table=True):
    __tablename__: str = "guilds"

    id: int = sqlmodel.Field(
        primary_key=True,
        sa_type=sqlmodel.BigInteger,
        sa_column_kwargs={"autoincrement": False},
    )
    """Discord guild ID"""
    name: str = sqlmodel.Field(max_length=100)
    owner_id: int = sqlmodel.Field(sa_type=sqlmodel.BigInteger)
    verification_email_domain: str | None = sqlmodel.Field(default=None, max_length=255)
    """Only Google accounts of this domain can be verified, e.g. `school.edu`"""
    verified_role_id: int | None = sqlmodel.Field(default=None, sa_type=sqlmodel.BigInteger)
    login_message_id: int | None = sqlmodel.Field(default=None, sa_type=sqlmodel.BigInteger)

    @field_serializer("id", "owner_id")
    def serialize_id(self, value: int) -> str:
        """Serialize IDs as strings for JavaScript compatibility with large Discord IDs."""
        return str(value)
