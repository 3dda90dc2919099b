import sqlmodel
from sqlalchemy import UniqueConstraint

from ._base import BaseModel


class Member(BaseModel, table=True):
    __tablename__: str = "members"
    __table_args__ = (UniqueConstraint("guild_id", "discord_id"),)

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    guild_id: int = sqlmodel.Field(
        index=True, sa_type=sqlmodel.BigInteger, foreign_key="guilds.id", ondelete="CASCADE"
    )
    discord_id: int = sqlmodel.Field(index=True, sa_type=sqlmodel.BigInteger)
    """Discord user ID"""
    username: str = sqlmodel.Field(max_length=100)
