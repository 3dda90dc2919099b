import sqlmodel
from sqlalchemy import UniqueConstraint

from ._base import BaseModel


class Level(BaseModel, table=True):
    __tablename__: str = "levels"
    __table_args__ = (UniqueConstraint("guild_id", "name"),)

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    guild_id: int = sqlmodel.Field(
        index=True, sa_type=sqlmodel.BigInteger, foreign_key="guilds.id", ondelete="CASCADE"
    )
    name: str = sqlmodel.Field(max_length=100)
    role_id: int = sqlmodel.Field(sa_type=sqlmodel.BigInteger)
