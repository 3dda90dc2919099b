import sqlmodel
from sqlalchemy import UniqueConstraint

from ._base import BaseModel


class Class(BaseModel, table=True):
    """A class inside a level, e.g. `B2` in `Second year`."""

    __tablename__: str = "classes"
    __table_args__ = (UniqueConstraint("level_id", "name"),)

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    guild_id: int = sqlmodel.Field(
        index=True, sa_type=sqlmodel.BigInteger, foreign_key="guilds.id", ondelete="CASCADE"
    )
    level_id: int = sqlmodel.Field(index=True, foreign_key="levels.id", ondelete="CASCADE")
    name: str = sqlmodel.Field(max_length=100)
    role_id: int = sqlmodel.Field(sa_type=sqlmodel.BigInteger)
