import sqlmodel

from ._base import BaseModel


class VerifiedMember(BaseModel, table=True):
    """A member whose Google account has been linked."""

    __tablename__: str = "verified_members"

    member_id: int = sqlmodel.Field(
        primary_key=True, foreign_key="members.id", ondelete="CASCADE"
    )
    first_name: str = sqlmodel.Field(max_length=255)
    last_name: str = sqlmodel.Field(max_length=255)
    mail: str = sqlmodel.Field(max_length=320)
    class_id: int = sqlmodel.Field(index=True, foreign_key="classes.id", ondelete="CASCADE")
