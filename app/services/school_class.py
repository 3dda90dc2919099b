from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.constants import MAX_CLASSES_PER_LEVEL
from app.core.db import get_db
from app.core.exceptions import UserFacingError
from app.models.level import Level
from app.models.school_class import Class


class ClassService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_classes(self, level_id: int) -> Sequence[Class]:
        result = await self.db.exec(
            select(Class).where(Class.level_id == level_id).order_by(col(Class.name))
        )
        return result.all()

    async def get_guild_classes(self, guild_id: int) -> Sequence[tuple[Class, Level]]:
        result = await self.db.exec(
            select(Class, Level)
            .join(Level, col(Class.level_id) == Level.id)
            .where(Class.guild_id == guild_id)
            .order_by(col(Level.name), col(Class.name))
        )
        return result.all()

    async def get_class(self, class_id: int) -> Class | None:
        return await self.db.get(Class, class_id)

    async def get_class_by_name(self, level_id: int, name: str) -> Class | None:
        result = await self.db.exec(
            select(Class).where(Class.level_id == level_id, Class.name == name)
        )
        return result.first()

    async def create_class(self, *, level: Level, name: str, role_id: int) -> Class:
        """Create a class inside `level`.

        Raises:
            UserFacingError: If the class exists or the level has too many classes.
        """
        if await self.get_class_by_name(level.id, name) is not None:
            msg = f"The class `{name}` already exists in `{level.name}`."
            raise UserFacingError(msg)

        count = (
            await self.db.exec(
                select(func.count()).select_from(Class).where(Class.level_id == level.id)
            )
        ).one()
        if count >= MAX_CLASSES_PER_LEVEL:
            msg = f"A level cannot have more than {MAX_CLASSES_PER_LEVEL} classes."
            raise UserFacingError(msg)

        school_class = Class(guild_id=level.guild_id, level_id=level.id, name=name, role_id=role_id)
        self.db.add(school_class)
        await self.db.commit()
        await self.db.refresh(school_class)
        return school_class

    async def delete_class(self, class_id: int) -> bool:
        school_class = await self.get_class(class_id)
        if school_class is None:
            return False

        await self.db.delete(school_class)
        await self.db.commit()
        return True
