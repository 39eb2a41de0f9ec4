"""
User store — CRUD over the ``users`` table.

Wraps a request-scoped ``AsyncSession``.  Mutations commit immediately so
the row is visible to the next request as soon as the handler returns.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)

# ids are BIGINT-sized at most; anything outside cannot name a row
MAX_ID = 2**63 - 1


class DuplicateEmailError(Exception):
    """A user with this email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already exists: {email}")
        self.email = email


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UserStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, name: str, email: str, password_hash: str) -> User:
        """Insert a user.  Raises ``DuplicateEmailError`` on the unique constraint."""
        user = User(name=name, email=email, password_hash=password_hash)
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateEmailError(email) from exc
        await self._session.refresh(user)
        logger.info("Created user %s (%s)", user.id, email)
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        if not 1 <= user_id <= MAX_ID:
            return None
        return await self._session.get(User, user_id)

    async def list(
        self,
        name_pattern: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> List[User]:
        """
        Return one page of users in insertion order.

        *name_pattern* is a case-insensitive substring match on ``name``.
        """
        stmt = select(User).order_by(User.id.asc())
        if name_pattern:
            stmt = stmt.where(User.name.ilike(f"%{_escape_like(name_pattern)}%", escape="\\"))
        stmt = stmt.offset((page - 1) * limit).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, user_id: int) -> bool:
        """Delete by id.  Returns ``True`` if a row was removed."""
        if not 1 <= user_id <= MAX_ID:
            return False
        result = await self._session.execute(delete(User).where(User.id == user_id))
        await self._session.commit()
        removed = (result.rowcount or 0) > 0
        if removed:
            logger.info("Deleted user %s", user_id)
        return removed
