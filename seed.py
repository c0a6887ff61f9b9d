"""Seed script — populates the database with the demo accounts."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from sodipas_api.database.engine import async_session_factory, init_db
from sodipas_api.database.repository import UserRepository
from sodipas_api.models.user import User

SAMPLE_USERS = [
    dict(email="admin@sodipas.sn", name="Administrateur SODIPAS", role="admin"),
    dict(
        email="gestionnaire@sodipas.sn",
        name="Moussa Diop",
        role="manager",
        hangar="Hangar 1",
    ),
    dict(email="caisse@sodipas.sn", name="Awa Ndiaye", role="cashier", hangar="Hangar 1"),
    dict(email="demo@sodipas.sn", name="Compte Démo", role="viewer"),
]


async def seed() -> None:
    """Insert the demo users that are not there yet."""
    await init_db()
    added = 0
    async with async_session_factory() as session:
        session: AsyncSession
        repo = UserRepository(session)
        for fields in SAMPLE_USERS:
            if await repo.find_by_email(fields["email"], active_only=False) is None:
                session.add(User(**fields))
                added += 1
        await session.commit()
    print(f"✅ Seeded {added} users into the database.")


if __name__ == "__main__":
    asyncio.run(seed())
