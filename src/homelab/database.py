from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from homelab.config import settings
from homelab.models import Base

engine = create_async_engine(settings.database_url, echo=False)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def init_models() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
