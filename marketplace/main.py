from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.core.logging import setup_logging
from marketplace.core.database import engine
from marketplace.core.config import settings
from marketplace.models import Base
from marketplace.api.errors import register_exception_handlers
from marketplace.api.orders import router as orders_router
from marketplace.api.admin import router as admin_router
from marketplace.api.health import router as health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    await engine.dispose()


app = FastAPI(
    title="Marketplace Order Service",
    description="Order placement and stock reservation for the marketplace",
    version="0.1.0",
    lifespan=lifespan
)

cors_origins = settings.cors_origins.split(",") if settings.cors_origins else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(orders_router)
app.include_router(admin_router)
