import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError

import retailpos.models  # noqa: F401  registers tables on Base.metadata
from retailpos.core.config import settings
from retailpos.db.base import Base
from retailpos.db.session import engine
from retailpos.exceptions import (
    AppException,
    app_exception_handler,
    generic_exception_handler,
    integrity_exception_handler,
)
from retailpos.routers import auth, cash, customers, health, personnel, pos, products, sales, turkcell
from retailpos.services.cart import CartStore

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        Base.metadata.create_all(engine)
        logger.info("Database schema created")
    app.state.cart_store = CartStore()
    yield
    app.state.cart_store.close()


app = FastAPI(
    title="Retail POS API",
    version="0.1.0",
    description="Point of sale backend: carts, checkout, stock, customer accounts and the cash drawer",
    lifespan=lifespan
)

# Register exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(IntegrityError, integrity_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(pos.router)
app.include_router(sales.router)
app.include_router(customers.router)
app.include_router(cash.router)
app.include_router(personnel.router)
app.include_router(turkcell.router)
