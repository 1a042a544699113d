#!/usr/bin/env python3

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from lendbook.routes import api
from lendbook.configs import DB_URI, LOG_LEVEL, OPTIONS
from lendbook.core.auth import IdentityResolver
from lendbook.core.exceptions import LendbookError
from lendbook.core.lending import LendingCommandHandler
from lendbook.core.queries import LoanQueryService
from lendbook.core.store import SQLAlchemyLendingStore
from lendbook import __version__ as VERSION

logger = logging.getLogger(__name__)


def create_app(store=None, identities=None, clock=None):
    """Builds the API with its services wired to `store` (a
    SQLAlchemyLendingStore on DB_URI unless one is given).
    """
    store = store or SQLAlchemyLendingStore.from_uri(DB_URI)
    try:
        store.init()
    except SQLAlchemyError as e:
        logger.warning(f"[WARNING] Database initialization failed: {e}")

    app = FastAPI(
        title="Lendbook API",
        description="Lendbook: who has which book, and since when",
        version=VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store
    app.state.lending = LendingCommandHandler(store, clock=clock)
    app.state.loans = LoanQueryService(store)
    app.state.identities = identities or IdentityResolver(store)

    app.add_exception_handler(LendbookError, api.lendbook_error_handler)
    app.include_router(api.router, prefix="/v1/api")
    return app


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=LOG_LEVEL.upper())
    uvicorn.run("lendbook.app:create_app", factory=True, **OPTIONS)
