# main.py
"""FastAPI entry point.

Run with ``uvicorn main:create_app --factory``; settings come from the
environment (see config.py).
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cache import ViewCache
from config import Settings
from db import create_db_engine, init_db
from errors import DataFetchError
from invoice_route import router as invoice_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
  logging.basicConfig(
    level=level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
  )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
  settings = settings or Settings.from_env()
  configure_logging(settings.log_level)

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.cache = ViewCache()
    logger.info("Database engine ready")
    try:
      yield
    finally:
      engine.dispose()
      logger.info("Database engine disposed")

  app = FastAPI(title="Invoices Dashboard Backend", version="1.0.0", lifespan=lifespan)
  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )
  app.include_router(invoice_router)

  @app.exception_handler(DataFetchError)
  async def data_fetch_error_handler(request: Request, exc: DataFetchError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})

  @app.get("/health")
  def health():
    return {"ok": True}

  return app
