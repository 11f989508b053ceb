# cardapio/main.py

# FastAPI application entrypoint for the multi-tenant digital menu.
# Mounts the health, storefront and cart routers and creates the tables on startup.
# Domain errors map to their own status codes with the message list the client shows;
# record-store failures on reads answer 503 so the client can offer a retry.

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cardapio.api.cart import router as cart_router
from cardapio.api.health import router as health_router
from cardapio.api.storefront import router as storefront_router
from cardapio.db import engine, init_models
from cardapio.errors import CardapioError
from cardapio.logger import quiet_external_loggers, setup_logger

logger = setup_logger(__name__)

app = FastAPI(title="Cardápio Digital", version="0.1.0")
app.include_router(health_router, tags=["health"])
app.include_router(storefront_router, tags=["storefront"])
app.include_router(cart_router, tags=["cart"])


@app.on_event("startup")
async def on_startup():
    quiet_external_loggers()
    await init_models(engine)
    logger.info("Record store ready")


@app.exception_handler(CardapioError)
async def cardapio_error_handler(request: Request, exc: CardapioError):
    if exc.status_code >= 409:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "errors": exc.errors})


@app.exception_handler(SQLAlchemyError)
async def record_store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} failed on the record store: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Não foi possível carregar os dados. Tente novamente.", "retry": True},
    )


@app.get("/")
async def root():
    return {
        "status": "ok",
        "see": [
            "/healthz",
            "/stores/{subdomain}",
            "/stores/{subdomain}/products",
            "/stores/{subdomain}/zones",
            "/stores/{subdomain}/cart/{cart_id}",
            "/stores/{subdomain}/cart/{cart_id}/checkout",
        ],
    }
