import logging
from contextlib import asynccontextmanager
from typing import Any, Dict
from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter
from app.config import settings
from app.schema import schema
from app.services.token_store import TokenStore
from app.services.adapters.registry import AdapterRegistry
from app.services.quote_comparison import QuoteComparisonService

logger = logging.getLogger(__name__)

# Initialize services
token_store = TokenStore()
adapter_registry = AdapterRegistry()
quote_service = QuoteComparisonService(
    token_store=token_store,
    reference=adapter_registry.reference,
    sources=adapter_registry.adapters,
    timeout=settings.QUOTE_TIMEOUT_SECONDS,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        # Warm the token catalog; lookups fall back to built-in tokens if this fails
        await token_store.initialize()
        logger.info("Quote comparison service started")
        yield
    finally:
        logger.info("Closing upstream HTTP clients...")
        await adapter_registry.aclose()
        await token_store.aclose()
        logger.info("Upstream HTTP clients closed")


# Create context for GraphQL
async def get_context() -> Dict[str, Any]:
    return {
        "token_store": token_store,
        "quote_service": quote_service
    }


# Create FastAPI app
app = FastAPI(lifespan=lifespan)

# Add GraphQL route with context
graphql_app = GraphQLRouter(
    schema,
    context_getter=get_context,
)
app.include_router(graphql_app, prefix="/graphql")

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
