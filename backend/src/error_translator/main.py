from fastapi import FastAPI

from error_translator.config import settings
from error_translator.handlers import register_exception_handlers
from error_translator.middleware import RequestIDMiddleware
from error_translator.openapi import error_responses

app = FastAPI(title=settings.app_name, responses=error_responses())
app.add_middleware(RequestIDMiddleware)
register_exception_handlers(app, settings)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe for load balancers and container orchestrators."""
    return {"status": "ok"}
