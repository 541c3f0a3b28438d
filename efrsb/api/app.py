from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from efrsb.api import routes
from efrsb.api.context import AppContext, build_context
from efrsb.config.settings import Settings


def create_app(settings: Settings | None = None, context: AppContext | None = None) -> FastAPI:
    settings = settings or (context.settings if context else Settings())
    app = FastAPI(title="EFRSB Bankruptcy Search API", version="0.1.0")
    app.state.context = context or build_context(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes.router)
    app.include_router(routes.ws_router)

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "EFRSB Bankruptcy Search API",
                "docs": "/docs",
                "progress": "/api/progress",
            }
        )

    return app
