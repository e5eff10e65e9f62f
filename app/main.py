from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.core.mailer import build_mailer
from app.core.rate_limit import configure_rate_limits
from app.db.init_db import create_all_tables
from app.db.session import build_engine, build_session_factory
from app.middleware.request_logging import RequestLoggingMiddleware
from app.middleware.auth_logging import AuthLoggingMiddleware
from app.modules.auth.api.router import router as auth_router
from app.modules.auth.services.google_oauth import GoogleOAuthClient
from app.modules.user_management.api.router import router as user_router
from app.modules.posts.api.router import router as posts_router
from app.modules.posts.comments.api.router import router as comments_router, comment_router
from app.modules.posts.reactions.api.router import router as reactions_router
from app.modules.posts.bookmarks.api.router import router as bookmarks_router

logger = logging.getLogger("app")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Collaborators (database, mailer, OAuth client, rate
    limiter) are created here from settings and kept on app.state.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        debug=settings.DEBUG,
        description="Share memories: posts, reactions, bookmarks and comments",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={"defaultModelsExpandDepth": -1},
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.mailer = build_mailer(settings)
    app.state.oauth_client = GoogleOAuthClient(settings)
    app.state.limiter = configure_rate_limits(settings)

    @app.on_event("startup")
    def startup_event():
        logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} mode")
        create_all_tables(engine)

    @app.on_event("shutdown")
    def shutdown_event():
        engine.dispose()

    register_exception_handlers(app)

    # Add middleware
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(AuthLoggingMiddleware, cookie_name=settings.COOKIE_NAME)
    app.add_middleware(RequestLoggingMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    api = settings.API_V1_STR
    app.include_router(auth_router, prefix=f"{api}/auth", tags=["authentication"])
    app.include_router(user_router, prefix=f"{api}/users", tags=["users"])
    app.include_router(posts_router, prefix=f"{api}/posts", tags=["posts"])
    app.include_router(comments_router, prefix=f"{api}/posts/{{post_id}}/comments", tags=["comments"])
    app.include_router(reactions_router, prefix=f"{api}/posts/{{post_id}}/reactions", tags=["reactions"])
    app.include_router(bookmarks_router, prefix=f"{api}/posts/{{post_id}}/bookmark", tags=["bookmarks"])
    app.include_router(comment_router, prefix=f"{api}/comments", tags=["comments"])

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.get("/")
    def root():
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs" if settings.DEBUG else None,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
