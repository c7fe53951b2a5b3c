from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wastetrack.application.notification_manager import build_notification_manager
from wastetrack.config import Settings, get_settings
from wastetrack.infrastructure import database
from wastetrack.infrastructure.notifications import ClientConnectionManager
from wastetrack.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables, start the notification engine and stop it on shutdown."""

    database.initialize_database(app.state.engine)
    manager = app.state.notification_manager
    await manager.init()
    yield
    manager.shutdown()
    app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application hosting the notification engine."""

    if settings is None:
        settings = get_settings()
        engine, session_factory = database.engine, database.SessionLocal
    else:
        engine = database.build_engine(settings.database_url)
        session_factory = database.build_session_factory(engine)

    app = FastAPI(lifespan=lifespan)

    # Allow the PWA client served from the Next.js dev server.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    connections = ClientConnectionManager()
    manager, platform = build_notification_manager(
        settings, session_factory=session_factory, connections=connections
    )
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.connection_manager = connections
    app.state.permission_platform = platform
    app.state.notification_manager = manager

    register_routes(app)
    return app


app = create_app()
