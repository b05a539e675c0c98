from fastapi import FastAPI

from .settings import settings
from .db import Base, engine
from .errors import install_error_handlers
from .logging_config import setup_logging

# Ensure models are imported before create_all
from .auth import models as _auth_models  # noqa: F401
from .catalog import models as _catalog_models  # noqa: F401
from .leads import models as _lead_models  # noqa: F401
from .settings_db import AppConfig as _app_config_model  # noqa: F401

from .setup.routes import router as setup_router
from .auth.routes import router as auth_router
from .admin.routes import router as admin_router
from .catalog.routes import router as catalog_router
from .catalog.admin_routes import router as catalog_admin_router
from .leads.routes import router as leads_router
from .stats.routes import router as stats_router
from .store.routes import router as store_router


def create_app() -> FastAPI:
    if not settings.session_secret:
        raise RuntimeError("SESSION_SECRET must be set")

    setup_logging()

    app = FastAPI(title="Storefront API")

    Base.metadata.create_all(bind=engine)

    install_error_handlers(app)

    app.include_router(setup_router)
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(catalog_router)
    app.include_router(catalog_admin_router)
    app.include_router(leads_router)
    app.include_router(stats_router)
    app.include_router(store_router)

    return app


app = create_app()
