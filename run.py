import logging
import os

import uvicorn

logger = logging.getLogger("run")


def run_migrations() -> bool:
    """Run Alembic migrations."""
    try:
        from alembic.config import Config
        from alembic import command

        alembic_cfg = Config("alembic.ini")
        logger.info("[STARTUP] Running database migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("[STARTUP] Migrations complete!")
        return True
    except Exception as e:
        logger.warning(f"[WARN] Migration failed: {e}")
        return False


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Tables are otherwise created by init_db() during app startup
    if os.getenv("RUN_MIGRATIONS") == "true":
        run_migrations()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 8000))
    reload = os.getenv("ENV") == "development"

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
        workers=1,
    )
