import uvicorn

from shamba_gate.core.app_factory import create_app
from shamba_gate.core.config import settings

app = create_app()


def run() -> None:
    """Serve the application with uvicorn (``shamba-gate`` console script)."""
    uvicorn.run(
        "shamba_gate.main:app",
        host=settings.app.host,
        port=settings.app.port,
        reload=settings.app.debug,
        log_level=settings.log.level.lower(),
    )


if __name__ == "__main__":
    run()
