import uvicorn

from src.logger import build_log_config
from src.settings import load_server_settings


def main() -> None:
    """Run the FastAPI application with uvicorn, configured from APP_* variables."""
    settings = load_server_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=build_log_config(),
    )


if __name__ == "__main__":
    main()
