"""Backend entrypoint: starts uvicorn with host/port from settings."""
import uvicorn

# Import app directly so a frozen bundle can resolve the package (uvicorn's
# string-based import fails under PyInstaller).
from fantasy_finance.config.settings import get_settings
from fantasy_finance.main import app


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
