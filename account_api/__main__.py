"""Run the API server: python -m account_api"""

import uvicorn

from account_api.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "account_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
