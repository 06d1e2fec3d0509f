"""Server entry point: ``python -m shoutout_api.main``"""

import uvicorn

from shoutout_api.app import create_app
from shoutout_api.core.config import get_settings

app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
