import logging
import os

import uvicorn

from services.search_api.app import app


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
