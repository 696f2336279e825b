"""Entry point for running the API server."""

import os

import uvicorn

from core.config import get_settings
from core.log_config import configure_logging

if __name__ == "__main__":
    configure_logging(get_settings().log_level)
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("api.main:app", host=host, port=port, log_config=None)
