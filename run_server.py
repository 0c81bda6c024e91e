#!/usr/bin/env python
"""Script to run the task tracker API server."""
import uvicorn

from tasktracker.config import HOST, LOG_LEVEL, PORT
from tasktracker.logging_setup import setup_logging

if __name__ == "__main__":
    setup_logging(LOG_LEVEL)
    uvicorn.run(
        "tasktracker.main:create_app",
        factory=True,
        host=HOST,
        port=PORT,
        log_config=None,
    )
