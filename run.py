#!/usr/bin/env python3
"""Run script for focalplan."""

import uvicorn

from focalplan.config import DEBUG, LOG_LEVEL

if __name__ == "__main__":
    uvicorn.run(
        "focalplan.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=DEBUG,
        log_level=LOG_LEVEL,
    )
