#!/usr/bin/env python3
"""
Main entrypoint: open the task database and serve the API and UI.
Run with: python run.py
Or: python -m web_app
"""
from __future__ import annotations

import logging
import sys

# Ensure app loggers (dayplan.api, database, task_service, auth) emit to the same stream as uvicorn
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,
)

from web_app import main

if __name__ == "__main__":
    main()
