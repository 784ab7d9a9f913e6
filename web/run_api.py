"""Serve the tournament API with uvicorn. Run from project root: python web/run_api.py"""
import sys
from pathlib import Path

# config and nexus live at the project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import uvicorn

import config

if __name__ == "__main__":
    uvicorn.run(
        "web.api.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=config.API_RELOAD,
        log_level=config.LOG_LEVEL.lower(),
    )
