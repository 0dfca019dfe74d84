#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates tables on startup so a fresh local database is usable without
running Alembic first. Deployed environments use `alembic upgrade head`.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("AUTO_CREATE_TABLES", "true")

import uvicorn

if __name__ == "__main__":
    print("Starting SwiftSlot development server")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("swiftslot.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
