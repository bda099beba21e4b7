"""
Uvicorn Startup Script
----------------------
Runs the NGO portal with uvicorn.
"""

import os
import sys

# Make the project importable when run from a checkout
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import uvicorn

from ngo_portal.core.config_manager import settings


if __name__ == "__main__":
    # Binds all interfaces; startup output shows localhost URLs
    uvicorn.run(
        app="ngo_portal.app:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
