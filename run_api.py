"""Run the family API server."""
import logging

import uvicorn

from famlink.api.main import create_app
from famlink.config import settings

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.database.ensure_dirs()
    print("Starting FastAPI on http://localhost:8000")
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
