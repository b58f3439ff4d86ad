"""Main entry point for the Voice Lead Collection API server."""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file BEFORE importing application modules
load_dotenv()

from lead_api import create_app  # noqa: E402
from lead_config import DEFAULT_CONFIG_PATH  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Load config path from environment or use default
config_path = os.getenv("LEAD_FLOW_CONFIG_PATH", DEFAULT_CONFIG_PATH)

cors_origins = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]

# Create app with configuration
app = create_app(config_path=config_path, cors_origins=cors_origins)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
