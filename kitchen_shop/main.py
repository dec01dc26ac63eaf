# Load environment variables from .env file FIRST, before any other imports
from dotenv import load_dotenv
load_dotenv()

"""
Kitchen Shop API entry point.

Run with:
    uvicorn kitchen_shop.main:app --reload
"""

import os

from .logging_config import setup_logging

setup_logging()

from .app_factory import create_app  # noqa: E402

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "kitchen_shop.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
