"""Entry point for ``python -m address_fixer``: serve the API with uvicorn."""

import logging
import os

import uvicorn


def main() -> None:
    level_name = os.getenv("ADDRESS_FIXER_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "address_fixer.main:app",
        host=os.getenv("ADDRESS_FIXER_HOST", "127.0.0.1"),
        port=int(os.getenv("ADDRESS_FIXER_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
