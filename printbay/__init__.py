import logging

# Uvicorn can import the app before configure_logging runs
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

__version__ = "1.0.0"

__all__ = ["__version__"]
