import os
import logging

handlers = [logging.StreamHandler()]
if os.environ.get("LOG_FILE", "detailing-api.log"):
    handlers.append(logging.FileHandler(os.environ.get("LOG_FILE", "detailing-api.log")))

logging.basicConfig(
    format="%(filename)s - %(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=handlers,
)
if os.environ.get("LOG_LEVEL"):
    logging.getLogger().setLevel(os.environ["LOG_LEVEL"].upper())
elif os.environ.get("ENV") == "production":
    logging.getLogger().setLevel(logging.INFO)
else:
    logging.getLogger().setLevel(logging.DEBUG)


def get_logger(filename: str) -> logging.Logger:
    return logging.getLogger(filename)
