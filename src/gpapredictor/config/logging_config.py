import logging

from gpapredictor.config.settings import settings


def configure_logging(level: str = "") -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
