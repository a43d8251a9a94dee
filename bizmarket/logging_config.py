import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Настроить корневой логгер один раз при старте приложения."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # sqlalchemy слишком болтлив на INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
