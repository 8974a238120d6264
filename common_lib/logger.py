import logging
import sys

_logging_configured = False


def setup_logging():
    global _logging_configured
    if _logging_configured:
        return

    # CLI는 stdout으로 JSON을 출력하므로 로그는 stderr로 보냄
    from .config import get_settings

    level = getattr(logging, get_settings().log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(levelname)s in %(module)s: %(message)s',
        stream=sys.stderr,
        force=True,
    )

    # 라이브러리 로그 레벨 조정
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _logging_configured = True


def get_logger(name: str):
    """명명된 로거 가져오기(Get a named logger).

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    setup_logging()
    return logging.getLogger(name)
