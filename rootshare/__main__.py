from __future__ import annotations

import uvicorn

from .config import settings
from .logging_setup import setup_logging


def main():
    setup_logging(settings.log_level)
    uvicorn.run('rootshare.main:app', host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == '__main__':
    main()
