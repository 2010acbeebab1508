"""REST-сервис категоризации транзакций по описанию."""

import logging

from categorizer.core.app import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = create_app()
