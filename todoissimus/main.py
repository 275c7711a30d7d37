"""Entry point for the Todoissimus desktop/web client.

Usage:
    flet run main.py
    python main.py
"""
import logging

import flet as ft

from app import create_app
from core import bootstrap

logger = logging.getLogger(__name__)


async def main(page: ft.Page) -> None:
    services = await bootstrap()
    logger.info(f"Starting with view {services.state.selected_view.key or '(none)'}")
    create_app(page, services)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    ft.run(main)
