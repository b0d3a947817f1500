from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .storage.backend import KeyValueStorage
from .sync.fabric import BroadcastHub

logger = logging.getLogger(__name__)


def load_settings():
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def configure_logging(settings) -> None:
    level = str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_context(
    *,
    storage: Optional[KeyValueStorage] = None,
    hub: Optional[BroadcastHub] = None,
) -> Container:
    """Build one context from the active settings module.

    Sibling contexts (other "tabs") share ``storage`` and ``hub`` with the first one.
    """

    settings = load_settings()
    configure_logging(settings)

    container = build_container(settings=settings, storage=storage, hub=hub)
    if getattr(settings, "DEBUG", False):
        logger.debug(
            f"settings={settings.__name__} backend={type(container.storage).__name__} "
            f"policy={container.persister.policy.value}"
        )
    return container
