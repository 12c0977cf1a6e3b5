"""Application bootstrap shared by the host app and the keyboard extension"""

import sys
from pathlib import Path
from typing import Callable, List, Optional
from loguru import logger

from .core.clipboard import ImageClipboard, SystemClipboard
from .core.errors import StoreInitializationError
from .core.preferences import SharedPreferences
from .core.storage import DatabaseManager, ImageStore
from .services import StoreClient, SettingsService, DatabaseOptimizer
from .services.store_client import ListedImage
from .utils import ConfigManager

SURFACES = ('host', 'keyboard')


class PixKeepApp:
    """Wires configuration, logging and storage into a store client"""

    def __init__(self, surface: str = 'host', config_path: Optional[str] = None,
                 clipboard: Optional[ImageClipboard] = None, setup_logging: bool = True,
                 on_refresh: Optional[Callable[[List[ListedImage]], None]] = None):
        """
        Initialize application

        Args:
            surface: Which front-end this process is ('host' or 'keyboard')
            config_path: Path to the YAML configuration file
            clipboard: Clipboard backend (defaults to the system clipboard)
            setup_logging: Install the loguru sinks
            on_refresh: Called with the new listing after a sync
        """
        if surface not in SURFACES:
            raise ValueError(f"Unknown surface: {surface}")

        self.surface = surface
        self.config_manager = ConfigManager(config_path)
        self.clipboard = clipboard
        self.on_refresh = on_refresh
        self.database_manager = None
        self.preferences = None
        self.store = None
        self.client = None
        self.settings = None

        if setup_logging:
            self._setup_logging()

    def _setup_logging(self):
        """Configure logging"""
        logger.remove()  # Remove default handler
        logger.configure(extra={'surface': self.surface})

        # Console logging
        logger.add(
            sys.stderr,
            level=str(self.config_manager.get('logging.level', 'INFO')).upper(),
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {extra[surface]} | {message}"
        )

        if self.config_manager.get('logging.file_logging', True):
            log_dir = self.config_manager.shared_dir / 'logs'
            try:
                log_dir.mkdir(parents=True, exist_ok=True)
                logger.add(
                    log_dir / f"pixkeep_{self.surface}_{{time:YYYY-MM-DD}}.log",
                    rotation="1 day",
                    retention=f"{self.config_manager.get('logging.max_log_files', 7)} days",
                    level="DEBUG",
                    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[surface]} | {name}:{function}:{line} - {message}"
                )
            except OSError as e:
                logger.warning(f"File logging disabled: {e}")

    def initialize(self) -> bool:
        """
        Open the shared store and build the store client

        Returns:
            False if the configuration is invalid

        Raises:
            StoreInitializationError: If either database cannot be opened
        """
        logger.info(f"Initializing PixKeep ({self.surface})")

        if not self.config_manager.validate():
            logger.error("Invalid configuration")
            return False

        shared_dir: Path = self.config_manager.shared_dir
        try:
            shared_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreInitializationError(str(shared_dir), e) from e

        busy_timeout = self.config_manager.get('storage.busy_timeout', 5.0)

        self.database_manager = DatabaseManager(str(self.config_manager.database_path),
                                                busy_timeout=busy_timeout)
        self.preferences = SharedPreferences.open(str(self.config_manager.preferences_path),
                                                  busy_timeout=busy_timeout)
        self.store = ImageStore(self.database_manager)
        self.settings = SettingsService(self.preferences)

        if self.clipboard is None:
            self.clipboard = SystemClipboard()

        self.client = StoreClient(self.store, self.preferences, self.clipboard,
                                  on_refresh=self.on_refresh)

        if self.client.purged_on_start and self.config_manager.get('cleanup.vacuum_after_purge'):
            DatabaseOptimizer(self.database_manager).optimize()

        self.client.refresh()

        logger.info("Application initialized successfully")
        return True

    def activate(self) -> Optional[List[ListedImage]]:
        """Call when the front-end comes to the foreground"""
        if self.client is None:
            raise RuntimeError("Application not initialized")
        return self.client.sync_if_dirty()

    def shutdown(self):
        """Release database connections"""
        logger.info("Shutting down...")

        if self.preferences:
            self.preferences.close()

        if self.database_manager:
            self.database_manager.close()

        logger.info("Application shutdown complete")


def main(surface: Optional[str] = None) -> PixKeepApp:
    """
    Main entry point

    Args:
        surface: Front-end to start; taken from the first command-line
            argument when omitted, defaulting to the host app
    """
    if surface is None:
        surface = sys.argv[1] if len(sys.argv) > 1 else 'host'

    if surface not in SURFACES:
        logger.error(f"Unknown surface '{surface}', expected one of: {', '.join(SURFACES)}")
        sys.exit(2)

    app = PixKeepApp(surface)

    try:
        if not app.initialize():
            logger.error("Failed to initialize application")
            sys.exit(1)
    except StoreInitializationError as e:
        logger.critical(f"Cannot start without the image store: {e}")
        sys.exit(1)

    return app
