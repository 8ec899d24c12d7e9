"""
GatewayServer class for CLI control of the FastAPI application.
"""
import logging
import os
import uvicorn

from settings import PORT, LOG_LEVEL, BIND_ADDRESS, API_PREFIX, DEBUG_LOG_FILE
from accounts import AccountStore, SessionStore
from .app import create_app

logger = logging.getLogger(__name__)


class GatewayServer:
    """Gateway server wrapper for CLI control"""

    def __init__(
        self,
        debug: bool = False,
        bind_address: str = None,
        port: int = None,
        account_store: AccountStore = None,
        session_store: SessionStore = None,
    ):
        self.server = None
        self.config = None
        self.app = None
        self.debug = debug
        self.bind_address = bind_address or BIND_ADDRESS
        self.port = port or PORT
        # None falls back to settings.ACCOUNTS_FILE and settings.DATA_DIR in create_app
        self.account_store = account_store
        self.session_store = session_store

        # Configure debug logging if enabled
        if debug:
            self._setup_debug_logging()

    def _setup_debug_logging(self):
        """Setup debug logging for the gateway server"""
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)

        # Clear existing handlers to avoid duplicates
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        log_file = os.path.abspath(DEBUG_LOG_FILE)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

        logger.info(f"Debug logging enabled - appending to {log_file}")

    def run(self):
        """Run the gateway server (blocking)"""
        self.app = create_app(account_store=self.account_store, session_store=self.session_store)
        logger.info(f"Starting social OAuth gateway on http://{self.bind_address}:{self.port}")
        accounts_path = getattr(self.app.state.account_store.backend, "path", "in-memory")
        logger.info(f"Configuration: {accounts_path}")
        logger.info(f"Management: POST {API_PREFIX}/management/update-token")
        self.config = uvicorn.Config(
            self.app,
            host=self.bind_address,
            port=self.port,
            log_level=LOG_LEVEL,
            access_log=False  # Request middleware already logs
        )
        self.server = uvicorn.Server(self.config)
        self.server.run()

    def stop(self):
        """Stop the gateway server"""
        if self.server:
            self.server.should_exit = True
