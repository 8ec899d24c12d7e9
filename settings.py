import os
from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Server configuration
PORT = config.get("PORT", 8277)
LOG_LEVEL = config.get("LOG_LEVEL", "info")
BIND_ADDRESS = config.get("BIND_ADDRESS", "0.0.0.0")

# Every provider and the management surface are mounted below this prefix
API_PREFIX = config.get("API_PREFIX", "/api")

# Account table and session storage
ACCOUNTS_FILE = config.get("ACCOUNTS_FILE", str(Path(os.getcwd()) / "accounts.json"))
DATA_DIR = config.get("DATA_DIR", str(Path(os.getcwd()) / "data"))

# Timeout configuration for remote calls (grant exchange, userinfo, publish)
# Connection timeout: Time to establish TCP connection
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Request timeout: Total timeout for a single remote call
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 30.0)

# LinkedIn endpoints (hardcoded - not user configurable)
LINKEDIN_AUTHORIZE_URL = "https://www.linkedin.com/oauth/v2/authorization"
LINKEDIN_TOKEN_URL = "https://www.linkedin.com/oauth/v2/accessToken"
LINKEDIN_USERINFO_URL = "https://api.linkedin.com/v2/userinfo"
LINKEDIN_UGC_POSTS_URL = "https://api.linkedin.com/v2/ugcPosts"
LINKEDIN_RESTLI_PROTOCOL_VERSION = "2.0.0"

# Debug log written when the server runs with --debug
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "gateway_debug.log")
