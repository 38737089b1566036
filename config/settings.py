"""
Application configuration for api-dex-chart.

Centralizes environment variables using python-dotenv.

Note:
- Nothing is persisted: the chart is rebuilt from swap events on every load.
- The selection (pair, interval, inversion) is always supplied by the caller;
  the DEFAULT_* values are only used to open a live selection at startup.
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """
    Configuration settings for the api-dex-chart service.
    """

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    APP_NAME: str = os.getenv("APP_NAME", "api-dex-chart")

    # Xian node GraphQL (swap events, pairs, token metadata)
    GRAPHQL_ENDPOINT: str = os.getenv("GRAPHQL_ENDPOINT", "https://node.xian.org/graphql")
    GRAPHQL_TIMEOUT_S: float = float(os.getenv("GRAPHQL_TIMEOUT_S", "20"))
    PAIRS_CONTRACT: str = os.getenv("PAIRS_CONTRACT", "con_pairs")

    # Live refresh
    LIVE_POLL_EVERY_S: float = float(os.getenv("LIVE_POLL_EVERY_S", "30"))
    LIVE_GRACE_WINDOW_S: float = float(os.getenv("LIVE_GRACE_WINDOW_S", "5"))
    LIVE_AUTOSTART: bool = os.getenv("LIVE_AUTOSTART", "true").lower() == "true"

    # Initial live selection (empty pair -> first listed pair)
    DEFAULT_PAIR_ID: str = os.getenv("DEFAULT_PAIR_ID", "")
    DEFAULT_INTERVAL_MINUTES: int = int(os.getenv("DEFAULT_INTERVAL_MINUTES", "60"))
    DEFAULT_INVERTED: bool = os.getenv("DEFAULT_INVERTED", "true").lower() == "true"


settings = Settings()
