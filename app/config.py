import logging
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Router chunk counts queried on every comparison, each as its own aggregator row
DEFAULT_CHUNK_SIZES = [1, 5, 10, 15, 20, 30, 50, 75, 100, 125, 150, 200]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )
    ROUTER_API_URL: str = "https://dc1.invisium.com/router/ethereum"
    SIMULATION_API_URL: str = "https://dev.invisium.com/simulation/ethereum/sim-dln-output-amount"
    KYBERSWAP_API_URL: str = "https://aggregator-api.kyberswap.com/ethereum/api/v1"
    ONEINCH_API_URL: str = "https://proxy-app.1inch.io/v2.0"
    ZEROX_API_URL: str = "https://api.0x.org"
    MATCHA_API_URL: str = "https://matcha.xyz/api"

    ZEROX_API_KEY: Optional[str] = None
    KYBERSWAP_BUILD_TOKEN: Optional[str] = None

    RECIPIENT: str = "0x40afefb746b5d79cecfd889d48fd1bc617deaa23"
    SENDER: str = "0x40afefb746b5d79cecfd889d48fd1bc617deaa23"
    DLN_ROUTER: str = "0x663dc15d3c1ac63ff12e45ab68fea3f0a883c251"

    CHUNK_SIZES: List[int] = DEFAULT_CHUNK_SIZES
    HTTP_TIMEOUT: float = 20.0
    QUOTE_TIMEOUT_SECONDS: float = 100.0

    TOKEN_LIST_PATH: str = "public/token-list.json"
    TOKEN_LIST_URL: Optional[str] = None  # Takes precedence over the file when set
    TOKEN_LIST_TTL: int = 300  # 5 minutes
    LOG_LEVEL: str = "INFO"


settings = Settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
