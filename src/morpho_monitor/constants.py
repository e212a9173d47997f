"""Network endpoints and monitoring defaults."""

from decimal import Decimal

DEFAULT_ETHEREUM_RPC_URL = "https://eth.llamarpc.com"
DEFAULT_BASE_RPC_URL = "https://mainnet.base.org"
DEFAULT_POLYGON_RPC_URL = "https://polygon-rpc.com"
DEFAULT_ARBITRUM_RPC_URL = "https://arb1.arbitrum.io/rpc"

MORPHO_API_URL = "https://blue-api.morpho.org/graphql"

DEFAULT_CHAIN = "ethereum"

# ERC-4626 shares on MetaMorpho vaults are minted with 18 decimals
SHARE_DECIMALS = 18

# Auto-added vaults alert once liquidity falls 20% below its discovery level
AUTO_ADD_THRESHOLD_RATIO = Decimal("0.8")
DEFAULT_AUTO_ADD_THRESHOLD = Decimal(1_000_000)

DEFAULT_HISTORY_DAYS = 7
DEFAULT_POSITIONS_PAGE_SIZE = 100

ALERT_LOG_FILENAME = "alerts.log"

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
