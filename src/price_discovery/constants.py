"""Stacks token and endpoint constants."""

SBTC_CONTRACT_ID = "SM3VDXK3WZZSA84XXFKAFAF15NNZX32CTSG82JFQ4.sbtc-token"

KNOWN_STABLECOINS = frozenset({"USDC", "USDT", "DAI", "BUSD", "sUSDT", "sUSDC", "aeUSDC"})

DEFAULT_DEX_CACHE_URL = "https://invest.charisma.rocks"
DEX_CACHE_VAULTS_PATH = "/api/v1/vaults"
DEX_CACHE_BTC_PRICE_PATH = "/api/v1/prices/btc"

DEFAULT_COINGECKO_URL = "https://api.coingecko.com/api/v3"
COINGECKO_BTC_ID = "bitcoin"

# Only constant-product pools from this protocol feed the graph
POOL_VAULT_TYPE = "POOL"
POOL_PROTOCOL = "CHARISMA"

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

# Vault fees are quoted in parts per million
VAULT_FEE_DENOMINATOR = 1_000_000
