from pathlib import Path

CONFIG_DIR = Path.home().joinpath(".config", "solana")
DEFAULT_KEYPAIR_PATH = CONFIG_DIR / "id.json"

DEFAULT_LOG_DIR = Path("logs")
DEFAULT_DRAFTS_DIR = Path("drafts")

# AI MODELS
DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"
PREDICTION_MAX_TOKENS = 200
PREDICTION_TEMPERATURE = 0.7

# SOLANA CONSTANTS
ORACLE_PROGRAM_ID = "gVaLAXxsYPLdmJnzL5HyuA57jCrSvjv93Lprw8VGtfu"
ORACLE_SEED = b"oracle"
PREDICTION_SEED = b"prediction"
EXPLORER_TX_URL_MASK = "https://solscan.io/tx/{signature}"

# On-chain limits, mirrored client side
MAX_STATEMENT_BYTES = 280  # max_len on Prediction.statement
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100
MAX_DEADLINE_HOURS = 255  # u8

# Anchor error codes from the sibyl_oracle program (6000 + variant index)
ERROR_CODE_INVALID_CONFIDENCE = 6000
ERROR_CODE_INVALID_DEADLINE = 6001
ANCHOR_ACCOUNT_NOT_INITIALIZED = 3012

LOCAL_TX_PREFIX = "local-"
DRAFT_HASHTAGS = "#Solana #AI #Oracle"
