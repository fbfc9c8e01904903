"""
Project-wide constants for the structured-output client
"""  # noqa: D200, D212, D415

# ==============================================================================
# API and Network Configuration
# ==============================================================================

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_APP_URL = "http://localhost:3000"
DEFAULT_APP_TITLE = "AI-GOS Media Plan Generator"

CHAT_COMPLETIONS_PATH = "/chat/completions"
EMBEDDINGS_PATH = "/embeddings"

DEFAULT_TIMEOUT_MS = 45_000

# ==============================================================================
# Request Defaults
# ==============================================================================

DEFAULT_CHAT_TEMPERATURE = 0.7
DEFAULT_JSON_TEMPERATURE = 0.5
RETRY_TEMPERATURE = 0.3  # Lower variance once the model has produced bad JSON
DEFAULT_MAX_TOKENS = 4096

# ==============================================================================
# Retry and Backoff Configuration
# ==============================================================================

MAX_RETRIES = 2  # Retries after the first attempt

RETRY_BASE_DELAY_MS = 1_000
RETRY_MAX_DELAY_MS = 10_000
RATE_LIMIT_BASE_DELAY_MS = 5_000
RATE_LIMIT_MAX_DELAY_MS = 30_000
BACKOFF_JITTER_MS = 500

# ==============================================================================
# Circuit Breaker Configuration
# ==============================================================================

CIRCUIT_FAILURE_THRESHOLD = 3
CIRCUIT_RESET_TIMEOUT_MS = 30_000
