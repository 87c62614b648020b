from decimal import Decimal

# Fee lock amounts in XRD, rendered straight into the manifest.
FEE_STANDARD = "10"
FEE_RESOURCE_CREATION = "10"
FEE_POOL_CREATION = "50"

# Creating a resource needs at least the creation fee in XRD on the account.
MIN_XRD_FOR_CREATION = Decimal(FEE_RESOURCE_CREATION)

# A transaction is valid for this many epochs after the current one.
EPOCH_WINDOW = 100
DEFAULT_TIP_PERCENTAGE = 0

POLL_MAX_ATTEMPTS = 20
POLL_INTERVAL_S = 3.0

# Operation-level retry: 1 attempt plus 2 retries.
OPERATION_MAX_ATTEMPTS = 3
OPERATION_RETRY_BASE_DELAY_S = 1.0

DEFAULT_HTTP_TIMEOUT = 30.0  # HTTP client timeout

DEFAULT_DIVISIBILITY = 18
MAX_DIVISIBILITY = 18

# Exchange pool fee tiers in basis points.
POOL_FEE_TIERS = (1, 5, 30, 100)
DEFAULT_POOL_FEE_TIER = 30
MIN_POOL_WEIGHT = 5

ADAPTER_TOKEN = "TOKEN"
ADAPTER_DEFI = "DEFI"
ADAPTER_COMPONENT = "COMPONENT"

DUPLICATE_POLICY_FAIL = "fail"
DUPLICATE_POLICY_POLL = "poll"
DUPLICATE_POLICIES = (DUPLICATE_POLICY_FAIL, DUPLICATE_POLICY_POLL)
