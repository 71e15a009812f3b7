"""Domain constants shared by services and routers."""

REFERENCE_BASE_CURRENCY: str = "USD"

# Fixed query parameters sent to the remote rates API on every fetch.
PROVIDER_AMOUNT: str = "1"
PROVIDER_FORMAT: str = "json"
