# ==========================================
# 1. Process Configuration Keys
# ==========================================
ENV_TENANT_ID = "TENANT_ID"
ENV_CLIENT_ID = "CLIENT_ID"
ENV_CLIENT_SECRET = "CLIENT_SECRET"
ENV_SUBSCRIPTION_ID = "SUBSCRIPTION_ID"

REQUIRED_SETTINGS = [
    ENV_TENANT_ID,
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_SUBSCRIPTION_ID,
]

ENV_FILE = ".env"

# ==========================================
# 2. Defaults
# ==========================================
DEFAULT_REGION = "eastus"
DEFAULT_MODE = "INFO"
DEFAULT_OPERATION_TIMEOUT_SECONDS = 1800
DEFAULT_MAX_CONCURRENCY = 1

# ==========================================
# 3. Resource Name Prefixes
# ==========================================
RESOURCE_GROUP_PREFIX = "rgNEMV_"
APP_SERVICE_PLAN_PREFIX = "plan-"
FUNCTION_APP_1_PREFIX = "webapp1-"
FUNCTION_APP_2_PREFIX = "webapp2-"
DOMAIN_PREFIX = "jsdkdemo-"
DOMAIN_TLD = "com"

RANDOM_NAME_MAX_LENGTH = 20

# ==========================================
# 4. App Service Settings
# ==========================================
APP_SERVICE_PLAN_SKU = {"name": "S1", "tier": "Standard", "capacity": 1}
NET_FRAMEWORK_VERSION = "v4.6"
FUNCTIONS_EXTENSION_VERSION = "~4"
FUNCTIONS_WORKER_RUNTIME = "dotnet"
HOSTNAME_DNS_RECORD_TYPE = "CName"
SSL_STATE_SNI = "SniEnabled"

# Demo registrant used for the domain purchase
DOMAIN_CONTACT = {
    "email": "jondoe@contoso.com",
    "name_first": "Jon",
    "name_last": "Doe",
    "phone": "+1.4258828080",
    "address_mailing": {
        "address1": "123 4th Ave",
        "city": "Redmond",
        "state": "WA",
        "country": "US",
        "postal_code": "98052",
    },
}
DOMAIN_CONSENT_AGREED_BY = "127.0.0.1"

# ==========================================
# 5. CLI Exit Codes
# ==========================================
EXIT_OK = 0
EXIT_CREATION_FAILED = 1
EXIT_TEARDOWN_FAILED = 2
EXIT_CONFIGURATION_ERROR = 3
EXIT_CANCELLED = 130

LOGGER_NAME = "cloud_provisioner"
