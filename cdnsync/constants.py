"""
Shared constants for CDN Sync.
"""

# Supported providers
PROVIDER_UNPKG = "unpkg"
PROVIDER_CDNJS = "cdnjs"
PROVIDER_JSDELIVR = "jsdelivr"
PROVIDERS = (PROVIDER_UNPKG, PROVIDER_CDNJS, PROVIDER_JSDELIVR)

# Used when neither the library nor the manifest names a provider
FALLBACK_PROVIDER = PROVIDER_UNPKG

# Placeholder substituted in destination templates
LIBRARY_PLACEHOLDER = "{library_name}"

# Metadata endpoints
UNPKG_META_URL = "https://unpkg.com/{library}@{version}/?meta"
NPM_REGISTRY_URL = "https://registry.npmjs.org/{library}"
CDNJS_VERSION_URL = "https://api.cdnjs.com/libraries/{library}/{version}"
CDNJS_LIBRARY_URL = "https://api.cdnjs.com/libraries/{library}"
JSDELIVR_PACKAGE_URL = "https://data.jsdelivr.com/v1/packages/npm/{library}@{version}"
JSDELIVR_VERSIONS_URL = "https://data.jsdelivr.com/v1/packages/npm/{library}"

# Search endpoints
CDNJS_SEARCH_URL = "https://api.cdnjs.com/libraries"
NPM_SEARCH_URL = "https://registry.npmjs.org/-/v1/search"
SEARCH_SOURCES = ("all", "cdnjs", "npm")

# File download endpoints
UNPKG_FILE_URL = "https://unpkg.com/{library}@{version}/{path}"
CDNJS_FILE_URL = "https://cdnjs.cloudflare.com/ajax/libs/{library}/{version}/{path}"
JSDELIVR_FILE_URL = "https://cdn.jsdelivr.net/npm/{library}@{version}/{path}"

# Abbreviated npm metadata (versions + dist-tags only)
NPM_ABBREVIATED_ACCEPT = "application/vnd.npm.install-v1+json"

# Cache layout
CACHE_DIR_NAME = ".cdnsync-cache"
METADATA_DIR_NAME = "metadata"
PACKAGES_DIR_NAME = "packages"
DEFAULT_METADATA_TTL = 24 * 60 * 60  # seconds

# Download streaming
DEFAULT_CHUNK_SIZE = 32768
PROGRESS_TICK_INTERVAL = 0.5  # seconds

# In-flight downloads are written next to their destination with this suffix
PARTIAL_SUFFIX = ".part"
