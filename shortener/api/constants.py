# Logging event codes for request outcomes

# 400
INVALID_METHOD = 'INVALID_METHOD'
INVALID_CONTENT_TYPE = 'INVALID_CONTENT_TYPE'
INVALID_BODY = 'INVALID_BODY'
INVALID_URL = 'INVALID_URL'
INVALID_SHORTCODE = 'INVALID_SHORTCODE'

# 401 / 403
UNAUTHORIZED = 'UNAUTHORIZED'
UNTRUSTED_CLIENT = 'UNTRUSTED_CLIENT'

# 404 / 410
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
SHORT_URL_GONE = 'SHORT_URL_GONE'
ROUTE_NOT_FOUND = 'ROUTE_NOT_FOUND'

# 409
SHORT_URL_CONFLICT = 'SHORT_URL_CONFLICT'

# 500
DATA_STORE_ERROR = 'DATA_STORE_ERROR'
DATABASE_NOT_CONNECTED = 'DATABASE_NOT_CONNECTED'
INVALID_AUTH_TOKEN = 'INVALID_AUTH_TOKEN'
DELETION_PIPELINE_STOPPED = 'DELETION_PIPELINE_STOPPED'

# 2xx/3xx
SHORT_URL_CREATED = 'SHORT_URL_CREATED'
BATCH_CREATED = 'BATCH_CREATED'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
USER_URLS_LISTED = 'USER_URLS_LISTED'
USER_URLS_EMPTY = 'USER_URLS_EMPTY'
DELETION_ACCEPTED = 'DELETION_ACCEPTED'
USER_ISSUED = 'USER_ISSUED'
