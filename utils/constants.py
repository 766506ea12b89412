"""
utils/constants.py

Purpose: Centralized static content

- Storage keys shared by the token store and user cache
- Route paths used by guards and redirects
- User-facing messages and error fallbacks
- Sort and status options for list views

(Prevents hardcoding across the codebase)
"""

# ============================================================
# LOCAL STORAGE KEYS
# ============================================================

AUTH_TOKEN_KEY = "auth_token"
USER_DATA_KEY = "user_data"
USER_DATA_TIMESTAMP_KEY = "user_data_timestamp"
REMEMBERED_EMAIL_KEY = "rememberedEmail"
REMEMBER_ME_KEY = "rememberMe"

# ============================================================
# ROUTES
# ============================================================

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"
ROOT_PATH = "/"
REDIRECT_PARAM = "redirect"

# Paths where the login redirect omits the ?redirect= parameter
NO_REDIRECT_PARAM_PATHS = (ROOT_PATH, DASHBOARD_PATH)

# ============================================================
# API ENDPOINTS
# ============================================================

AUTH_LOGIN = "/api/auth/login"
AUTH_REGISTER = "/api/auth/register"
AUTH_ME = "/api/auth/me"
AUTH_FORGOT_PASSWORD = "/api/auth/forgot-password"
AUTH_RESET_PASSWORD = "/api/auth/reset-password"
AUTH_VERIFY_RESET_TOKEN = "/api/auth/verify-reset-token/{token}"
AUTH_CHANGE_PASSWORD = "/api/auth/change-password"
USERS = "/api/users"
USER_PROFILE = "/api/users/{user_id}/profile"
USER_BANK = "/api/users/{user_id}/bank"
TRANSPORT_ENTRIES = "/api/transport-entries"
TRANSPORT_ENTRY = "/api/transport-entries/{entry_id}"
HEALTH = "/health"

# ============================================================
# ERROR MESSAGES
# ============================================================

NETWORK_ERROR_MESSAGE = "Network error occurred"
HTTP_ERROR_MESSAGE = "HTTP error! status: {status}"
LOGIN_FAILED_MESSAGE = "Login failed"
REGISTRATION_FAILED_MESSAGE = "Registration failed"
FETCH_ENTRIES_FAILED_MESSAGE = "Failed to fetch entries"
CREATE_ENTRY_FAILED_MESSAGE = "Failed to create entry"
UPDATE_ENTRY_FAILED_MESSAGE = "Failed to update entry"
DELETE_ENTRY_FAILED_MESSAGE = "Failed to delete entry"
ENTRY_NOT_FOUND_MESSAGE = "Transport entry not found"
PROFILE_UPDATE_FAILED_MESSAGE = "Failed to update profile"
BANK_UPDATE_FAILED_MESSAGE = "Failed to update bank details"
PASSWORD_CHANGE_FAILED_MESSAGE = "Failed to change password"
PASSWORD_MISMATCH_MESSAGE = "New passwords do not match"
RESET_REQUEST_FAILED_MESSAGE = "Failed to send reset email"
RESET_TOKEN_INVALID_MESSAGE = "Invalid or expired reset link"
NOT_AUTHENTICATED_MESSAGE = "Please log in to continue"

# ============================================================
# SUCCESS MESSAGES
# ============================================================

ENTRY_CREATED_MESSAGE = "Transport entry created successfully!"
ENTRY_UPDATED_MESSAGE = "Transport entry updated successfully!"
ENTRY_DELETED_MESSAGE = "Transport entry deleted successfully!"
PROFILE_UPDATED_MESSAGE = "Profile updated successfully!"
BANK_UPDATED_MESSAGE = "Bank details updated successfully!"
PASSWORD_CHANGED_MESSAGE = "Password updated successfully!"
RESET_EMAIL_SENT_MESSAGE = "If an account exists for this email, a reset link has been sent."

# ============================================================
# LIST VIEW OPTIONS
# ============================================================

ALL_FILTER = "all"

SORT_OPTIONS = [
    {"value": "date-desc", "label": "Date (Newest)"},
    {"value": "date-asc", "label": "Date (Oldest)"},
    {"value": "amount-desc", "label": "Amount (High to Low)"},
    {"value": "amount-asc", "label": "Amount (Low to High)"},
    {"value": "vehicle", "label": "Vehicle Number"},
    {"value": "status", "label": "Status"},
]

DEFAULT_SORT = "date-desc"

# Top-N sizes for rankings
ANALYSIS_TOP_N = 5
DASHBOARD_TOP_N = 4
RECENT_ENTRIES_COUNT = 5
ANALYSIS_TREND_MONTHS = 12
DASHBOARD_TREND_MONTHS = 6
