class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    STATE = V1 + "/state"
    DOCUMENT = V1 + "/document"
    DOCUMENT_UPLOAD = DOCUMENT + "/upload"
    DOCUMENT_TEXT = DOCUMENT + "/text"
    DOCUMENT_HEADINGS = DOCUMENT + "/headings"
    ENTRIES = V1 + "/entries"
    ENTRY = ENTRIES + "/{entry_id}"
    SEARCH_MODE = V1 + "/search-mode"
    SEARCH = V1 + "/search"
    SEARCH_RETRY = SEARCH + "/retry"
    PROVIDER = V1 + "/provider"
    THEME_TOGGLE = V1 + "/theme/toggle"
    ADMIN_LOGIN = V1 + "/admin/login"
    ADMIN_LOCK = V1 + "/admin/lock"
    VIEW_MODE = V1 + "/view-mode"
    # Server-side Gemini proxy (kept outside the versioned app surface)
    GENERATE = API + "/generate"


# Manual-entry HTS code: digits and dots, optionally a dash-range.
HTS_CODE_PATTERN = r"^[\d.]+(?:\s*-\s*[\d.]+)?$"

NO_REFERENCE_LOOKUP_MESSAGE = "No reference document loaded to search."
DEFAULT_SEARCH_ERROR = (
    "An unexpected error occurred. Please check your data source and try again."
)
