from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class SearchMode(str, Enum):
    COMPLIANCE = "compliance"
    LOOKUP = "lookup"


class ViewMode(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ProviderName(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    ADMIN_REQUIRED = ErrorInfo("Admin access required", status.HTTP_403_FORBIDDEN)
    INCORRECT_PASSCODE = ErrorInfo("Incorrect Password", status.HTTP_401_UNAUTHORIZED)
    ENTRY_NOT_FOUND = ErrorInfo("Manual entry not found", status.HTTP_404_NOT_FOUND)
    NO_REFERENCE_DOCUMENT = ErrorInfo(
        "No reference document loaded", status.HTTP_409_CONFLICT
    )
    EMPTY_DOCUMENT = ErrorInfo("Document is empty", status.HTTP_400_BAD_REQUEST)
