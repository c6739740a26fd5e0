import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    STORE_ROOT: str = Field(default="htsanalyzer", validation_alias="STORE_ROOT")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    MAX_FILE_MB: int = Field(..., validation_alias="MAX_FILE_MB")
    TRUST_PROXY: bool = Field(..., validation_alias="TRUST_PROXY")

    # Analyzer
    DEFAULT_PROVIDER: str = Field(default="gemini", validation_alias="DEFAULT_PROVIDER")
    ADMIN_PASSCODE: str = Field(default="332", validation_alias="ADMIN_PASSCODE")
    HISTORY_LIMIT: int = Field(default=5, validation_alias="HISTORY_LIMIT")

    # Gemini Settings
    GEMINI_API_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        validation_alias="GEMINI_API_URL",
    )
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    GEMINI_API_KEY: str = Field(default="", validation_alias="GEMINI_API_KEY")

    # OpenAI Settings
    OPENAI_API_URL: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        validation_alias="OPENAI_API_URL",
    )
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    OPENAI_API_KEY: str = Field(default="", validation_alias="OPENAI_API_KEY")

    # Timeouts (seconds)
    LLM_TIMEOUT_SECONDS: float = Field(default=60.0, validation_alias="LLM_TIMEOUT_SECONDS")
    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=25.0, validation_alias="UPSTREAM_TIMEOUT_SECONDS"
    )

    # Logging knobs
    LOGGER_NAME: str = "hts-analyzer"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts ({hts_code} / {provision_code} are substituted per request)
    CLASSIFY_TASK_PROMPT: str = (
        "You are a Trade Compliance Expert.\n"
        "Analyze the provided reference document (if any) and the Manual Override Rules carefully.\n"
        "\n"
        'Task: Determine if the HTS Code "{hts_code}" falls under any "Derivative HTS" category '
        "for Aluminum or Steel.\n"
        "\n"
        "Rules:\n"
        "1. The user might provide a 4, 6, 8, or 10 digit code. Check if it matches any specific code "
        "or falls within any ranges/categories defined in the text or manual rules.\n"
        "2. If the code falls under multiple categories (e.g., it is under a general heading AND a "
        "specific sub-derivative list), YOU MUST LIST ALL OF THEM in the 'matches' array.\n"
        "3. For EACH match, provide the specific 'derivativeCategory' name and a 'matchDetail' "
        "explaining the exact text/rule it matched.\n"
        "4. Identify if each match relates to Aluminum, Steel, or Both.\n"
        "5. For each match, assign a 'confidence' level ('High', 'Medium', 'Low'). A code that "
        "explicitly matches a Manual Override Rule is a 'High' confidence match.\n"
        "6. If the code matches nothing, set 'found' to false and leave 'matches' empty.\n"
        "7. Summarize why the code does or does not match in 'reasoning'.\n"
        "8. Return the result in JSON format.\n"
    )

    LOOKUP_TASK_PROMPT: str = (
        "You are a Trade Compliance Expert.\n"
        "Analyze the provided reference document.\n"
        "\n"
        'Task: The user is asking for the details of a specific HTS Provision or Heading: "{provision_code}".\n'
        "(Example: 9903.81.91, Heading 7604, etc.)\n"
        "\n"
        "Requirements:\n"
        "1. Search the text for this specific code or heading.\n"
        "2. If found, extract the FULL text description, scope, and any notes (e.g. effective dates, "
        "exclusions, specific countries) associated with it.\n"
        "3. Identify if it relates to Steel, Aluminum, or Both.\n"
        "4. If the exact code is not found, but a parent range or very similar provision is found, "
        "provide that detail but note it in the description.\n"
        "5. Return the result in JSON format using the provided schema.\n"
    )

    HEADINGS_TASK_PROMPT: str = (
        "Analyze the document and extract a list of all HTS Headings (typically 4-digit codes like "
        "7601, 7604, 7301, etc.) that are explicitly mentioned as having derivatives or being part "
        "of the scope.\n"
        "For each heading:\n"
        "1. Provide the heading code.\n"
        "2. Provide a brief title/description.\n"
        "3. Provide a detailed summary of the text content related to this heading (rules, scope, "
        "exclusions).\n"
        "Return the data in JSON format with a 'headings' array.\n"
    )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
