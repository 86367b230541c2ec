"""Configuration defaults, settings-file loading, and .env handling.

WHY: Tunable values (finalize-timer delay, dedupe memory size, default
punctuation switches, contact-form endpoint) are empirical and change
between deployments. Keeping them in one module, overridable from the
environment, means nobody has to hunt through logic to retune them.

HOW: python-dotenv loads the .env file on import. Defaults are module
constants read from environment variables. Settings documents (the JSON
the settings panel stores) are parsed with pydantic so bad values fail
with a clear validation error.

RULES:
- HEARBUDDY_FINALIZE_DELAY_MS defaults to 600
- HEARBUDDY_DEDUPE_CAPACITY defaults to 100
- Boolean env vars accept "true"/"false" (case-insensitive)
- The Web3Forms access key is loaded from .env, never hardcoded
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from hearbuddy.core.models import PunctuationConfig

# Load .env from the project root (where the app is run from)
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


# ---------------------------------------------------------------------------
# Transcript engine tuning
# ---------------------------------------------------------------------------

FINALIZE_DELAY_MS = int(os.getenv("HEARBUDDY_FINALIZE_DELAY_MS", "600"))
"""How long an unchanged interim fragment waits before it is committed."""

DEDUPE_CAPACITY = int(os.getenv("HEARBUDDY_DEDUPE_CAPACITY", "100"))
"""Maximum number of fragment keys kept for duplicate suppression."""

RECOGNITION_LANGUAGE = os.getenv("HEARBUDDY_LANGUAGE", "en-US")

# ---------------------------------------------------------------------------
# Punctuation defaults
# ---------------------------------------------------------------------------

DEFAULT_AUTO_PUNCTUATION = _env_flag("HEARBUDDY_AUTO_PUNCTUATION", "true")
DEFAULT_DETECT_QUESTIONS = _env_flag("HEARBUDDY_DETECT_QUESTIONS", "true")
DEFAULT_ADD_PERIODS = _env_flag("HEARBUDDY_ADD_PERIODS", "true")
DEFAULT_ADD_COMMAS = _env_flag("HEARBUDDY_ADD_COMMAS", "false")

# ---------------------------------------------------------------------------
# Contact form
# ---------------------------------------------------------------------------

WEB3FORMS_ENDPOINT = os.getenv("WEB3FORMS_ENDPOINT", "https://api.web3forms.com/submit")


def default_punctuation_config() -> PunctuationConfig:
    """Build the punctuation config from the environment defaults."""
    return PunctuationConfig(
        auto_punctuation=DEFAULT_AUTO_PUNCTUATION,
        detect_questions=DEFAULT_DETECT_QUESTIONS,
        add_periods=DEFAULT_ADD_PERIODS,
        add_commas=DEFAULT_ADD_COMMAS,
    )


def load_settings_file(path: Path) -> PunctuationConfig:
    """Load punctuation settings from a JSON document.

    WHY: The settings panel stores its toggles as JSON. Reusing that file
    keeps the CLI and the app in agreement.

    HOW: Keys missing from the document fall back to the environment
    defaults; present keys are validated by pydantic.

    RULES:
    - Accepts camelCase ("autoPunctuation") and snake_case keys
    - Unknown keys are ignored
    - Raises pydantic.ValidationError on non-boolean values
    - Raises OSError if the file cannot be read
    """
    text = Path(path).read_text(encoding="utf-8")
    overrides = PunctuationConfig.model_validate_json(text)
    explicit = overrides.model_dump(exclude_unset=True)
    return default_punctuation_config().model_copy(update=explicit)


def load_contact_access_key() -> str:
    """Load the Web3Forms access key from the environment.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("WEB3FORMS_ACCESS_KEY", "").strip()
    if not key:
        raise ValueError(
            "Contact form access key not configured. "
            "Add WEB3FORMS_ACCESS_KEY to the .env file in the app folder."
        )
    return key
