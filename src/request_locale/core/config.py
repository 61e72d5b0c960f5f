from functools import lru_cache
import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_csv(v: Any) -> list[str]:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    if isinstance(v, str):
        v = json.loads(v)
    if isinstance(v, list | tuple):
        return list(v)
    raise ValueError(v)


CsvList = Annotated[list[str] | str, BeforeValidator(parse_csv)]


class LocaleSettings(BaseSettings):
    """Locale resolution options.

    Read from ``LOCALE_*`` environment variables (or a ``.env`` file) when
    not passed explicitly. Build one instance at start-up and hand it to
    ``LocalePlugin``; nothing in the package reads settings implicitly.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCALE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # Supported locales: explicit list, then config file, then directory scan
    LOCALES: CsvList = []
    DEFAULT: str | None = None

    CONFIG_FILE: Path | None = None
    CONFIG_KEY: str = "locales"

    SCAN_PATH: Path | None = None
    SCAN_FILE_TYPE: str = "json"
    SCAN_DIRECTORIES: bool = True
    SCAN_EXCLUDE: CsvList = ["templates", "template.json"]

    # Keys looked up in each request source
    PARAM_NAME: str = "lang"
    QUERY_NAME: str = "lang"
    HEADER_NAME: str = "accept-language"
    COOKIE_NAME: str = "lang"
    COOKIE_KEY: str | None = None

    # Sources consulted in priority order; names are checked when the
    # registry is built so the failure surfaces as a configuration error
    ORDER: CsvList = ["path", "query", "header"]
    STRICT: bool = False

    CREATE_ACCESSORS: bool = True
    GETTER: str | None = "i18n.get_locale"
    SETTER: str | None = "i18n.set_locale"
    CALLBACK: str | None = "i18n.set_locale"

    ON_EVENT: Literal["request", "route"] = "request"

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_JSON: bool = False

    @field_validator("SCAN_FILE_TYPE", mode="after")
    @classmethod
    def strip_leading_dot(cls, v: str) -> str:
        """Accept both ``json`` and ``.json``."""
        return v.lstrip(".")

    @field_validator("HEADER_NAME", mode="after")
    @classmethod
    def lowercase_header(cls, v: str) -> str:
        return v.lower()


@lru_cache
def get_settings() -> LocaleSettings:
    return LocaleSettings()
