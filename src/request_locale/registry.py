"""Supported-locale registry.

The registry is built once at start-up from, in priority order:

1. an explicit ``LOCALES`` list,
2. a key inside a JSON or TOML configuration file,
3. the entries of a directory of locale resource files (``en_US.json``,
   ``tr_TR/``, ...).

It is immutable afterwards and safe to share between concurrent requests.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import json
from pathlib import Path
import tomllib
from typing import Any

from request_locale.core.config import LocaleSettings
from request_locale.core.exceptions import LocaleConfigurationError
from request_locale.core.logging import get_logger
from request_locale.sources import validate_order

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LocaleRegistry:
    """Supported locales plus the default, fixed for the process lifetime."""

    supported: tuple[str, ...]
    default: str

    def __post_init__(self) -> None:
        if not self.supported:
            raise LocaleConfigurationError("No locales found.", setting="LOCALES")
        repeated = sorted(
            {locale for locale in self.supported if self.supported.count(locale) > 1}
        )
        if repeated:
            raise LocaleConfigurationError(
                f"Supported locales must be distinct, repeated: {', '.join(repeated)}",
                setting="LOCALES",
            )
        if self.default not in self.supported:
            raise LocaleConfigurationError(
                f'Default locale "{self.default}" is not one of the supported '
                f"locales: {', '.join(self.supported)}",
                setting="DEFAULT",
            )

    def is_supported(self, locale: str) -> bool:
        return locale in self.supported


def scan_locales(
    path: Path,
    file_type: str = "json",
    directories: bool = True,
    exclude: Iterable[str] = (),
) -> list[str]:
    """Derive locale names from the entries of ``path``.

    ``en_US.json`` becomes ``en_US``; directory names are used as-is when
    ``directories`` is set. Entries named in ``exclude`` are skipped.
    Duplicates (``en_US.json`` next to ``en_US/``) are reported once.
    """
    excluded = set(exclude)
    suffix = f".{file_type}" if file_type else ""
    locales: list[str] = []

    for entry in sorted(path.iterdir()):
        if entry.name in excluded:
            continue
        if entry.is_dir() and not directories:
            continue
        name = entry.name.removesuffix(suffix) if suffix else entry.name
        if name and name not in locales:
            locales.append(name)

    return locales


def _lookup(data: Any, key: str) -> Any:
    """Resolve a dotted key path such as ``tool.app.locales``."""
    current = data
    for part in key.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
    return current


def load_config_locales(path: Path, key: str) -> list[str]:
    """Read the locale list stored under ``key`` in a JSON or TOML file.

    Returns an empty list when the key is missing or does not hold a
    sequence of strings.
    """
    try:
        if path.suffix == ".toml":
            with path.open("rb") as f:
                data = tomllib.load(f)
        else:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, ValueError) as e:
        raise LocaleConfigurationError(
            f'Configuration file "{path}" cannot be read: {e}',
            setting="CONFIG_FILE",
        ) from e

    value = _lookup(data, key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return []
    return value


def check_requirements(settings: LocaleSettings) -> None:
    """Validate the options that can be checked before any locale is read."""
    validate_order(settings.ORDER)

    if settings.LOCALES:
        # No config file or scanning necessary
        return

    if settings.SCAN_PATH is not None and not settings.SCAN_PATH.is_dir():
        raise LocaleConfigurationError(
            f'Locales directory "{settings.SCAN_PATH}" cannot be found.',
            setting="SCAN_PATH",
        )

    if settings.CONFIG_FILE is not None and not settings.CONFIG_FILE.is_file():
        raise LocaleConfigurationError(
            f'Configuration file "{settings.CONFIG_FILE}" cannot be found.',
            setting="CONFIG_FILE",
        )


def available_locales(settings: LocaleSettings) -> tuple[str, Sequence[str]]:
    """Return the locales and the name of the source they came from."""
    if settings.LOCALES:
        return "settings", list(settings.LOCALES)

    if settings.CONFIG_FILE is not None and settings.CONFIG_KEY:
        locales = load_config_locales(settings.CONFIG_FILE, settings.CONFIG_KEY)
        if locales:
            return "config_file", locales

    if settings.SCAN_PATH is not None:
        locales = scan_locales(
            settings.SCAN_PATH,
            file_type=settings.SCAN_FILE_TYPE,
            directories=settings.SCAN_DIRECTORIES,
            exclude=settings.SCAN_EXCLUDE,
        )
        if locales:
            return "scan", locales

    return "none", []


def build_registry(settings: LocaleSettings) -> LocaleRegistry:
    """Build the registry or raise LocaleConfigurationError."""
    check_requirements(settings)

    origin, locales = available_locales(settings)
    if not locales:
        raise LocaleConfigurationError("No locales found.", setting="LOCALES")

    registry = LocaleRegistry(
        supported=tuple(locales),
        default=settings.DEFAULT or locales[0],
    )

    logger.info(
        "locale_registry_built",
        origin=origin,
        supported=list(registry.supported),
        default=registry.default,
    )
    return registry
