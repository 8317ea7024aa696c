"""Language profiles: which files are indexed and where their definitions start."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

BUNDLED_LANGUAGES_FILE = Path(__file__).with_name("languages.yaml")


class LanguageConfigError(ValueError):
    """Raised when a language profile file cannot be used."""


@dataclass(frozen=True)
class LanguageProfile:
    """Signature patterns for one language."""

    name: str
    extensions: tuple[str, ...]
    signatures: tuple[re.Pattern[str], ...]


class LanguageRegistry:
    """Maps file extensions to language profiles."""

    def __init__(self, profiles: list[LanguageProfile]):
        self._profiles = {profile.name: profile for profile in profiles}
        self._by_extension: dict[str, LanguageProfile] = {}
        for profile in profiles:
            for extension in profile.extensions:
                owner = self._by_extension.get(extension)
                if owner is not None:
                    raise LanguageConfigError(
                        f"Extension '{extension}' is claimed by both "
                        f"'{owner.name}' and '{profile.name}'"
                    )
                self._by_extension[extension] = profile

    @property
    def extensions(self) -> frozenset[str]:
        return frozenset(self._by_extension)

    @property
    def names(self) -> list[str]:
        return sorted(self._profiles)

    def get(self, name: str) -> LanguageProfile | None:
        return self._profiles.get(name)

    def for_path(self, path: Path) -> LanguageProfile | None:
        """Return the profile owning the file's extension, if any."""
        return self._by_extension.get(path.suffix.lower())


def _parse_profile(name: str, raw: object) -> LanguageProfile:
    if not isinstance(raw, dict):
        raise LanguageConfigError(f"Language '{name}' must be a mapping")

    extensions = raw.get("extensions")
    if not isinstance(extensions, list) or not extensions:
        raise LanguageConfigError(f"Language '{name}' needs a non-empty 'extensions' list")

    normalized: list[str] = []
    for extension in extensions:
        if not isinstance(extension, str) or not extension.startswith("."):
            raise LanguageConfigError(
                f"Language '{name}' has invalid extension {extension!r} (expected '.ext')"
            )
        normalized.append(extension.lower())

    patterns = raw.get("signatures") or []
    if not isinstance(patterns, list):
        raise LanguageConfigError(f"Language '{name}' 'signatures' must be a list")

    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        if not isinstance(pattern, str):
            raise LanguageConfigError(f"Language '{name}' has a non-string signature pattern")
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise LanguageConfigError(
                f"Language '{name}' has invalid signature pattern {pattern!r}: {e}"
            ) from e

    return LanguageProfile(name=name, extensions=tuple(normalized), signatures=tuple(compiled))


def load_language_registry(path: Path | None = None) -> LanguageRegistry:
    """
    Load language profiles from a YAML file.

    Args:
        path: Profile file to load. Defaults to the bundled languages.yaml.

    Returns:
        Registry of every profile in the file.

    Raises:
        LanguageConfigError: If the file is unreadable or malformed.
    """
    source = path or BUNDLED_LANGUAGES_FILE
    try:
        document = yaml.safe_load(source.read_text(encoding="utf-8"))
    except OSError as e:
        raise LanguageConfigError(f"Cannot read language file {source}: {e}") from e
    except yaml.YAMLError as e:
        raise LanguageConfigError(f"Invalid YAML in language file {source}: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("languages"), dict):
        raise LanguageConfigError(f"Language file {source} must define a 'languages' mapping")

    profiles = [_parse_profile(str(name), raw) for name, raw in document["languages"].items()]
    registry = LanguageRegistry(profiles)
    logger.debug("Loaded %d language profiles from %s", len(profiles), source)
    return registry
