"""
Configuration management for CDN Sync.

Config sources:
- Frontend manifest (YAML): which libraries, versions and providers to fetch
- Environment: runtime settings (cache location, TTL, cache bypass)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .constants import (
    CACHE_DIR_NAME,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_METADATA_TTL,
    FALLBACK_PROVIDER,
    LIBRARY_PLACEHOLDER,
    PROVIDERS,
)
from .exceptions import ConfigError


def is_valid_provider(name: str) -> bool:
    """Check if a provider name is one of the supported CDNs."""
    return name in PROVIDERS


def resolve_provider(library_provider: str = "", default_provider: str = "", fallback: str = FALLBACK_PROVIDER) -> str:
    """
    Pick the provider for a library.

    Precedence: library override > manifest default > hard fallback.

    Raises:
        ConfigError: If the chosen name is not a supported provider
    """
    provider = library_provider or default_provider or fallback
    if not is_valid_provider(provider):
        raise ConfigError(f"Unknown provider '{provider}' (expected one of: {', '.join(PROVIDERS)})")
    return provider


@dataclass
class LibraryConfig:
    """A single library entry in the manifest."""
    version: str = ""
    provider: str = ""  # Empty = use manifest default
    files: list = field(default_factory=list)  # Path patterns; empty = all files
    output_path: str = ""  # Overrides the manifest destination template

    def to_dict(self) -> dict:
        d = {"version": self.version}
        if self.provider:
            d["cdn"] = self.provider
        if self.files:
            d["files"] = list(self.files)
        if self.output_path:
            d["output_path"] = self.output_path
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryConfig":
        data = data or {}
        return cls(
            version=str(data.get("version") or ""),
            provider=data.get("cdn") or data.get("provider") or "",
            files=list(data.get("files") or []),
            output_path=data.get("output_path") or "",
        )


class FrontendConfig:
    """
    The frontend manifest - owned by the user, read-only to the sync core.

    destination is a path template; "{library_name}" is replaced with each
    library's name.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self.destination: str = ""
        self.project_name: str = ""
        self.provider: str = ""
        self.libraries: dict[str, LibraryConfig] = {}

    @classmethod
    def from_dict(cls, data: dict, path: Optional[Path] = None) -> "FrontendConfig":
        config = cls(path)
        data = data or {}
        config.destination = data.get("destination") or ""
        config.project_name = data.get("project_name") or ""
        config.provider = data.get("cdn") or data.get("provider") or ""
        libraries = data.get("libraries") or {}
        if not isinstance(libraries, dict):
            raise ConfigError("'libraries' must be a mapping of library name to settings")
        config.libraries = {
            name: LibraryConfig.from_dict(lib) for name, lib in libraries.items()
        }
        return config

    @classmethod
    def load(cls, path: Path) -> "FrontendConfig":
        """Load manifest from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}")
        return cls.from_dict(data, path)

    def to_dict(self) -> dict:
        d = {
            "destination": self.destination,
            "project_name": self.project_name,
            "libraries": {name: lib.to_dict() for name, lib in self.libraries.items()},
        }
        if self.provider:
            d["cdn"] = self.provider
        return d

    def resolve_provider(self, lib: LibraryConfig) -> str:
        """Effective provider for a library entry."""
        return resolve_provider(lib.provider, self.provider)

    def library_destination(self, name: str, lib: Optional[LibraryConfig] = None) -> Path:
        """
        Absolute destination directory for a library.

        Uses the library's output_path if set, otherwise the manifest
        destination template.

        Raises:
            ConfigError: If no destination is configured
        """
        lib = lib or self.libraries.get(name) or LibraryConfig()
        template = lib.output_path or self.destination
        if not template:
            raise ConfigError(f"No destination path configured for library {name}")
        resolved = template.replace(LIBRARY_PLACEHOLDER, name)
        return Path(os.path.abspath(os.path.expanduser(resolved)))

    def library_destinations(self) -> dict[str, Path]:
        """Map of library name to absolute destination directory."""
        return {name: self.library_destination(name, lib) for name, lib in self.libraries.items()}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """
    Runtime settings, built once at startup and passed to every component.
    """
    cache_dir: Path = field(default_factory=lambda: Path.home() / CACHE_DIR_NAME)
    metadata_ttl: float = DEFAULT_METADATA_TTL
    cache_enabled: bool = True
    package_cache: bool = True
    request_timeout: Optional[float] = None  # None = transport default
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """
        Build settings from CDNSYNC_* environment variables.

        CDNSYNC_CACHE_DIR   cache root directory
        CDNSYNC_CACHE_TTL   metadata TTL in seconds
        CDNSYNC_NO_CACHE    bypass the cache entirely
        """
        settings = cls()
        cache_dir = os.environ.get("CDNSYNC_CACHE_DIR")
        if cache_dir:
            settings.cache_dir = Path(cache_dir).expanduser()
        ttl = os.environ.get("CDNSYNC_CACHE_TTL")
        if ttl:
            try:
                settings.metadata_ttl = float(ttl)
            except ValueError:
                raise ConfigError(f"CDNSYNC_CACHE_TTL must be a number of seconds, got {ttl!r}")
        if _env_flag("CDNSYNC_NO_CACHE"):
            settings.cache_enabled = False

        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(settings, key):
                raise ConfigError(f"Unknown setting: {key}")
            setattr(settings, key, value)
        return settings
