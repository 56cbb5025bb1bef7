"""
CDNJS adapter.

The version endpoint returns a flat list of file paths plus a separate
path -> SRI hash map. Sizes are not provided. CDNJS only hosts curated
distribution files, so every listed path is treated as a file.
"""

from typing import Any, List

from ..constants import CDNJS_FILE_URL, CDNJS_LIBRARY_URL, CDNJS_VERSION_URL, PROVIDER_CDNJS
from ..core.formatting import clean_relative_path
from .base import FileEntry, ProviderAdapter, VersionSet


class CdnjsAdapter(ProviderAdapter):
    """Variant B: flat path list with an SRI side-map."""

    name = PROVIDER_CDNJS
    file_url_template = CDNJS_FILE_URL

    def file_list_url(self, library: str, version: str) -> str:
        return CDNJS_VERSION_URL.format(library=library, version=version)

    def version_list_url(self, library: str) -> str:
        return CDNJS_LIBRARY_URL.format(library=library)

    def parse_file_list(self, library: str, version: str, data: Any) -> List[FileEntry]:
        sri = data.get("sri") or {}
        entries: List[FileEntry] = []
        seen = set()
        for raw_path in data["files"]:
            path = clean_relative_path(raw_path)
            if not path or path in seen:
                continue
            seen.add(path)
            entries.append(FileEntry(
                path=path,
                url=self.file_url(library, version, path),
                size=0,
                integrity=sri.get(raw_path) or sri.get(path),
            ))
        return entries

    def parse_version_list(self, data: Any) -> VersionSet:
        latest = data.get("version")
        return VersionSet(
            versions=set(data["versions"]),
            latest={"latest": latest} if latest else {},
        )
