"""
UNPKG adapter.

?meta returns a flat file list whose "type" holds a MIME type
("text/javascript") because UNPKG mirrors the npm tarball verbatim.
Older responses used a nested tree with "file"/"directory" markers, so
anything not explicitly a directory is a file, and nested "files" are
descended.

UNPKG has no versions API; versions come from the npm registry.
"""

from typing import Any, List

from ..constants import NPM_ABBREVIATED_ACCEPT, NPM_REGISTRY_URL, PROVIDER_UNPKG, UNPKG_FILE_URL, UNPKG_META_URL
from ..core.formatting import clean_relative_path
from .base import FileEntry, ProviderAdapter, VersionSet


class UnpkgAdapter(ProviderAdapter):
    """Variant A: flat list with an overloaded type field."""

    name = PROVIDER_UNPKG
    file_url_template = UNPKG_FILE_URL

    def file_list_url(self, library: str, version: str) -> str:
        return UNPKG_META_URL.format(library=library, version=version)

    def version_list_url(self, library: str) -> str:
        return NPM_REGISTRY_URL.format(library=library)

    def version_list_headers(self):
        return {"Accept": NPM_ABBREVIATED_ACCEPT}

    def parse_file_list(self, library: str, version: str, data: Any) -> List[FileEntry]:
        entries: List[FileEntry] = []
        self._collect(library, version, data["files"], entries)
        return entries

    def _collect(self, library: str, version: str, items: list, entries: List[FileEntry]):
        for item in items:
            children = item.get("files")
            if item.get("type") == "directory" or isinstance(children, list):
                self._collect(library, version, children or [], entries)
                continue

            path = clean_relative_path(item["path"])
            if not path:
                continue
            entries.append(FileEntry(
                path=path,
                url=self.file_url(library, version, path),
                size=int(item.get("size") or 0),
                integrity=item.get("integrity") or None,
            ))

    def parse_version_list(self, data: Any) -> VersionSet:
        return VersionSet(
            versions=set(data["versions"].keys()),
            latest=dict(data.get("dist-tags") or {}),
        )
