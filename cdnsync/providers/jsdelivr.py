"""
jsDelivr adapter.

The package endpoint returns a recursive tree of "file" and "directory"
nodes. The tree is flattened depth-first: directories contribute their
children (an empty directory contributes nothing), files become entries
with their joined relative path.
"""

from typing import Any, List

from ..constants import JSDELIVR_FILE_URL, JSDELIVR_PACKAGE_URL, JSDELIVR_VERSIONS_URL, PROVIDER_JSDELIVR
from ..core.formatting import join_remote_path
from .base import FileEntry, ProviderAdapter, VersionSet


class JsdelivrAdapter(ProviderAdapter):
    """Variant C: recursive file tree."""

    name = PROVIDER_JSDELIVR
    file_url_template = JSDELIVR_FILE_URL

    def file_list_url(self, library: str, version: str) -> str:
        return JSDELIVR_PACKAGE_URL.format(library=library, version=version)

    def version_list_url(self, library: str) -> str:
        return JSDELIVR_VERSIONS_URL.format(library=library)

    def parse_file_list(self, library: str, version: str, data: Any) -> List[FileEntry]:
        return self.collect_files(library, version, data["files"])

    def collect_files(self, library: str, version: str, nodes: list, prefix: str = "") -> List[FileEntry]:
        """Flatten a jsDelivr file tree into FileEntry records."""
        entries: List[FileEntry] = []
        for node in nodes:
            name = node["name"].strip("/")
            path = join_remote_path(prefix, name)
            if node.get("type") == "directory":
                entries.extend(self.collect_files(library, version, node.get("files") or [], path))
            elif node.get("type") == "file":
                file_hash = node.get("hash")
                entries.append(FileEntry(
                    path=path,
                    url=self.file_url(library, version, path),
                    size=int(node.get("size") or 0),
                    integrity=f"sha256-{file_hash}" if file_hash else None,
                ))
        return entries

    def parse_version_list(self, data: Any) -> VersionSet:
        return VersionSet(
            versions={info["version"] for info in data["versions"]},
            latest=dict(data.get("tags") or {}),
        )
