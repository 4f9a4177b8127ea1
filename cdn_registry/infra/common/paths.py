"""Centralized public directory path building."""

INDEX_DIR = "_index"
MANIFEST_NAME = "manifest.json"
POINTERS = ("@latest", "@stable", "@beta")


class PublicPathBuilder:
    """Builder for paths (relative to the public dir) of the published layout."""
    
    @staticmethod
    def package_dir(package: str) -> str:
        """Get package directory."""
        return package
    
    @staticmethod
    def version_dir_name(version: str) -> str:
        """Get directory name for a version id (``1.2.3`` -> ``v1.2.3``)."""
        return version if version.startswith("v") else f"v{version}"
    
    @classmethod
    def version_dir(cls, package: str, version: str) -> str:
        """Get immutable version directory."""
        return f"{package}/{cls.version_dir_name(version)}"
    
    @staticmethod
    def pointer_dir(package: str, pointer: str) -> str:
        """Get channel pointer or alias directory (``@latest``, ``v2``, ``v2.3``)."""
        return f"{package}/{pointer}"
    
    @staticmethod
    def manifest_key(directory: str) -> str:
        """Get manifest path inside a version or pointer directory."""
        return f"{directory}/{MANIFEST_NAME}"
    
    @staticmethod
    def versions_key(package: str) -> str:
        """Get per-package version index."""
        return f"{package}/versions.json"
    
    @staticmethod
    def global_index_key() -> str:
        """Get global package index."""
        return f"{INDEX_DIR}/index.json"
    
    @staticmethod
    def bundle_manifest_key() -> str:
        """Get bundle manifest."""
        return f"{INDEX_DIR}/bundle-manifest.json"
    
    @staticmethod
    def state_key() -> str:
        """Get sync state ledger."""
        return f"{INDEX_DIR}/external-state.json"
    
    @staticmethod
    def report_key() -> str:
        """Get sync report."""
        return f"{INDEX_DIR}/sync-report.json"
    
    @staticmethod
    def file_url(package: str, version: str, name: str) -> str:
        """Get site-absolute URL of a published file."""
        return f"/{package}/{PublicPathBuilder.version_dir_name(version)}/{name}"
