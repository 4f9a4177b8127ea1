"""Local environment configuration."""
import os
from cdn_registry.domain.entities.app_config import AppConfig

config = AppConfig(
    public_dir=os.getenv("PUBLIC_DIR", "public"),
    sources_path=os.getenv("SOURCES_PATH", "external-sources.json"),
    work_dir=os.getenv("WORK_DIR", ".tmp/external"),
    github_token=os.getenv("GITHUB_TOKEN"),
    cdn_base_url=os.getenv("CDN_BASE_URL", ""),
    http_retries=0,
    verify_ssl=os.getenv("VERIFY_SSL", "true").lower() == "true",
)
