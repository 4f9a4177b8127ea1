"""Application configuration entity."""
from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    """Application configuration for runtime environment."""
    public_dir: str = "public"
    """Working tree of the static site (the published layout root)."""
    sources_path: str = "external-sources.json"
    work_dir: str = ".tmp/external"
    """Scratch directory for downloads, archive extraction and builds."""
    ui_dir: str = "pages"
    ui_files: list[str] = Field(default_factory=lambda: ["index.html", "app.js", "styles.css"])
    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    github_token: str | None = None
    cdn_base_url: str = ""
    http_timeout: float = 300
    http_retries: int = 2
    verify_ssl: bool = True
    strict: bool = False
