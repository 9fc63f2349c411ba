"""
ExportConfig — Explicit configuration for one exporter process.

Configuration is read exactly once, by ExportConfig.from_env(), and the
resulting object is passed to the client, fetcher and orchestrator. No other
module reads exporter settings from the environment, so two configs with different
shops or tokens can be used side by side (e.g., in parallel tests).

Required: SHOPIFY_SHOP_NAME, SHOPIFY_ADMIN_ACCESS_TOKEN.
See settings.py for defaults of everything else.
"""

import os
import re
from dataclasses import dataclass
from datetime import timedelta, timezone
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .settings import DEFAULT_SETTINGS, MAX_PAGE_SIZE

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def parse_utc_offset(value: str) -> timezone:
    """Parse "+05:30" / "-0800" / "Z" into a fixed timezone.

    Raises:
        ValueError: If the value is not a valid offset.
    """
    value = (value or "").strip()
    if value.upper() in ("Z", "UTC"):
        return timezone.utc
    match = _OFFSET_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid UTC offset '{value}' (expected e.g. +02:00)")
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        raise ValueError(f"Invalid UTC offset '{value}' (must be under 24h)")
    return timezone(-delta if sign == "-" else delta)


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


@dataclass
class ExportConfig:
    """Settings for talking to one Shopify store and writing its exports.

    Attributes:
        shop_name: Shop host, e.g. "my-shop.myshopify.com".
        access_token: Admin API access token.
        api_version: Admin REST API version segment.
        page_size: Orders requested per page (1-250).
        max_pages: Page ceiling for one export.
        page_delay: Seconds to wait between page requests.
        request_timeout: Per-request timeout in seconds.
        utc_offset: Fixed offset string used to render dates.
        output_dir: Root directory for export folders.
        retention_days: Days to keep old export folders (0 = forever).
        export_filename: CSV filename inside an export folder.
        debug: Verbose output.
    """

    shop_name: str = ""
    access_token: str = ""
    api_version: str = DEFAULT_SETTINGS["SHOPIFY_API_VERSION"]
    page_size: int = DEFAULT_SETTINGS["PAGE_SIZE"]
    max_pages: int = DEFAULT_SETTINGS["MAX_PAGES"]
    page_delay: float = DEFAULT_SETTINGS["PAGE_DELAY_SECONDS"]
    request_timeout: float = DEFAULT_SETTINGS["REQUEST_TIMEOUT_SECONDS"]
    utc_offset: str = DEFAULT_SETTINGS["EXPORT_UTC_OFFSET"]
    output_dir: str = DEFAULT_SETTINGS["OUTPUT_DIR"]
    retention_days: int = DEFAULT_SETTINGS["OUTPUT_RETENTION_DAYS"]
    export_filename: str = DEFAULT_SETTINGS["EXPORT_FILENAME"]
    debug: bool = DEFAULT_SETTINGS["DEBUG"]

    @classmethod
    def from_env(cls, env_file: Optional[str] = "./.env") -> "ExportConfig":
        """Load configuration from a .env file (if present) and the environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        if env_file:
            env_path = Path(env_file)
            if env_path.exists():
                load_dotenv(env_path)
                print(f"Loaded configuration from: {env_file}")
            else:
                print(f"Warning: {env_file} not found, using defaults/environment")

        return cls(
            shop_name=os.getenv("SHOPIFY_SHOP_NAME", ""),
            access_token=os.getenv("SHOPIFY_ADMIN_ACCESS_TOKEN", ""),
            api_version=os.getenv("SHOPIFY_API_VERSION", DEFAULT_SETTINGS["SHOPIFY_API_VERSION"]),
            page_size=int(os.getenv("PAGE_SIZE", str(DEFAULT_SETTINGS["PAGE_SIZE"]))),
            max_pages=int(os.getenv("MAX_PAGES", str(DEFAULT_SETTINGS["MAX_PAGES"]))),
            page_delay=float(
                os.getenv("PAGE_DELAY_SECONDS", str(DEFAULT_SETTINGS["PAGE_DELAY_SECONDS"]))
            ),
            request_timeout=float(
                os.getenv("REQUEST_TIMEOUT_SECONDS", str(DEFAULT_SETTINGS["REQUEST_TIMEOUT_SECONDS"]))
            ),
            utc_offset=os.getenv("EXPORT_UTC_OFFSET", DEFAULT_SETTINGS["EXPORT_UTC_OFFSET"]),
            output_dir=os.getenv("OUTPUT_DIR", DEFAULT_SETTINGS["OUTPUT_DIR"]),
            retention_days=int(
                os.getenv("OUTPUT_RETENTION_DAYS", str(DEFAULT_SETTINGS["OUTPUT_RETENTION_DAYS"]))
            ),
            export_filename=os.getenv("EXPORT_FILENAME", DEFAULT_SETTINGS["EXPORT_FILENAME"]),
            debug=_env_bool("DEBUG", DEFAULT_SETTINGS["DEBUG"]),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        if not self.shop_name:
            errors.append("SHOPIFY_SHOP_NAME is required")
        if not self.access_token:
            errors.append("SHOPIFY_ADMIN_ACCESS_TOKEN is required")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            errors.append(f"PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")
        if self.max_pages < 1:
            errors.append("MAX_PAGES must be at least 1")
        if self.page_delay < 0:
            errors.append("PAGE_DELAY_SECONDS cannot be negative")
        if self.request_timeout <= 0:
            errors.append("REQUEST_TIMEOUT_SECONDS must be positive")
        try:
            parse_utc_offset(self.utc_offset)
        except ValueError as e:
            errors.append(f"EXPORT_UTC_OFFSET: {e}")
        return errors

    @property
    def display_timezone(self) -> timezone:
        return parse_utc_offset(self.utc_offset)

    @property
    def api_base_url(self) -> str:
        shop = self.shop_name.strip().rstrip("/")
        if shop.startswith("https://"):
            shop = shop[len("https://"):]
        elif shop.startswith("http://"):
            shop = shop[len("http://"):]
        return f"https://{shop}/admin/api/{self.api_version}"
