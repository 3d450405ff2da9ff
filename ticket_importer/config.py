from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

from .errors import ConfigError
from .fields import resolve_timezone

@dataclass(frozen=True)
class ZendeskConfig:
    subdomain: str
    email: str
    api_token: str
    get_fields: str = "/api/v2/ticket_fields.json"
    post_many: str = "/api/v2/tickets/create_many.json"

    @property
    def base_url(self) -> str:
        return f"https://{self.subdomain}.zendesk.com"

@dataclass(frozen=True)
class WorksheetConfig:
    name: str
    top_row: int = 2
    timezone: str = "East"

@dataclass(frozen=True)
class SheetsConfig:
    service_account_json: str
    spreadsheet_id: str

@dataclass(frozen=True)
class Settings:
    zendesk: ZendeskConfig
    worksheet: WorksheetConfig
    sheets: Optional[SheetsConfig]
    log_path: Path

def _required(env: Dict[str, Optional[str]], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ConfigError(f"Missing {key}. Fill .env")
    return value

def settings_from_env(env: Dict[str, Optional[str]]) -> Settings:
    zendesk = ZendeskConfig(
        subdomain=_required(env, "ZENDESK_SUBDOMAIN"),
        email=_required(env, "ZENDESK_EMAIL"),
        api_token=_required(env, "ZENDESK_API_TOKEN"),
        get_fields=env.get("ZENDESK_GET_FIELDS_URL") or ZendeskConfig.get_fields,
        post_many=env.get("ZENDESK_POST_MANY_URL") or ZendeskConfig.post_many,
    )

    top_row = env.get("WORKSHEET_TOP_ROW") or "2"
    try:
        top_row = int(top_row)
    except ValueError:
        raise ConfigError(f"WORKSHEET_TOP_ROW must be a number, got {top_row!r}") from None
    if top_row < 1:
        raise ConfigError("WORKSHEET_TOP_ROW must be 1 or greater")

    timezone = env.get("WORKSHEET_TIMEZONE") or "East"
    resolve_timezone(timezone)
    worksheet = WorksheetConfig(
        name=_required(env, "WORKSHEET_NAME"),
        top_row=top_row,
        timezone=timezone,
    )

    sheets = None
    if env.get("GOOGLE_SHEETS_SPREADSHEET_ID"):
        sheets = SheetsConfig(
            service_account_json=_required(env, "GOOGLE_SERVICE_ACCOUNT_JSON"),
            spreadsheet_id=env["GOOGLE_SHEETS_SPREADSHEET_ID"],
        )

    return Settings(
        zendesk=zendesk,
        worksheet=worksheet,
        sheets=sheets,
        log_path=Path(env.get("LOG_PATH") or "out/import_log.csv"),
    )

def load_settings(path: str = ".env") -> Settings:
    if not Path(path).is_file():
        raise ConfigError(f"Settings file not found: {path}")
    return settings_from_env(dotenv_values(path))
