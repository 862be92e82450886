"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
DRAFTS_DIR = Path(os.getenv("DRAFTS_PATH", str(DATA_DIR / "drafts")))
INBOX_PATH = Path(os.getenv("INBOX_PATH", str(DATA_DIR / "inbox.json")))
SENT_ITEMS_PATH = Path(os.getenv("SENT_ITEMS_PATH", str(DATA_DIR / "sent_items.json")))
PROMPTS_CONFIG_PATH = PROJECT_ROOT / "config" / "prompts.yaml"

# Draft storage: empty DATABASE_URL means one JSON document per draft under DRAFTS_DIR
DATABASE_URL = os.getenv("DATABASE_URL", "")
DRAFT_STORE_BACKEND = os.getenv("DRAFT_STORE_BACKEND", "auto").lower()  # auto | document | relational

# Generation service
GENERATION_BACKEND = os.getenv("GENERATION_BACKEND", "gemini").lower()  # gemini | agent
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-001")
EMAIL_DRAFT_TASK_TIMEOUT = float(os.getenv("EMAIL_DRAFT_TASK_TIMEOUT", "300"))
AGENT_MODEL = os.getenv("AGENT_MODEL", "openai:gpt-4o-mini")

# Mailbox
GMAIL_USER = os.getenv("GMAIL_USER", "")
INGEST_QUERY = os.getenv("INGEST_QUERY", 'subject:"Nuevo cliente potencial"')
INGEST_LIMIT = int(os.getenv("INGEST_LIMIT", "10"))

# CRM mirror (Notion)
NOTION_KEY = os.getenv("NOTION_KEY", "")
NOTION_LEADS_DB_ID = os.getenv("NOTION_LEADS_DB_ID", "")
NOTION_TIMEOUT_SECONDS = float(os.getenv("NOTION_TIMEOUT_SECONDS", "15"))
SYNC_WORKER_COUNT = int(os.getenv("SYNC_WORKER_COUNT", "2"))

# Approval workflow
APPROVER_NAME = os.getenv("APPROVER_NAME", "reviewer")
FOLLOWUP_DAYS = [int(d) for d in os.getenv("FOLLOWUP_DAYS", "3,5,6").split(",") if d.strip()]

# Logging
LOG_DIR = DATA_DIR / "logs"
LOG_FILE = LOG_DIR / "app.jsonl"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"

# OpenTelemetry
TRACING_ENABLED = os.getenv("TRACING_ENABLED", "false").lower() == "true"
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:6006/v1/traces")
SERVICE_NAME = os.getenv("SERVICE_NAME", "emailbot")


class Settings(BaseModel):
    """Snapshot of the runtime configuration, passed down through AppContext."""

    data_dir: Path = DATA_DIR
    drafts_dir: Path = DRAFTS_DIR
    inbox_path: Path = INBOX_PATH
    sent_items_path: Path = SENT_ITEMS_PATH

    database_url: str = ""
    draft_store_backend: str = "auto"

    generation_backend: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-001"
    generation_timeout_seconds: float = 300.0
    agent_model: str = "openai:gpt-4o-mini"

    gmail_user: str = ""
    ingest_query: str = ""
    ingest_limit: int = 10

    notion_key: str = ""
    notion_leads_db_id: str = ""
    notion_timeout_seconds: float = 15.0
    sync_worker_count: int = 2

    approver_name: str = "reviewer"
    followup_days: list[int] = [3, 5, 6]

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=DATA_DIR,
            drafts_dir=DRAFTS_DIR,
            inbox_path=INBOX_PATH,
            sent_items_path=SENT_ITEMS_PATH,
            database_url=DATABASE_URL,
            draft_store_backend=DRAFT_STORE_BACKEND,
            generation_backend=GENERATION_BACKEND,
            gemini_api_key=GEMINI_API_KEY,
            gemini_model=GEMINI_MODEL,
            generation_timeout_seconds=EMAIL_DRAFT_TASK_TIMEOUT,
            agent_model=AGENT_MODEL,
            gmail_user=GMAIL_USER,
            ingest_query=INGEST_QUERY,
            ingest_limit=INGEST_LIMIT,
            notion_key=NOTION_KEY,
            notion_leads_db_id=NOTION_LEADS_DB_ID,
            notion_timeout_seconds=NOTION_TIMEOUT_SECONDS,
            sync_worker_count=SYNC_WORKER_COUNT,
            approver_name=APPROVER_NAME,
            followup_days=FOLLOWUP_DAYS or [3, 5, 6],
        )
