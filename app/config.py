import json
import os
import secrets
from functools import lru_cache
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _load_env_file_if_present() -> None:
    env_file = BASE_DIR / ".env"
    if not env_file.exists():
        return
    try:
        lines = env_file.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return

    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key or key in os.environ:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ[key] = value


_load_env_file_if_present()


_SECRET_PLACEHOLDERS = {
    "SECRET_KEY": "change-me-legalrisk-secret",
    "PASSWORD_PEPPER": "change-me-password-pepper",
}
_SECRETS_FILENAME = ".runtime_secrets.json"


def _runtime_dir_from_env() -> Path:
    configured = os.getenv("RUNTIME_DIR", "").strip()
    return Path(configured).expanduser() if configured else BASE_DIR / "data" / "runtime"


def _read_secrets_store(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(payload, dict):
        return {}
    return {str(k): str(v) for k, v in payload.items() if isinstance(v, str)}


def _runtime_secret(env_name: str, runtime_dir: Path) -> str:
    """Return the configured secret, or a generated one persisted in the runtime dir."""
    current = os.getenv(env_name, "").strip()
    if current and current != _SECRET_PLACEHOLDERS.get(env_name, ""):
        return current

    store_path = runtime_dir / _SECRETS_FILENAME
    stored = _read_secrets_store(store_path)
    if stored.get(env_name, "").strip():
        return stored[env_name]

    stored[env_name] = secrets.token_urlsafe(32)
    try:
        tmp = store_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(stored, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, store_path)
    except OSError:
        pass
    return stored[env_name]


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    def __init__(self) -> None:
        self.app_name: str = os.getenv("APP_NAME", "LegalRisk")
        self.app_env: str = os.getenv("APP_ENV", "dev")
        self.runtime_dir: Path = _runtime_dir_from_env()
        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        self.secret_key: str = _runtime_secret("SECRET_KEY", self.runtime_dir)
        self.password_pepper: str = _runtime_secret("PASSWORD_PEPPER", self.runtime_dir)
        self.session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "legalrisk_session")
        default_db_path: Path = self.runtime_dir / "legalrisk.db"
        self.database_url: str = os.getenv("DATABASE_URL", f"sqlite:///{default_db_path.as_posix()}")
        self.request_timeout_seconds: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
        self.default_admin_email: str = os.getenv("DEFAULT_ADMIN_EMAIL", "").strip().lower()
        self.default_admin_password: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "")
        self.default_jurisdiction: str = os.getenv("DEFAULT_JURISDICTION", "AR")
        self.register_review_days: int = int(os.getenv("REGISTER_REVIEW_DAYS", "90"))
        self.seed_catalog_on_startup: bool = _env_bool("SEED_CATALOG_ON_STARTUP", "1")
        self.seeds_dir: Path = Path(os.getenv("SEEDS_DIR", str(BASE_DIR / "data" / "seeds"))).expanduser()
        self.deepseek_api_key: str = os.getenv("DEEPSEEK_API_KEY", "")
        self.deepseek_base_url: str = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com/v1")
        self.deepseek_model: str = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
        self.deepseek_temperature: float = float(os.getenv("DEEPSEEK_TEMPERATURE", "0.7"))
        self.deepseek_max_tokens: int = int(os.getenv("DEEPSEEK_MAX_TOKENS", "2000"))
        self.deepseek_max_attempts: int = int(os.getenv("DEEPSEEK_MAX_ATTEMPTS", "3"))
        self.cors_allowed_origins: list[str] = _split_csv(
            os.getenv("CORS_ALLOWED_ORIGINS", "http://127.0.0.1:8000,http://localhost:8000,http://localhost:3000")
        )
        self.cors_allow_origin_regex: str = os.getenv(
            "CORS_ALLOW_ORIGIN_REGEX",
            r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
