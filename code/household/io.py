import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    feed_url: str
    adjustments_path: Path
    output_dir: Path
    charts_dir: Path
    tables_dir: Path
    feed_timeout: float
    host: str
    port: int


def build_settings(
    feed_url: str,
    adjustments_path: str = "adjustments.json",
    output_dir: str = "outputs",
    feed_timeout: float = 30,
    host: str = "127.0.0.1",
    port: int = 8050,
) -> Settings:
    out = Path(output_dir)
    return Settings(
        feed_url=(feed_url or "").strip(),
        adjustments_path=Path(adjustments_path),
        output_dir=out,
        charts_dir=out / "charts",
        tables_dir=out / "tables",
        feed_timeout=float(feed_timeout),
        host=host,
        port=int(port),
    )


def load_env_file() -> None:
    """
    Load a .env from the current directory, else from beside the code.
    Existing environment variables win.
    """
    cwd_env = Path.cwd() / ".env"
    code_env = Path(__file__).resolve().parents[1] / ".env"

    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=False)
    elif code_env.exists():
        load_dotenv(dotenv_path=code_env, override=False)


def load_settings(feed_url=None, require_feed: bool = True) -> Settings:
    load_env_file()
    feed_url = feed_url or os.getenv("LEDGER_FEED_URL", "")
    if require_feed and not feed_url.strip():
        raise ValueError("LEDGER_FEED_URL must be provided (Apps Script web app URL)")

    return build_settings(
        feed_url,
        adjustments_path=os.getenv("LEDGER_ADJUSTMENTS_JSON", "adjustments.json").strip(),
        output_dir=os.getenv("LEDGER_OUTPUT_DIR", "outputs").strip(),
        feed_timeout=float(os.getenv("LEDGER_FEED_TIMEOUT", "30").strip()),
        host=os.getenv("DASH_HOST", "127.0.0.1").strip(),
        port=int(os.getenv("DASH_PORT", "8050").strip()),
    )


def ensure_dirs(s: Settings):
    s.output_dir.mkdir(parents=True, exist_ok=True)
    s.charts_dir.mkdir(parents=True, exist_ok=True)
    s.tables_dir.mkdir(parents=True, exist_ok=True)
