import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

REPORTS_BASE = Path(os.getenv("REPORTS_BASE", str(BASE_DIR / "reports")))
PORT = int(os.getenv("PORT", "3456"))
ALLOWED_ORIGIN = os.getenv("ALLOWED_ORIGIN", "*")

# axe-core is injected into every page. A local path avoids the CDN round trip.
AXE_SOURCE = os.getenv(
    "AXE_SOURCE", "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"
)
NAVIGATION_TIMEOUT_MS = int(os.getenv("NAVIGATION_TIMEOUT_MS", "60000"))

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

RESULTS_FILENAME = "accessibility-results.json"
PREVIOUS_RESULTS_FILENAME = "accessibility-results-previous.json"
REPORT_FILENAME = "accessibility-report.html"
PROGRESS_FILENAME = "manual-progress.json"


def ftp_config():
    """Return FTP settings for the manual progress mirror, or ``None``."""
    host = os.getenv("FTP_HOST")
    user = os.getenv("FTP_USER")
    if not host or not user:
        return None
    return {
        "host": host,
        "user": user,
        "password": os.getenv("FTP_PASSWORD", ""),
        "secure": os.getenv("FTP_SECURE", "false").lower() == "true",
        "remote_path": os.getenv("FTP_REMOTE_PATH", "").rstrip("/"),
    }
