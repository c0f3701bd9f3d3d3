"""Checkbox state of the manual verification checklist.

The blob is ``{"checked": [bool, ...]}`` aligned by position with
``checklists.MANUAL_CHECKLIST``. It is stored next to the report and, when
FTP credentials are configured, mirrored to an FTP server so it survives
redeploys of the reports directory.
"""

import ftplib
import io
import json
import logging
import re
from pathlib import Path

import settings

logger = logging.getLogger(__name__)

REPORT_ID_RE = re.compile(r"[a-zA-Z0-9-]+")
MAX_REPORT_ID_LENGTH = 32
FTP_TIMEOUT = 60


def is_valid_report_id(report_id) -> bool:
    return (
        isinstance(report_id, str)
        and len(report_id) <= MAX_REPORT_ID_LENGTH
        and REPORT_ID_RE.fullmatch(report_id) is not None
    )


def normalize_progress(checked, length):
    """Pad or cut ``checked`` to ``length``; anything but ``True`` is unchecked."""
    if not isinstance(checked, list):
        checked = []
    return [i < len(checked) and checked[i] is True for i in range(length)]


def progress_path(report_dir) -> Path:
    return Path(report_dir) / settings.PROGRESS_FILENAME


def remote_name(report_id):
    return f"{report_id}/{settings.PROGRESS_FILENAME}"


def parse_progress(raw):
    """Return the stored ``checked`` list, or ``[]`` for anything unreadable."""
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return []
    if isinstance(data, dict) and isinstance(data.get("checked"), list):
        return data["checked"]
    return []


def load_progress(report_dir):
    path = progress_path(report_dir)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    return parse_progress(raw)


def save_progress(report_dir, checked) -> Path:
    path = progress_path(report_dir)
    path.write_text(json.dumps({"checked": checked}), encoding="utf-8")
    return path


def _remote_path(config, name):
    return f"{config['remote_path']}/{name}" if config["remote_path"] else name


def _connect(config):
    ftp = ftplib.FTP_TLS(timeout=FTP_TIMEOUT) if config["secure"] else ftplib.FTP(timeout=FTP_TIMEOUT)
    ftp.connect(config["host"])
    ftp.login(config["user"], config["password"])
    if config["secure"]:
        ftp.prot_p()
    return ftp


def _ensure_remote_dir(ftp, directory):
    if directory.startswith("/"):
        ftp.cwd("/")
    for part in filter(None, directory.split("/")):
        try:
            ftp.cwd(part)
        except ftplib.error_perm:
            ftp.mkd(part)
            ftp.cwd(part)


def ftp_download(name, config=None):
    """Fetch ``name`` from the FTP mirror as text, ``None`` when unavailable."""
    config = config if config is not None else settings.ftp_config()
    if not config:
        return None
    buffer = io.BytesIO()
    try:
        ftp = _connect(config)
        try:
            ftp.retrbinary(f"RETR {_remote_path(config, name)}", buffer.write)
        finally:
            ftp.close()
    except ftplib.all_errors as exc:
        logger.info("FTP download of %s skipped: %s", name, exc)
        return None
    return buffer.getvalue().decode("utf-8")


def ftp_upload(local_path, name, config=None) -> bool:
    config = config if config is not None else settings.ftp_config()
    if not config:
        return False
    full_remote = _remote_path(config, name)
    directory, _, filename = full_remote.rpartition("/")
    try:
        ftp = _connect(config)
        try:
            if directory:
                _ensure_remote_dir(ftp, directory)
            with open(local_path, "rb") as fh:
                ftp.storbinary(f"STOR {filename}", fh)
        finally:
            ftp.close()
    except ftplib.all_errors as exc:
        logger.error("FTP upload failed: %s", exc)
        return False
    return True


def fetch_progress(report_id, reports_base=None):
    """Progress for a report, preferring the FTP mirror over the local copy."""
    reports_base = Path(reports_base or settings.REPORTS_BASE)
    report_dir = reports_base / report_id
    raw = ftp_download(remote_name(report_id))
    if raw is not None:
        report_dir.mkdir(parents=True, exist_ok=True)
        progress_path(report_dir).write_text(raw, encoding="utf-8")
        return parse_progress(raw)
    return load_progress(report_dir)
