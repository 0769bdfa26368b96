import os
import shutil
import subprocess
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import text
from sqlalchemy.engine import make_url

from leqet.extensions import db
from leqet.models import SystemLog


class BackupError(RuntimeError):
    pass


def write_system_log(log_type, message):
    """Add a system log row; the caller commits."""
    entry = SystemLog(log_type=log_type, message=message)
    db.session.add(entry)
    return entry


def _backup_dir():
    path = current_app.config.get("BACKUP_DIR") or "backups"
    if not os.path.isabs(path):
        path = os.path.join(current_app.instance_path, path)
    os.makedirs(path, exist_ok=True)
    return path


def _sqlite_file(url):
    database = url.database
    if not database or database == ":memory:":
        return None
    if not os.path.isabs(database):
        # Flask-SQLAlchemy resolves relative sqlite paths against the instance folder
        database = os.path.join(current_app.instance_path, database)
    return database


def create_backup(now=None):
    """Dump the database into BACKUP_DIR and return the file name.

    SQLite databases are copied, PostgreSQL is dumped with ``pg_dump``.
    """
    now = now or datetime.utcnow()
    url = make_url(str(db.engine.url))
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")

    if url.get_backend_name() == "sqlite":
        source = _sqlite_file(url)
        if source is None or not os.path.exists(source):
            raise BackupError("In-memory or missing SQLite database cannot be backed up")
        filename = f"{os.path.splitext(os.path.basename(source))[0]}_{stamp}.sqlite"
        shutil.copy2(source, os.path.join(_backup_dir(), filename))
        return filename

    if url.get_backend_name() != "postgresql":
        raise BackupError(f"Backups are not supported for {url.get_backend_name()}")
    if not url.username:
        raise BackupError("Database user is not configured")

    filename = f"{url.database}_{stamp}.sql"
    args = [
        current_app.config.get("PG_DUMP_PATH") or "pg_dump",
        "-h", url.host or "localhost",
        "-p", str(url.port or 5432),
        "-U", url.username,
        "-d", url.database,
        "--no-owner", "--no-privileges",
        "-f", os.path.join(_backup_dir(), filename),
    ]
    env = dict(os.environ, PGPASSWORD=url.password or "")
    try:
        subprocess.run(args, env=env, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
    except FileNotFoundError as e:
        raise BackupError(
            "pg_dump command not found. Install PostgreSQL client tools or set PG_DUMP_PATH"
        ) from e
    except subprocess.CalledProcessError as e:
        raise BackupError(f"pg_dump exited with code {e.returncode}") from e
    return filename


def database_size_bytes():
    url = make_url(str(db.engine.url))
    if url.get_backend_name() == "postgresql":
        return int(db.session.execute(text("SELECT pg_database_size(current_database())")).scalar() or 0)
    if url.get_backend_name() == "sqlite":
        path = _sqlite_file(url)
        if path and os.path.exists(path):
            return os.path.getsize(path)
        page_count = db.session.execute(text("PRAGMA page_count")).scalar() or 0
        page_size = db.session.execute(text("PRAGMA page_size")).scalar() or 0
        return int(page_count * page_size)
    return 0


def last_backup_at():
    entry = (
        SystemLog.query.filter_by(log_type="backup")
        .order_by(SystemLog.created_at.desc(), SystemLog.id.desc())
        .first()
    )
    return entry.created_at if entry else None


def clear_old_logs(retention_days, now=None):
    """Delete system logs older than ``retention_days``; returns how many went."""
    cutoff = (now or datetime.utcnow()) - timedelta(days=retention_days)
    return SystemLog.query.filter(SystemLog.created_at < cutoff).delete(synchronize_session=False)


def log_counts_since(since):
    errors = SystemLog.query.filter(SystemLog.log_type == "error", SystemLog.created_at >= since).count()
    warnings = SystemLog.query.filter(SystemLog.log_type == "warning", SystemLog.created_at >= since).count()
    return errors, warnings
