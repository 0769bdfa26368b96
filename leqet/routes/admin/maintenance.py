from datetime import datetime, timedelta

from flask import jsonify, current_app
from sqlalchemy import text

from leqet.extensions import db
from leqet.models import User, SystemLog
from leqet.roles import Role
from leqet.services.maintenance import (
    BackupError, create_backup, write_system_log, clear_old_logs,
    database_size_bytes, last_backup_at, log_counts_since,
)
from leqet.services.monitor import perf_recorder, uptime_seconds, memory_stats, cpu_percent, percent_of
from leqet.utils.decorators import roles_required

from . import admin_bp

RECENT_LOGS = 20


def _iso(value):
    return value.isoformat() if value else None


@admin_bp.route("/maintenance/backup", methods=["POST"])
@roles_required(Role.ADMIN)
def trigger_backup(current_user):
    now = datetime.utcnow()
    try:
        filename = create_backup(now)
    except BackupError as e:
        current_app.logger.error(f"Error triggering backup: {e}")
        return jsonify({"success": False, "message": f"Failed to create backup: {e}"}), 500

    try:
        write_system_log("backup", f"Database backup created: {filename}")
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error recording backup log: {e}")

    return jsonify({
        "success": True,
        "message": "Backup created locally",
        "timestamp": now.isoformat(),
        "filename": filename,
    }), 200


@admin_bp.route("/maintenance/health-check", methods=["POST"])
@roles_required(Role.ADMIN)
def health_check(current_user):
    try:
        db.session.execute(text("SELECT 1"))
        users = User.query.count()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Health check failed: {e}")
        return jsonify({"success": False, "dbOk": False, "message": "Health check failed"}), 500
    return jsonify({"success": True, "dbOk": True, "users": users, "message": "Health check OK"}), 200


@admin_bp.route("/maintenance/clear-cache", methods=["POST"])
@roles_required(Role.ADMIN)
def clear_cache(current_user):
    try:
        cleared = clear_old_logs(current_app.config["SYSTEM_LOG_RETENTION_DAYS"])
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error clearing cache/logs: {e}")
        return jsonify({"success": False, "message": "Failed to clear cache/logs"}), 500
    return jsonify({"success": True, "cleared": cleared}), 200


@admin_bp.route("/system/stats", methods=["GET"])
@roles_required(Role.ADMIN)
def system_stats(current_user):
    try:
        size = database_size_bytes()
        last_backup = last_backup_at()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error fetching system stats: {e}")
        return jsonify({"msg": "Failed to fetch system stats"}), 500

    return jsonify({
        "dbSizeBytes": size,
        "uptimeSeconds": uptime_seconds(),
        "lastBackup": _iso(last_backup),
    }), 200


@admin_bp.route("/system/monitor", methods=["GET"])
@roles_required(Role.ADMIN)
def system_monitor(current_user):
    cfg = current_app.config
    try:
        errors, warnings = log_counts_since(datetime.utcnow() - timedelta(hours=24))
        recent = SystemLog.query.order_by(SystemLog.created_at.desc(), SystemLog.id.desc()).limit(RECENT_LOGS).all()
        storage_used = database_size_bytes()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error building system monitor: {e}")
        return jsonify({"msg": "Failed to fetch system monitor data"}), 500

    memory = memory_stats()
    performance, bandwidth_used = perf_recorder.hourly()
    storage_limit = cfg["DB_STORAGE_LIMIT_BYTES"]
    bandwidth_limit = cfg["BANDWIDTH_LIMIT_BYTES_24H"]

    return jsonify({
        "status": "healthy",
        "uptimeSeconds": uptime_seconds(),
        "errorsLast24h": errors,
        "warningsLast24h": warnings,
        "cpuPercent": cpu_percent(),
        "memoryPercent": memory["percent"],
        "memoryTotalBytes": memory["total"],
        "memoryFreeBytes": memory["free"],
        "memoryUsedBytes": memory["used"],
        "storageUsedBytes": storage_used,
        "storageLimitBytes": storage_limit,
        "storagePercent": percent_of(storage_used, storage_limit),
        "bandwidthUsedBytes24h": bandwidth_used,
        "bandwidthLimitBytes24h": bandwidth_limit,
        "bandwidthPercent": percent_of(bandwidth_used, bandwidth_limit),
        "recentLogs": [log.to_dict() for log in recent],
        "performance": performance,
    }), 200
