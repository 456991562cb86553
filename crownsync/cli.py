"""
CrownSync - CLI Mode Module

Implements the command-line interface for headless operation.
Uses stored credentials, runs reconciliation passes and remote session
deletions, and logs to a timestamped file.

Author: CrownSync Project
"""

import sys
import getpass
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

from crownsync.managers import ConfigManager, CatalogManager
from crownsync.api import CloudBackendAPI
from crownsync.exceptions import CrownSyncAPIError, CrownSyncAuthError, CrownSyncPermissionError
from crownsync.models import (
    ReconciliationContext, SyncStatus, IMPORT_SCOPE_ALL, IMPORT_SCOPE_LINKED_SESSIONS
)
from crownsync.operations import ReconciliationEngine


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_AUTH_ERROR = 3
EXIT_PERMISSION_ERROR = 4


def setup_cli_logging(config_manager: ConfigManager) -> Path:
    """
    Setup logging for CLI mode with timestamped log file.

    Creates log file with format: crownsync-YYYY-MM-DD-HH-MM-SS.log
    in a "logs" subdirectory next to config.json.

    Args:
        config_manager: ConfigManager instance for log settings

    Returns:
        Path to the created log file
    """
    log_level = config_manager.get("log_level", "INFO")

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_filename = f"crownsync-{timestamp}.log"

    log_dir = config_manager.base_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / log_filename

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)  # Also output to console
        ]
    )

    logger = logging.getLogger(__name__)
    logger.info(f"CrownSync CLI - Log file: {log_file}")
    logger.info(f"Log level: {log_level}")

    return log_file


def cleanup_old_logs(config_manager: ConfigManager, current_log: Path) -> int:
    """
    Delete log files older than retention period.

    Args:
        config_manager: ConfigManager instance for retention settings
        current_log: Path to current log file (don't delete this)

    Returns:
        Number of log files deleted
    """
    logger = logging.getLogger(__name__)
    retention_days = config_manager.get("log_retention_days", 30)

    if not retention_days or retention_days <= 0:
        return 0  # Retention disabled

    logger.info(f"Cleaning up log files older than {retention_days} days")

    log_dir = current_log.parent
    cutoff_time = datetime.now().timestamp() - (retention_days * 86400)

    deleted_count = 0
    for log_file in log_dir.glob("crownsync-*.log"):
        if log_file == current_log:
            continue

        try:
            if log_file.stat().st_mtime < cutoff_time:
                log_file.unlink()
                deleted_count += 1
        except OSError as e:
            logger.warning(f"Failed to delete old log file {log_file}: {e}")

    if deleted_count > 0:
        logger.info(f"Deleted {deleted_count} old log file(s)")
    return deleted_count


def build_context(config_manager: ConfigManager, prefix_override: Optional[str] = None) -> ReconciliationContext:
    """
    Build a pass context from configuration.

    Args:
        config_manager: ConfigManager instance
        prefix_override: Optional prefix from --prefix argument

    Returns:
        ReconciliationContext

    Raises:
        ValueError: If import_scope is not a known value
    """
    import_scope = config_manager.get("import_scope", IMPORT_SCOPE_ALL)
    if import_scope not in (IMPORT_SCOPE_ALL, IMPORT_SCOPE_LINKED_SESSIONS):
        raise ValueError(f"Unknown import_scope: {import_scope}")

    return ReconciliationContext(
        prefix=prefix_override or config_manager.get("remote_prefix", "sessions/"),
        root_prefix=config_manager.get("remote_root_prefix", "CrownRFEP/"),
        max_items=int(config_manager.get("max_items", 1000)),
        signed_url_minutes=int(config_manager.get("signed_url_minutes", 10)),
        import_scope=import_scope
    )


def create_api_client(config_manager: ConfigManager) -> CloudBackendAPI:
    return CloudBackendAPI(
        config_manager.get("server_url"),
        verify_ssl=config_manager.get("verify_ssl", True),
        timeout=int(config_manager.get("request_timeout", 30)),
        root_prefix=config_manager.get("remote_root_prefix", "CrownRFEP/")
    )


def run_cli_operation(operation: str, prefix: Optional[str] = None,
                      session_id: Optional[int] = None,
                      username: Optional[str] = None,
                      config_dir: Optional[Path] = None) -> int:
    """
    Execute a CLI operation.

    Process:
    1. Load configuration and setup logging
    2. Retrieve stored credentials (or prompt, for login)
    3. Login to the backend
    4. Execute requested operation
    5. Return appropriate exit code

    Args:
        operation: "login", "sync" or "delete-session"
        prefix: Optional key prefix override for sync
        session_id: Remote session id for delete-session
        username: Email to store, for login
        config_dir: Directory holding config.json (defaults to ConfigManager's)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logger = None
    api_client = None
    catalog = None
    engine = None

    try:
        config_mgr = ConfigManager(config_dir)
        config_mgr.load_config()
        log_file = setup_cli_logging(config_mgr)
        logger = logging.getLogger(__name__)

        cleanup_old_logs(config_mgr, log_file)

        logger.info("=" * 60)
        logger.info(f"Starting CrownSync CLI: {operation.upper()}")
        logger.info("=" * 60)

        if not config_mgr.get("server_url"):
            logger.error("server_url is not configured")
            return EXIT_CONFIG_ERROR

        # Resolve credentials
        if operation == "login":
            username = username or config_mgr.get("username") or input("Email: ").strip()
            password = getpass.getpass(f"Password for {username}: ")
        else:
            logger.info("Loading stored credentials")
            credentials = config_mgr.get_credentials()
            if not credentials:
                logger.error("No stored credentials found. Run 'crownsync login' first.")
                return EXIT_AUTH_ERROR
            username, password = credentials

        api_client = create_api_client(config_mgr)
        logger.info(f"Logging in to backend: {config_mgr.get('server_url')}")
        api_client.login(username, password)

        if operation == "login":
            config_mgr.store_credentials(username, password)
            logger.info(f"Credentials stored for {username} (role: {api_client.current_user_role})")
            return EXIT_SUCCESS

        catalog = CatalogManager(config_mgr.get("database_path", "crownsync.db"))
        catalog.initialize_database()

        engine = ReconciliationEngine(
            api_client,
            catalog,
            max_workers=config_mgr.sidecar_workers(),
            timeout=int(config_mgr.get("request_timeout", 30))
        )

        if operation == "sync":
            return _run_sync(engine, build_context(config_mgr, prefix), logger)
        elif operation == "delete-session":
            return _run_delete_session(engine, api_client, session_id, build_context(config_mgr), logger)

        logger.error(f"Unknown operation: {operation}")
        return EXIT_FAILURE

    except ValueError as e:
        if logger:
            logger.error(f"Configuration error: {e}")
        else:
            print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    except CrownSyncAuthError as e:
        if logger:
            logger.error(f"Authentication failed: {e}")
        else:
            print(f"Authentication failed: {e}", file=sys.stderr)
        return EXIT_AUTH_ERROR

    except CrownSyncPermissionError as e:
        if logger:
            logger.error(f"Permission denied: {e}")
        else:
            print(f"Permission denied: {e}", file=sys.stderr)
        return EXIT_PERMISSION_ERROR

    except CrownSyncAPIError as e:
        if logger:
            logger.error(f"API Error: {e}")
        else:
            print(f"API Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    except KeyboardInterrupt:
        if logger:
            logger.warning("Operation cancelled by user (Ctrl+C)")
        else:
            print("\nOperation cancelled by user", file=sys.stderr)
        return EXIT_FAILURE

    except Exception as e:
        if logger:
            logger.exception(f"Unexpected error: {e}")
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    finally:
        if engine is not None:
            engine.close()
        if api_client is not None:
            api_client.close()
        if catalog is not None:
            catalog.close()


def _run_sync(engine: ReconciliationEngine, context: ReconciliationContext, logger) -> int:
    def cli_progress_callback(message: str, current: int, total: int):
        if total > 0:
            percentage = (current / total) * 100
            logger.info(f"[{percentage:5.1f}%] {message}")
        else:
            logger.info(message)

    report = engine.run(context=context, progress_callback=cli_progress_callback)

    for error in report.errors:
        logger.warning(f"  {error}")

    if report.status == SyncStatus.NOT_AUTHENTICATED:
        logger.error("SYNC FAILED: not authenticated")
        return EXIT_AUTH_ERROR

    if not report.succeeded:
        logger.error("=" * 60)
        logger.error(f"SYNC FAILED ({report.status.value})")
        logger.error("=" * 60)
        return EXIT_FAILURE

    logger.info("=" * 60)
    logger.info("SYNC COMPLETED SUCCESSFULLY")
    logger.info(f"Imported: {report.imported}  Updated: {report.updated}  Orphaned: {report.orphaned}")
    logger.info(f"Sessions created: {report.sessions_created}  updated: {report.sessions_updated}  "
                f"removed: {report.sessions_removed}  Failed items: {report.failed}")
    logger.info("=" * 60)
    return EXIT_SUCCESS


def _run_delete_session(engine: ReconciliationEngine, api_client: CloudBackendAPI,
                        session_id: Optional[int], context: ReconciliationContext, logger) -> int:
    if not session_id or session_id <= 0:
        logger.error("A positive session id is required")
        return EXIT_CONFIG_ERROR

    report = engine.delete_remote_session(session_id, api_client.can_write_remote_library, context)

    if report.error:
        logger.error(f"DELETE FAILED: {report.error}")
        return EXIT_FAILURE

    if report.partial:
        logger.error("=" * 60)
        logger.error(f"DELETE PARTIALLY FAILED: {len(report.failed_keys)} object(s) remain")
        for key in report.failed_keys:
            logger.error(f"  {key}")
        logger.error("=" * 60)
        return EXIT_FAILURE

    logger.info("=" * 60)
    logger.info(f"SESSION {session_id} DELETED ({len(report.deleted_keys)} object(s), "
                f"{report.local_clips_removed} local clip(s))")
    logger.info("=" * 60)
    return EXIT_SUCCESS
