"""
Structured operation logging for the vigil service.
Replication, geocoding and admin events all flow through one logger.
"""

import logging
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for vigil, replication, geocoding and admin operations."""

    def __init__(self, name: str = "vigils"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_vigil_operation(self, operation: str, vigil_uuid: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a create/delete/restore against the record store."""
        log_details = {"uuid": vigil_uuid}
        if details:
            log_details.update(details)

        self.log_operation(f"vigil.{operation}", status, log_details)

    def log_replication_outcome(self, operation: str, server: str, success: bool, error: str = None):
        """Log the result of one endpoint during bootstrap/push/pull."""
        log_details = {"server": server}
        if error:
            log_details["error"] = error[:200]

        level = logging.INFO if success else logging.WARNING
        self.log_operation(f"replication.{operation}", "success" if success else "failed", log_details, level)

    def log_replication_summary(self, operation: str, outcomes: List[Any]):
        """Log how many endpoints accepted an operation."""
        succeeded = sum(1 for outcome in outcomes if outcome.success)
        total = len(outcomes)
        if total and succeeded == total:
            status, level = "success", logging.INFO
        elif succeeded:
            status, level = "partial", logging.WARNING
        else:
            status, level = "failed", logging.ERROR

        self.log_operation(
            f"replication.{operation}",
            status,
            {"succeeded": succeeded, "total": total},
            level,
        )

    def log_geocode_lookup(self, zipcode: str, status: str, cache_hit: bool = False, error: str = None):
        """Log a zipcode coordinate resolution."""
        log_details = {"zipcode": zipcode, "cache_hit": cache_hit}
        if error:
            log_details["error"] = error[:200]

        level = logging.WARNING if status == "failed" else logging.DEBUG
        self.log_operation("geocode.lookup", status, log_details, level)

    def log_admin_access(self, action: str, success: bool, reason: str = ""):
        """Log admin authentication outcomes. Signatures are never logged."""
        log_details = {"action": action}
        if reason:
            log_details["reason"] = reason[:100]

        level = logging.INFO if success else logging.WARNING
        self.log_operation("admin.access", "granted" if success else "denied", log_details, level)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def redact_credential(credential: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a credential dict that is safe to log."""
    redacted = {}
    for k, v in credential.items():
        if k in ("privateKey", "signature"):
            redacted[k] = "[REDACTED]"
        else:
            redacted[k] = v
    return redacted
