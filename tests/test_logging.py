"""
Tests for structured operation logging.
"""

import logging

from util.logging import StructuredLogger, redact_credential
from vigils.core.schema import EndpointOutcome


class TestStructuredLogger:

    def test_replication_summary_levels(self, caplog):
        log = StructuredLogger("vigils.test")
        with caplog.at_level(logging.INFO, logger="vigils.test"):
            log.log_replication_summary("push", [EndpointOutcome("a", True), EndpointOutcome("b", True)])
            log.log_replication_summary("push", [EndpointOutcome("a", True), EndpointOutcome("b", False)])
            log.log_replication_summary("push", [EndpointOutcome("a", False)])

        assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING, logging.ERROR]
        assert "Status: partial" in caplog.records[1].getMessage()

    def test_endpoint_error_is_truncated(self, caplog):
        log = StructuredLogger("vigils.test")
        with caplog.at_level(logging.INFO, logger="vigils.test"):
            log.log_replication_outcome("push", "https://a.bdo.test", False, "x" * 500)

        message = caplog.records[0].getMessage()
        assert "x" * 200 in message
        assert "x" * 201 not in message

    def test_admin_denial_is_warning(self, caplog):
        log = StructuredLogger("vigils.test")
        with caplog.at_level(logging.INFO, logger="vigils.test"):
            log.log_admin_access("delete", False, "Invalid signature")

        assert caplog.records[0].levelno == logging.WARNING
        assert "denied" in caplog.records[0].getMessage()


def test_redact_credential_hides_private_key():
    redacted = redact_credential({"privateKey": "abcd", "pubKey": "02ff", "uuid": "u-1"})
    assert redacted == {"privateKey": "[REDACTED]", "pubKey": "02ff", "uuid": "u-1"}
