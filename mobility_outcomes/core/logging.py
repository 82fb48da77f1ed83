"""
Secure Logging Utility - PHI-Safe
Structured logging for the stay-prediction engine

SECURITY REQUIREMENTS:
- No patient identifiers in logs
- Structured audit line per assessment
- Log levels appropriate for production
"""

import logging
import re
import sys
import json
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from mobility_outcomes.core.config import settings

# Configure root logger
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module"""
    return logging.getLogger(name)


class SecureLogger:
    """
    Logging wrapper that keeps patient identifiers out of log output.

    Messages mentioning an identifying field are redacted and tagged
    with a [SANITIZED] prefix so reviewers can tell they were rewritten.
    """

    # Keywords that indicate the message may carry identifying data
    SENSITIVE_KEYWORDS = re.compile(
        r'\bname\b|\bmrn\b|medical[_ -]?record|\bdob\b|date[_ -]?of[_ -]?birth'
        r'|\bssn\b|social[_-]?security|address|phone|email|token|secret',
        re.IGNORECASE,
    )

    # Applied in order; emails and SSNs before the generic digit-run rule
    REDACTIONS = [
        (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[email]'),
        (re.compile(r'\b\d{3}-\d{2}-\d{4}\b'), '[ssn]'),
        (re.compile(r'\b\d{6,}\b'), '[id]'),
        (re.compile(r'\b[A-Za-z0-9]{32,}\b'), '[token]'),
    ]

    @classmethod
    def sanitize_message(cls, message: str) -> str:
        """
        Redact emails, SSNs, record-number digit runs and long tokens.
        Multi-line messages (stack traces) keep only their first line.
        """
        for pattern, placeholder in cls.REDACTIONS:
            message = pattern.sub(placeholder, message)

        first_line, newline, _ = message.partition('\n')
        if newline:
            message = f"{first_line} [stack trace truncated]"
        return message

    @classmethod
    def should_sanitize(cls, message: str) -> bool:
        return cls.SENSITIVE_KEYWORDS.search(message) is not None

    @classmethod
    def log(cls, logger: logging.Logger, level: int, message: str, *args, **kwargs):
        """Emit through ``logger``, redacting first when the message looks identifying"""
        if cls.should_sanitize(message):
            message = f"[SANITIZED] {cls.sanitize_message(message)}"
        logger.log(level, message, *args, **kwargs)


def log_warning(message: str, logger_name: Optional[str] = None, **kwargs):
    """Log warning message securely"""
    SecureLogger.log(get_logger(logger_name or __name__), logging.WARNING, message, **kwargs)


def log_error(message: str, logger_name: Optional[str] = None, exc_info: bool = False, **kwargs):
    """Log error message securely"""
    if exc_info:
        kwargs['exc_info'] = True
    SecureLogger.log(get_logger(logger_name or __name__), logging.ERROR, message, **kwargs)


def log_audit(event_type: str, assessment_id: Optional[str], details: Dict[str, Any]):
    """
    Log audit event with structured data

    Args:
        event_type: Type of audit event
        assessment_id: Caller-supplied assessment reference (if any)
        details: Derived, non-identifying event details
    """
    audit_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "assessment_id": assessment_id,
        "details": details
    }
    get_logger("audit").info(f"[AUDIT] {json.dumps(audit_entry, default=str)}")
