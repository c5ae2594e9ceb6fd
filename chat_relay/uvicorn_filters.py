"""Custom filters for uvicorn access logging."""

import logging

from chat_relay.settings import app_settings


class ExcludeMetricsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Health probes and Prometheus scrapes would otherwise drown the chat
    traffic in the access log. The excluded paths come from the
    LOG_EXCLUDED_PATHS setting.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if the log record should be logged.

        Args:
            record: The log record to evaluate.

        Returns:
            False if the request path is in excluded paths, True otherwise.
        """
        message = record.getMessage()
        return not any(
            path in message for path in app_settings.LOG_EXCLUDED_PATHS
        )
