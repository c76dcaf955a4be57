"""
Structured logging infrastructure for ShopBot.

Provides JSON logging for the retrieval pipeline with:
- Rotating file handlers (daily rotation, 30-day retention)
- Separate error log file
- CSV export of pipeline events for analytics
- Latency tracking (Timer, @timed)
- Pipeline events: query, intent, route, fusion, error, conversation turn

Usage:
    from core.structured_logging import get_logger, log_route

    logger = get_logger("core.router")
    logger.debug("Ladder tier matched", extra={"event": "ladder_tier", "tier": "category_only"})

    log_route(session_id="abc", intent="product_semantic", route="product_search",
              items_found=10, retrieval_type="semantic", route_time_ms=4.2)
"""

import json
import logging
import sys
import time
import traceback
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, Optional

ROOT_LOGGER_NAME = "shopbot"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON for structured logging.

    Output format:
    {
        "timestamp": "2025-03-02T10:30:00.123456Z",
        "level": "INFO",
        "logger": "shopbot.core.router",
        "message": "Route complete: recommendation",
        "event": "route_complete",
        "route": "recommendation",
        ...
    }
    """

    EXTRA_FIELDS = [
        # Conversation
        "event", "session_id", "user_query", "intent_result", "intent_confidence",
        "query", "intent", "confidence", "reason", "user_id",
        # Routing
        "route", "retrieval_type", "items_found", "item_ids", "tier",
        "applied_filters", "category", "price_ceiling", "slots",
        # Fusion
        "envelope_type",
        # Errors
        "error_type", "stack_trace", "context",
        # Timing
        "intent_classification_ms", "route_latency_ms", "total_latency_ms",
        "response_time_ms", "elapsed_ms",
        # Cache / index
        "entries", "dimension", "similarity",
    ]

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in self.EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            log_data["stack_trace"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for console output.

    Output format:
    2025-03-02 10:30:00 | INFO     | shopbot.core.router | Route complete | event=route_complete
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        color = self.COLORS.get(level, "")
        reset = self.COLORS["RESET"]

        msg = f"{timestamp} | {color}{level:8}{reset} | {record.name} | {record.getMessage()}"

        context_parts = []
        for name in ("session_id", "event", "route", "response_time_ms"):
            value = getattr(record, name, None)
            if value is not None:
                context_parts.append(f"{name}={value}")
        if context_parts:
            msg += f" | {', '.join(context_parts)}"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


# =============================================================================
# CSV Handler for analytics
# =============================================================================

class CSVHandler(logging.Handler):
    """
    Writes pipeline events to daily CSV files in <log_dir>/csv/.

    One row per record; dict and list values are flattened so the
    files open cleanly in a spreadsheet.
    """

    CSV_COLUMNS = [
        'timestamp', 'session_id', 'user_query', 'intent_result', 'intent_confidence',
        'level', 'logger', 'message', 'event',
        'route', 'retrieval_type', 'items_found', 'item_ids', 'tier',
        'filters_category', 'filters_price_ceiling', 'filters_brands',
        'response_time_ms', 'route_latency_ms', 'error_type',
    ]

    # CSV column -> record attributes, first present wins
    COLUMN_SOURCES = {
        'user_query': ('user_query', 'query'),
        'intent_result': ('intent_result', 'intent'),
        'intent_confidence': ('intent_confidence', 'confidence'),
    }

    def __init__(self, log_dir: str = "logs"):
        super().__init__()
        self.log_dir = Path(log_dir) / "csv"
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.current_date = None
        self._file_handle = None

    def _get_csv_path(self) -> Path:
        date_str = datetime.now().strftime('%Y-%m-%d')
        return self.log_dir / f"shopbot-{date_str}.csv"

    def _ensure_file_open(self):
        """Open today's file, rotating at midnight and writing headers once."""
        today = datetime.now().date()
        if self.current_date != today:
            self._close_file()
            self.current_date = today

        if self._file_handle is None:
            csv_path = self._get_csv_path()
            file_exists = csv_path.exists()
            self._file_handle = open(csv_path, 'a', newline='', encoding='utf-8')
            if not file_exists:
                self._file_handle.write(','.join(self.CSV_COLUMNS) + '\n')
                self._file_handle.flush()

    def _close_file(self):
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    @staticmethod
    def _flatten_value(value) -> str:
        if value is None:
            return ''
        if isinstance(value, dict):
            return '; '.join(f"{k}={v}" for k, v in value.items() if v is not None)
        if isinstance(value, (list, tuple)):
            return '|'.join(str(v) for v in value)
        return str(value)

    @staticmethod
    def _escape_csv(value: str) -> str:
        value = str(value) if value else ''
        if ',' in value or '"' in value or '\n' in value:
            return '"' + value.replace('"', '""') + '"'
        return value

    def build_row(self, record: logging.LogRecord) -> Dict[str, str]:
        """Map a log record onto CSV_COLUMNS."""
        row = {
            'timestamp': _utc_timestamp(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for col, attr_names in self.COLUMN_SOURCES.items():
            row[col] = ''
            for attr in attr_names:
                value = getattr(record, attr, None)
                if value is not None:
                    row[col] = self._flatten_value(value)
                    break

        filters = getattr(record, 'applied_filters', None)
        if isinstance(filters, dict):
            row['filters_category'] = self._flatten_value(filters.get('category'))
            row['filters_price_ceiling'] = self._flatten_value(filters.get('price_ceiling'))
            row['filters_brands'] = self._flatten_value(filters.get('brands'))

        for col in self.CSV_COLUMNS:
            if col not in row:
                row[col] = self._flatten_value(getattr(record, col, None))

        return row

    def emit(self, record: logging.LogRecord):
        try:
            self._ensure_file_open()
            row = self.build_row(record)
            values = [self._escape_csv(row.get(col, '')) for col in self.CSV_COLUMNS]
            self._file_handle.write(','.join(values) + '\n')
            self._file_handle.flush()
        except Exception:
            self.handleError(record)

    def close(self):
        self._close_file()
        super().close()


# =============================================================================
# Logger Setup
# =============================================================================

_loggers: Dict[str, logging.Logger] = {}
_initialized = False


def setup_logging(
    log_dir: str = "logs",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    enable_console: bool = True,
    enable_file: bool = True,
    enable_csv: bool = True,
    enable_error_log: bool = True,
) -> None:
    """
    Initialize the logging system.

    Creates:
    - logs/shopbot.log (all logs, JSON, rotating daily, 30-day retention)
    - logs/errors.log (ERROR and above, rotating daily, 30-day retention)
    - logs/csv/shopbot-YYYY-MM-DD.csv (pipeline events, daily)
    - Console output (if enabled)

    Args:
        log_dir: Directory for log files
        console_level: Minimum level for console output
        file_level: Minimum level for file output
        enable_console: Whether to output to console
        enable_file: Whether to write shopbot.log
        enable_csv: Whether to write CSV files
        enable_error_log: Whether to write errors.log
    """
    global _initialized
    if _initialized:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers = []

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if enable_file:
        root_logger.addHandler(_rotating_handler(log_path / "shopbot.log", file_level))

    if enable_error_log:
        root_logger.addHandler(_rotating_handler(log_path / "errors.log", logging.ERROR))

    if enable_csv:
        csv_handler = CSVHandler(log_dir=log_dir)
        csv_handler.setLevel(logging.INFO)
        root_logger.addHandler(csv_handler)

    _initialized = True


def _rotating_handler(path: Path, level: int) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.suffix = "%Y-%m-%d"
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the shopbot namespace.

    Args:
        name: Component name, e.g. "core.intent"

    Returns:
        Logger named "shopbot.<name>"

    Example:
        logger = get_logger("core.vector_index")
        logger.debug("Upserted", extra={"event": "vector_upsert"})
    """
    # app.py owns setup_logging(); until then records propagate to the root logger
    prefix = f"{ROOT_LOGGER_NAME}."
    logger_name = name if name.startswith(prefix) else f"{prefix}{name}"

    if logger_name not in _loggers:
        _loggers[logger_name] = logging.getLogger(logger_name)

    return _loggers[logger_name]


# =============================================================================
# Pipeline Events
# =============================================================================

def log_query(session_id: str, query: str, user_id: Optional[str] = None, **extra) -> None:
    """Log an incoming query at the pipeline boundary."""
    get_logger("query").info(
        "User query",
        extra={
            "event": "user_query",
            "session_id": session_id,
            "query": query,
            "user_id": user_id,
            **extra
        }
    )


def log_intent(
    session_id: str,
    query: str,
    intent: str,
    confidence: float,
    reason: str,
    classification_time_ms: float,
    slots: Optional[Dict[str, Any]] = None,
    **extra
) -> None:
    """
    Log intent detection result.

    Args:
        session_id: Session identifier
        query: Original query
        intent: Detected intent type
        confidence: Detection confidence
        reason: Why this intent was chosen
        classification_time_ms: Time taken to detect
        slots: Extracted slot values
        **extra: Additional fields
    """
    get_logger("intent").info(
        f"Intent detected: {intent}",
        extra={
            "event": "intent_detection",
            "session_id": session_id,
            "query": query,
            "intent": intent,
            "confidence": confidence,
            "reason": reason,
            "slots": slots,
            "intent_classification_ms": round(classification_time_ms, 2),
            **extra
        }
    )


def log_route(
    session_id: str,
    intent: str,
    route: str,
    items_found: int,
    retrieval_type: str,
    route_time_ms: float,
    applied_filters: Optional[Dict[str, Any]] = None,
    item_ids: Optional[list] = None,
    **extra
) -> None:
    """
    Log router result.

    Args:
        session_id: Session identifier
        intent: Intent that was routed
        route: Route tag produced
        items_found: Number of items retrieved
        retrieval_type: How items were retrieved
        route_time_ms: Time taken to route
        applied_filters: Filters and ladder tier actually used
        item_ids: Identifiers of the first items
        **extra: Additional fields
    """
    get_logger("route").info(
        f"Route complete: {route} with {items_found} items",
        extra={
            "event": "route_complete",
            "session_id": session_id,
            "intent": intent,
            "route": route,
            "items_found": items_found,
            "retrieval_type": retrieval_type,
            "applied_filters": applied_filters,
            "item_ids": (item_ids or [])[:10],
            "tier": (applied_filters or {}).get("tier"),
            "route_latency_ms": round(route_time_ms, 2),
            **extra
        }
    )


def log_fusion(session_id: str, route: str, envelope_type: str, items_found: int,
               error: Optional[str] = None, **extra) -> None:
    """Log the envelope handed to answer generation."""
    level = logging.WARNING if error else logging.DEBUG
    get_logger("fusion").log(
        level,
        f"Context fused: {envelope_type}",
        extra={
            "event": "context_fused",
            "session_id": session_id,
            "route": route,
            "envelope_type": envelope_type,
            "items_found": items_found,
            "error_type": error,
            **extra
        }
    )


def log_error(
    session_id: str,
    error: Exception,
    context: Optional[str] = None,
    **extra
) -> None:
    """
    Log an error with full context.

    Call from inside the except block so the stack trace is attached.

    Args:
        session_id: Session identifier
        error: The exception
        context: What was happening (e.g. "route:product_comparison")
        **extra: Additional fields
    """
    get_logger("error").error(
        f"Error: {type(error).__name__}: {error}",
        extra={
            "event": "error",
            "session_id": session_id,
            "error_type": type(error).__name__,
            "stack_trace": traceback.format_exc(),
            "context": context,
            **extra
        },
        exc_info=True
    )


def log_conversation_turn(
    session_id: str,
    user_query: str,
    intent_result: str,
    intent_confidence: float,
    route: str,
    items_found: int = 0,
    item_ids: Optional[list] = None,
    applied_filters: Optional[Dict[str, Any]] = None,
    response_time_ms: Optional[float] = None,
    **extra
) -> None:
    """
    Log one complete pipeline invocation.

    This is the primary analytics event: everything about a single query
    in one CSV row.

    Example:
        log_conversation_turn(
            session_id="session_20250302_134318",
            user_query="best gaming laptop under 80k",
            intent_result="product_recommendation",
            intent_confidence=0.92,
            route="recommendation",
            items_found=5,
            item_ids=["lap-001", "lap-004"],
            applied_filters={"category": "Laptops", "price_ceiling": 80000, "tier": "all_filters"},
            response_time_ms=12.5,
        )
    """
    get_logger("conversation").info(
        f"Conversation turn: {intent_result} -> {route}",
        extra={
            "event": "conversation_turn",
            "session_id": session_id,
            "user_query": user_query,
            "intent_result": intent_result,
            "intent_confidence": round(intent_confidence, 2) if intent_confidence else None,
            "route": route,
            "items_found": items_found,
            "item_ids": item_ids or [],
            "applied_filters": applied_filters or {},
            "tier": (applied_filters or {}).get("tier"),
            "response_time_ms": round(response_time_ms, 2) if response_time_ms else None,
            **extra
        }
    )


# =============================================================================
# Performance Timing
# =============================================================================

def timed(event_name: str, logger_name: str = "performance"):
    """
    Decorator to time function execution and log it at DEBUG.

    Usage:
        @timed("index_initialize")
        def initialize(self, catalog): ...

    Failures are logged with timing and re-raised.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            logger = get_logger(logger_name)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.error(
                    f"{event_name} failed after {elapsed_ms:.2f}ms",
                    extra={
                        "event": f"{event_name}_error",
                        "elapsed_ms": round(elapsed_ms, 2),
                        "error_type": type(e).__name__,
                    },
                    exc_info=True
                )
                raise
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(
                f"{event_name} completed",
                extra={
                    "event": f"{event_name}_timing",
                    "elapsed_ms": round(elapsed_ms, 2),
                }
            )
            return result
        return wrapper
    return decorator


class Timer:
    """
    Context manager for timing code blocks.

    Usage:
        with Timer() as t:
            result = detector.detect(query)
        log_intent(..., classification_time_ms=t.elapsed_ms)
    """

    def __init__(self):
        self.start_time = None
        self.end_time = None
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.end_time = time.perf_counter()
        self.elapsed_ms = (self.end_time - self.start_time) * 1000
