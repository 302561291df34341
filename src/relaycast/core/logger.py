"""
Structured logging for relaycast.

Every log line is an event name followed by fields:

```text
debug fanout.connection state_changed relay=wss://nos.lol mode=query previous=open state=finished
```

[Logger][relaycast.core.logger.Logger] attaches the fields to the stdlib
``LogRecord`` (as ``structured_kv``) and
[StructuredFormatter][relaycast.core.logger.StructuredFormatter] renders them
on the handler the CLI installs. With ``json_output=True`` the message
itself becomes one JSON object per line instead.

Concurrent relay connections interleave their output, so each connection
logs through a logger produced by
[bind()][relaycast.core.logger.Logger.bind] that carries its ``relay`` and
``mode``.

Raw relay frames and event contents can be arbitrarily long; field values
are cut at ``max_value_length`` characters.

Examples:
    ```python
    from relaycast.core.logger import Logger

    logger = Logger("fanout.query")
    logger.info("query_started", relays=3, limit=25)
    # info fanout.query query_started relays=3 limit=25

    conn_logger = logger.bind(relay="wss://relay.damus.io")
    conn_logger.debug("frame_ignored", verb="NOTICE")
    # debug fanout.query frame_ignored relay=wss://relay.damus.io verb=NOTICE
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Final


DEFAULT_MAX_VALUE_LENGTH: Final[int] = 1000

_NEEDS_QUOTES = re.compile(r"[\s=\"']")


def _truncate(text: str, limit: int | None) -> str:
    if not limit or len(text) <= limit:
        return text
    return f"{text[:limit]}...<truncated {len(text) - limit} chars>"


def _render_value(value: Any, limit: int | None) -> str:
    text = _truncate(str(value), limit)
    if text and not _NEEDS_QUOTES.search(text):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_kv_pairs(
    kwargs: Mapping[str, Any],
    max_value_length: int | None = DEFAULT_MAX_VALUE_LENGTH,
    prefix: str = " ",
) -> str:
    """Render *kwargs* as ``key=value`` pairs separated by spaces.

    Empty values and values containing whitespace, ``=`` or quotes are
    double-quoted with backslash escaping. ``max_value_length=None``
    disables truncation. Returns ``""`` for an empty mapping, otherwise
    the pairs preceded by *prefix*.
    """
    if not kwargs:
        return ""
    return prefix + " ".join(
        f"{key}={_render_value(value, max_value_length)}" for key, value in kwargs.items()
    )


class StructuredFormatter(logging.Formatter):
    """Render records as ``<level> <logger> <message> key=value ...``.

    Fields come from the ``structured_kv`` attribute set by
    [Logger][relaycast.core.logger.Logger]; records from plain
    ``logging.getLogger()`` callers get the same prefix without fields.
    Tracebacks follow on the next lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        line += format_kv_pairs(getattr(record, "structured_kv", {}))
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class Logger:
    """Stdlib logger wrapper whose methods take fields as keyword arguments.

    Args:
        name: Name passed to ``logging.getLogger``.
        json_output: Emit each record as a JSON object instead of attaching
            fields for [StructuredFormatter][relaycast.core.logger.StructuredFormatter].
        max_value_length: Truncation limit per field value (default 1000).
        context: Fields added to every record; see
            [bind()][relaycast.core.logger.Logger.bind].
    """

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = (
            DEFAULT_MAX_VALUE_LENGTH if max_value_length is None else max_value_length
        )
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context: Any) -> Logger:
        """Return a child logger whose records always carry *context*.

        Bound fields come first; a field passed to an individual call with
        the same key wins. The parent logger is left unchanged.
        """
        return Logger(
            self._logger.name,
            json_output=self._json_output,
            max_value_length=self._max_value_length,
            context={**self._context, **context},
        )

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._emit(logging.ERROR, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Like [error()][relaycast.core.logger.Logger.error], with the active traceback."""
        self._emit(logging.ERROR, msg, kwargs, exc_info=True)

    def _emit(
        self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        fields = {**self._context, **kwargs}
        if self._json_output:
            payload = {
                "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
                "level": logging.getLevelName(level).lower(),
                "logger": self._logger.name,
                "message": msg,
                **fields,
            }
            self._logger.log(level, json.dumps(payload, default=str), exc_info=exc_info)
            return
        extra = {"structured_kv": self._clip(fields)} if fields else {}
        self._logger.log(level, msg, extra=extra, exc_info=exc_info)

    def _clip(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Replace over-long values with their truncated string form."""
        limit = self._max_value_length
        clipped: dict[str, Any] = {}
        for key, value in fields.items():
            text = str(value)
            clipped[key] = _truncate(text, limit) if limit and len(text) > limit else value
        return clipped
