# -*- encoding: utf-8 -*-
# @File   : errors.py
# @Time   : 2026/10/18 14:31:52
# @Author : Kariko Lin

from .consts import (
    STRING_SOURCE,
    MessageTable,
    SettingsMessage,
    render_message
)


class SettingsError(Exception):
    """Base of every error raised by this package."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    # KeyError would otherwise repr() the message.
    def __str__(self) -> str:
        return self.message


class ParseError(SettingsError, ValueError):
    """A malformed line, reported with its 1-based number and raw text.

    `lineno` is 0 when the position is unknown (e.g. bad YAML structure).
    """

    def __init__(
        self,
        msgid: SettingsMessage,
        lineno: int,
        line: str, *,
        path: str | None = None,
        messages: MessageTable | None = None,
        **fields: object
    ) -> None:
        self.msgid = msgid
        self.lineno = lineno
        self.line = line
        self.path = path
        super().__init__(render_message(
            msgid, messages,
            lineno=lineno, line=line,
            source=STRING_SOURCE if path is None else path,
            **fields))


class SectionNotFound(SettingsError, KeyError):
    def __init__(
        self, section: str, messages: MessageTable | None = None
    ) -> None:
        self.section = section
        super().__init__(render_message(
            SettingsMessage.SECTION_NOT_FOUND, messages, section=section))


class KeyNotFound(SettingsError, KeyError):
    """Raised by lookups; `section_missing` tells which level was absent."""

    def __init__(
        self,
        section: str,
        key: str,
        messages: MessageTable | None = None, *,
        section_missing: bool = False
    ) -> None:
        self.section = section
        self.key = key
        self.section_missing = section_missing
        super().__init__(render_message(
            SettingsMessage.SECTION_NOT_FOUND if section_missing
            else SettingsMessage.KEY_NOT_FOUND,
            messages, section=section, key=key))


class InvalidValue(SettingsError, ValueError):
    """A value the line format would not give back as is.

    `msgid` tells why: not a `str`, a line break, or surrounding blanks.
    """

    def __init__(
        self,
        section: str,
        key: str,
        value: object,
        messages: MessageTable | None = None
    ) -> None:
        self.section = section
        self.key = key
        self.value = value
        if not isinstance(value, str):
            self.msgid = SettingsMessage.VALUE_NOT_STR
        elif '\n' in value or '\r' in value:
            self.msgid = SettingsMessage.INVALID_VALUE
        else:
            self.msgid = SettingsMessage.PADDED_VALUE
        super().__init__(render_message(
            self.msgid, messages,
            section=section, key=key, value=value,
            type=type(value).__name__))


class InvalidName(SettingsError, ValueError):
    """A section name or key that the line format could not represent."""

    def __init__(
        self, kind: str, name: object, messages: MessageTable | None = None
    ) -> None:
        self.kind = kind  # 'section' or 'key'
        self.name = name
        super().__init__(render_message(
            SettingsMessage.INVALID_NAME, messages, kind=kind, name=name))


class SettingsIOError(SettingsError, OSError):
    """Read/write failure; the OS-level cause is chained as `__cause__`."""

    def __init__(
        self,
        msgid: SettingsMessage,
        path: str,
        error: BaseException,
        messages: MessageTable | None = None,
        **fields: object
    ) -> None:
        self.msgid = msgid
        self.path = path
        super().__init__(render_message(
            msgid, messages, path=path, error=error, **fields))
