# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2026/10/18 15:40:06
# @Author : Kariko Lin

"""Text form of `Settings`, the subset we accept:

    ```ini
    [section]
    key = value
    ```

1. One statement per line, `\\n` separated (a trailing `\\r` is fine).
2. No comments, no quoting, no escaping, no multi-line values.
3. Key/value pairs outside of any section are rejected.
4. A repeated `[section]` header merges into the first one.
"""

import codecs
import logging
import os
import stat
import tempfile
import warnings
from collections.abc import Iterable
from contextlib import suppress
from io import TextIOBase
from os import PathLike

import yaml
from chardet import detect as guess_codec

from ..abstract import FileHandler
from .consts import (
    ASSIGN_TAG,
    END_SECTION_TAG,
    GLOBAL_SECTION,
    START_SECTION_TAG,
    MessageTable,
    SettingsMessage
)
from .errors import InvalidName, InvalidValue, ParseError, SettingsIOError
from .model import Settings, is_valid_section_name

__all__ = [
    'parse', 'serialize', 'load', 'save',
    'SettingsFileHandler', 'SettingsYamlHandler'
]

logger = logging.getLogger(__name__)

# below this chardet guesses are too wild to trust.
MIN_CODEC_CONFIDENCE = 0.8


def _read_lines(
    lines: Iterable[str],
    ins: Settings, *,
    strict: bool = False,
    path: str | None = None,
    messages: MessageTable | None = None
) -> Settings:
    def fail(msgid: SettingsMessage, lineno: int, line: str, **fields):
        return ParseError(
            msgid, lineno, line, path=path, messages=messages, **fields)

    this_sect = None
    # (section, key) -> line of definition, for this source only.
    defined_at: dict[tuple[str, str], int] = {}
    for lineno, raw in enumerate(lines, 1):
        i = raw.strip()
        if not i:
            continue

        if i[0] == START_SECTION_TAG and i[-1] == END_SECTION_TAG:
            name = i[1:-1].strip() or GLOBAL_SECTION
            if not is_valid_section_name(name):
                raise fail(SettingsMessage.INVALID_SECTION_NAME, lineno, i)
            if name in ins:
                logger.debug(
                    'line %d: merging into existing section [%s]',
                    lineno, name)
            this_sect = ins.add_section(name)
        elif ASSIGN_TAG in i and i[0] != START_SECTION_TAG:
            if this_sect is None:
                raise fail(SettingsMessage.KEY_OUTSIDE_SECTION, lineno, i)
            key, val = i.split(ASSIGN_TAG, 1)
            key, val = key.strip(), val.strip()
            if not key:
                raise fail(SettingsMessage.MISSING_KEY, lineno, i)

            previous = defined_at.get((this_sect.name, key))
            if previous is not None:
                if strict:
                    raise fail(
                        SettingsMessage.DUPLICATED_KEY, lineno, i,
                        key=key, previous=previous)
                warnings.warn(
                    f'[{this_sect.name}] "{key}" at line {lineno} '
                    f'overrides the value defined at line {previous}.')
            defined_at[this_sect.name, key] = lineno

            try:
                this_sect[key] = val
            except (InvalidName, InvalidValue) as exc:  # stray '\r'
                raise fail(SettingsMessage.INVALID_LINE, lineno, i) from exc
        elif i[0] == START_SECTION_TAG:
            raise fail(
                SettingsMessage.MISSING_END_SECTION_TAG, lineno, i,
                tag=END_SECTION_TAG)
        elif i[-1] == END_SECTION_TAG:
            raise fail(
                SettingsMessage.MISSING_START_SECTION_TAG, lineno, i,
                tag=START_SECTION_TAG)
        else:
            raise fail(
                SettingsMessage.MISSING_ASSIGN_TAG, lineno, i,
                tag=ASSIGN_TAG)
    return ins


def parse(
    text: str, *,
    strict: bool = False,
    path: str | None = None,
    messages: MessageTable | None = None,
    into: Settings | None = None
) -> Settings:
    """Parse INI text into a new `Settings` (or merge into `into`).

    With `strict=True` a key repeated within one section is a `ParseError`
    instead of a `UserWarning` + overwrite.
    """
    if into is None:
        into = Settings(messages)
    return _read_lines(
        text.split('\n'), into, strict=strict, path=path, messages=messages)


def serialize(
    settings: Settings, *,
    delimiter: str = ' = ',
    blank_lines: int = 1
) -> str:
    """Render INI text: `blank_lines` empty lines between sections,
    none after the last one, every line `\\n` terminated."""
    if delimiter.strip(' \t') != ASSIGN_TAG:
        raise ValueError(f'delimiter must be "{ASSIGN_TAG}" '
                         f'with optional spaces, got {delimiter!r}')
    if blank_lines < 0:
        raise ValueError(f'blank_lines must be >= 0, got {blank_lines}')

    buffers = []
    for name, section in settings.items():
        ret = f'{START_SECTION_TAG}{name}{END_SECTION_TAG}\n'
        for k, v in section.items():
            ret += f'{k}{delimiter}{v}\n'
        buffers.append(ret)
    return ('\n' * blank_lines).join(buffers)


def _new_file_mode() -> int:
    # os.umask() can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


def _atomic_write(
    filename: str,
    text: str,
    encoding: str,
    messages: MessageTable | None = None
) -> None:
    """Write `text` to a sibling temp file, then swap it in.

    A crash midway leaves either the old file or the new one, never half.
    """
    def fail(exc: BaseException):
        return SettingsIOError(
            SettingsMessage.WRITING_FILE, filename, exc, messages)

    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise fail(exc) from exc

    directory = os.path.dirname(os.path.abspath(filename))
    try:
        fd, tmp = tempfile.mkstemp(
            prefix=f'.{os.path.basename(filename)}.', suffix='.tmp',
            dir=directory)
    except OSError as exc:
        raise fail(exc) from exc

    try:
        with os.fdopen(fd, 'w', encoding=encoding, newline='\n') as fp:
            fp.write(text)
            fp.flush()
            os.fsync(fp.fileno())
        # mkstemp creates 0600: keep the old file's bits,
        # or give a new file what open() would have.
        try:
            mode = stat.S_IMODE(os.stat(filename).st_mode)
        except FileNotFoundError:
            mode = _new_file_mode()
        os.chmod(tmp, mode)
        os.replace(tmp, filename)
    except BaseException as exc:
        with suppress(OSError):
            os.unlink(tmp)
        if isinstance(exc, (OSError, UnicodeEncodeError, LookupError)):
            raise fail(exc) from exc
        raise


class SettingsFileHandler(FileHandler[Settings]):
    def __init__(
        self,
        filename: str | PathLike[str],
        encoding: str = 'utf-8', *,
        detect_encoding: bool = True,
        messages: MessageTable | None = None
    ) -> None:
        super().__init__(filename)
        self._codec = encoding
        self._detect = detect_encoding
        self._messages = messages

    @staticmethod
    def readstream(
        buf: TextIOBase,
        ins: Settings | None = None, *,
        strict: bool = False,
        path: str | None = None,
        messages: MessageTable | None = None
    ) -> Settings:
        """Parse an already decoded text stream.

        Unless you have one at hand, `self.read()` is what you want.
        """
        if ins is None:
            ins = Settings(messages)
        return _read_lines(
            buf, ins, strict=strict, path=path, messages=messages)

    def _decode(self, raw: bytes) -> str:
        try:
            text = raw.decode(self._codec)
        except LookupError as exc:
            raise SettingsIOError(
                SettingsMessage.DECODING_FILE, self._fn, exc,
                self._messages, encoding=self._codec) from exc
        except UnicodeDecodeError as exc:
            if not self._detect:
                raise SettingsIOError(
                    SettingsMessage.DECODING_FILE, self._fn, exc,
                    self._messages, encoding=self._codec) from exc
            text = self._decode_fallback(raw, exc)
        # BOM isn't whitespace for str.strip().
        return text.removeprefix('\ufeff')

    def _decode_fallback(self, raw: bytes, exc: UnicodeDecodeError) -> str:
        codec = guess_codec(raw)
        if (
            codec is None
            or codec.get('encoding') is None
            or codec.get('confidence', 0) < MIN_CODEC_CONFIDENCE
        ):
            raise SettingsIOError(
                SettingsMessage.DECODING_FILE, self._fn, exc,
                self._messages, encoding=self._codec) from exc

        logger.warning(
            "'%s' is not valid %s, falling back to guessed %s (%.2f)",
            self._fn, self._codec, codec['encoding'], codec['confidence'])
        try:
            return raw.decode(codec['encoding'])
        except (UnicodeDecodeError, LookupError) as fallback_exc:
            raise SettingsIOError(
                SettingsMessage.DECODING_FILE, self._fn, fallback_exc,
                self._messages, encoding=codec['encoding']) from fallback_exc

    def read(self, *, strict: bool = False) -> Settings:
        """Read and parse the file this handler is bound to."""
        try:
            with open(self._fn, 'rb') as fp:
                raw = fp.read()
        except OSError as exc:
            raise SettingsIOError(
                SettingsMessage.OPENING_FILE, self._fn, exc,
                self._messages) from exc

        ret = parse(
            self._decode(raw), strict=strict,
            path=self._fn, messages=self._messages)
        ret.path = self._fn
        logger.debug('loaded %d section(s) from %s', len(ret), self._fn)
        return ret

    def write(
        self, instance: Settings, *,
        blank_lines: int = 1,
        delimiter: str = ' = '
    ) -> None:
        """Save to *one* INI file, replacing it atomically."""
        text = serialize(
            instance, delimiter=delimiter, blank_lines=blank_lines)
        _atomic_write(
            self._fn, text, self._codec,
            self._messages or instance.messages)
        logger.debug('saved %d section(s) to %s', len(instance), self._fn)

    def __str__(self) -> str:
        return "INI settings: " + super().__str__() + f"({self._codec})"


class SettingsYamlHandler(FileHandler[Settings]):
    """Same document as `{section: {key: value}}` YAML.

    Scalars are read back as strings (`~` -> `''`, booleans -> `true` /
    `false`), since `Settings` keeps nothing but `str`. Nested mappings,
    lists, and names or values INI can't hold are a `ParseError`.
    """

    def __init__(
        self,
        filename: str | PathLike[str],
        encoding: str = 'utf-8', *,
        messages: MessageTable | None = None
    ) -> None:
        super().__init__(filename)
        self._codec = encoding
        self._messages = messages

    def __fail(self, msgid: SettingsMessage, lineno: int, line: str):
        return ParseError(
            msgid, lineno, line, path=self._fn, messages=self._messages)

    @staticmethod
    def __to_str(v: object) -> str:
        if v is None:
            return ''
        if isinstance(v, bool):
            return 'true' if v else 'false'
        return str(v)

    def read(self) -> Settings:
        try:
            with open(self._fn, 'r', encoding=self._codec) as fp:
                src = yaml.safe_load(fp)
        except OSError as exc:
            raise SettingsIOError(
                SettingsMessage.OPENING_FILE, self._fn, exc,
                self._messages) from exc
        except (UnicodeDecodeError, LookupError) as exc:
            raise SettingsIOError(
                SettingsMessage.DECODING_FILE, self._fn, exc,
                self._messages, encoding=self._codec) from exc
        except yaml.YAMLError as exc:
            mark = getattr(exc, 'problem_mark', None)
            raise self.__fail(
                SettingsMessage.YAML_SYNTAX,
                0 if mark is None else mark.line + 1,
                getattr(exc, 'problem', None) or str(exc)) from exc

        ret = Settings(self._messages)
        ret.path = self._fn
        if src is None:
            return ret
        if not isinstance(src, dict):
            raise self.__fail(
                SettingsMessage.YAML_STRUCTURE, 0,
                f'top level is {type(src).__name__}, expected a mapping')
        for section, pairs in src.items():
            if pairs is None:
                pairs = {}
            if not isinstance(pairs, dict):
                raise self.__fail(
                    SettingsMessage.YAML_STRUCTURE, 0,
                    f'section {section!r} is {type(pairs).__name__}, '
                    'expected a mapping')
            try:
                sect = ret.add_section(self.__to_str(section))
                for k, v in pairs.items():
                    if isinstance(v, (dict, list)):
                        raise self.__fail(
                            SettingsMessage.YAML_STRUCTURE, 0,
                            f'[{section}] {k!r} is {type(v).__name__}, '
                            'expected a scalar')
                    sect[self.__to_str(k)] = self.__to_str(v)
            except (InvalidName, InvalidValue) as exc:
                raise self.__fail(
                    SettingsMessage.YAML_STRUCTURE, 0, str(exc)) from exc
        return ret

    def write(self, instance: Settings) -> None:
        """Convert to yaml file."""
        text = yaml.safe_dump(
            instance.to_dict(),
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False)
        _atomic_write(
            self._fn, text, self._codec,
            self._messages or instance.messages)


def load(
    path: str | PathLike[str],
    encoding: str = 'utf-8', *,
    strict: bool = False,
    detect_encoding: bool = True,
    messages: MessageTable | None = None
) -> Settings:
    """Read and parse an INI settings file.

    Raises `SettingsIOError` when the file can't be read or decoded,
    `ParseError` (with `path` set) on malformed content.
    """
    return SettingsFileHandler(
        path, encoding, detect_encoding=detect_encoding, messages=messages
    ).read(strict=strict)


def save(
    path: str | PathLike[str],
    settings: Settings,
    encoding: str = 'utf-8', *,
    blank_lines: int = 1,
    delimiter: str = ' = '
) -> None:
    """Serialize `settings` over `path`, atomically."""
    SettingsFileHandler(path, encoding, messages=settings.messages).write(
        settings, blank_lines=blank_lines, delimiter=delimiter)
