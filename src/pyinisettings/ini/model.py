# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2026/10/18 14:55:20
# @Author : Kariko Lin

"""
Basically INI structure: ordered sections of ordered `str: str` pairs.

Reading and writing the text form is left to `ini.parser`.
"""

from collections.abc import KeysView, Mapping, MutableMapping
from typing import Iterator

from .consts import (
    ASSIGN_TAG,
    END_SECTION_TAG,
    START_SECTION_TAG,
    MessageTable
)
from .errors import (
    InvalidName,
    InvalidValue,
    KeyNotFound,
    SectionNotFound
)

_LINE_BREAKS = ('\n', '\r')


def is_valid_section_name(name: object) -> bool:
    """Whether `[name]` would parse back to exactly `name`."""
    if not isinstance(name, str) or not name or name != name.strip():
        return False
    return not any(
        c in name for c in (
            START_SECTION_TAG, END_SECTION_TAG, ASSIGN_TAG, *_LINE_BREAKS))


def is_valid_key(key: object) -> bool:
    """Whether `key = ...` would parse back to exactly `key`."""
    if not isinstance(key, str) or not key or key != key.strip():
        return False
    if key.startswith(START_SECTION_TAG):
        return False
    return not any(c in key for c in (ASSIGN_TAG, *_LINE_BREAKS))


def is_valid_value(value: object) -> bool:
    """Whether `... = value` would parse back to exactly `value`."""
    if not isinstance(value, str) or value != value.strip():
        return False
    return not any(c in value for c in _LINE_BREAKS)


class SettingsSection(MutableMapping[str, str]):
    """One `[section]`: keys in insertion order, values are plain strings.

    Typed access (bool, int, ...) is up to the caller,
    e.g. `int(section['retries'])`.
    """

    def __init__(
        self,
        name: str,
        pairs: Mapping[str, str] | None = None,
        messages: MessageTable | None = None
    ) -> None:
        self._name = name
        self._messages = messages
        self._data: dict[str, str] = {}
        if pairs:
            self.update(pairs)

    @property
    def name(self) -> str:
        return self._name

    def __getitem__(self, key: str) -> str:
        try:
            return self._data[key]
        except KeyError:
            raise KeyNotFound(self._name, key, self._messages) from None

    def __setitem__(self, key: str, value: str) -> None:
        if not is_valid_key(key):
            raise InvalidName('key', key, self._messages)
        if not is_valid_value(value):
            raise InvalidValue(self._name, key, value, self._messages)
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        try:
            del self._data[key]
        except KeyError:
            raise KeyNotFound(self._name, key, self._messages) from None

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __str__(self) -> str:
        return f"[{self._name}]"

    def __repr__(self) -> str:
        return '[%s] { .cnt = %d }' % (self._name, len(self._data))


class Settings(MutableMapping[str, SettingsSection]):
    """INI document. Something like:

        ```ini
        [GLOBAL]
        enabled = true

        [LOG]
        level = debug
        ```

    Sections and their keys keep insertion order, so a parse-then-save
    leaves the file layout as it was (minus whitespace).
    The instance is not synchronized; guard it yourself when sharing it
    between threads.
    """

    def __init__(self, messages: MessageTable | None = None) -> None:
        self.__raw: dict[str, SettingsSection] = {}
        self.messages: MessageTable | None = messages
        # where `load()` got it from, if anywhere.
        self.path: str | None = None

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Mapping[str, str]],
        messages: MessageTable | None = None
    ) -> 'Settings':
        ins = cls(messages)
        for section, pairs in data.items():
            ins[section] = pairs
        return ins

    def __getitem__(self, key: str) -> SettingsSection:
        try:
            return self.__raw[key]
        except KeyError:
            raise SectionNotFound(key, self.messages) from None

    def __setitem__(
        self, key: str, value: SettingsSection | Mapping[str, str]
    ) -> None:
        if not is_valid_section_name(key):
            raise InvalidName('section', key, self.messages)
        # shouldn't keep ptr to external dict in section setting operation.
        self.__raw[key] = SettingsSection(key, value, self.messages)

    def __delitem__(self, key: str) -> None:
        try:
            del self.__raw[key]
        except KeyError:
            raise SectionNotFound(key, self.messages) from None

    def __contains__(self, key: object) -> bool:
        return key in self.__raw

    def __len__(self) -> int:
        return len(self.__raw)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__raw)

    def __repr__(self) -> str:
        return '<Settings %s { .sections = %d }>' % (
            self.path or '(unsaved)', len(self.__raw))

    def section_exists(self, section: str) -> bool:
        return section in self.__raw

    def key_exists(self, section: str, key: str) -> bool:
        return section in self.__raw and key in self.__raw[section]

    def get(self, section: str, key: str) -> str:
        """Value of `key` in `section`.

        Unlike `Mapping.get()` there is no default: a missing section
        or key raises `KeyNotFound`.
        """
        if section not in self.__raw:
            raise KeyNotFound(
                section, key, self.messages, section_missing=True)
        return self.__raw[section][key]

    def set(self, section: str, key: str, value: str) -> None:
        """Insert or overwrite, creating `section` on demand."""
        # validate before touching the document, so a bad value
        # doesn't leave an empty section behind.
        if not is_valid_section_name(section):
            raise InvalidName('section', section, self.messages)
        if not is_valid_key(key):
            raise InvalidName('key', key, self.messages)
        if not is_valid_value(value):
            raise InvalidValue(section, key, value, self.messages)
        self.add_section(section)[key] = value

    def add_section(self, section: str) -> SettingsSection:
        """Create `section` if absent, then return it."""
        if section not in self.__raw:
            self[section] = {}
        return self.__raw[section]

    def remove_section(self, section: str) -> None:
        self.__raw.pop(section, None)

    def remove_key(self, section: str, key: str) -> None:
        if section not in self.__raw:
            raise SectionNotFound(section, self.messages)
        self.__raw[section].pop(key, None)

    def sections(self) -> KeysView[str]:
        """Live view of section names, in insertion order."""
        return self.__raw.keys()

    def keys(self, section: str | None = None) -> KeysView[str]:
        """Keys of `section`, in insertion order.

        Without `section` this is the plain `Mapping.keys()`,
        i.e. the section names.
        """
        if section is None:
            return self.sections()
        return self[section].keys()

    def merge(self, another: Mapping[str, Mapping[str, str]]) -> None:
        """Merge `another` into self; its values win on conflicts."""
        for section, pairs in another.items():
            self.add_section(section).update(pairs)

    def rename_section(self, old: str, new: str) -> bool:
        """Rename a section, keeping its position.

        Returns:
            `True` if succeed, otherwise `False`.
            May not success if `old` is not found or `new` already exists.
        """
        if old not in self.__raw or new in self.__raw:
            return False
        if not is_valid_section_name(new):
            raise InvalidName('section', new, self.messages)

        renamed: dict[str, SettingsSection] = {}
        for name, section in self.__raw.items():
            if name == old:
                section._name = new
                name = new
            renamed[name] = section
        self.__raw = renamed
        return True

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {name: dict(section) for name, section in self.__raw.items()}
