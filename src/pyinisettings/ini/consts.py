# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2026/10/18 14:10:37
# @Author : Kariko Lin

from collections.abc import Mapping
from enum import Enum

START_SECTION_TAG = '['
END_SECTION_TAG = ']'
ASSIGN_TAG = '='

# an empty header `[]` selects this section.
GLOBAL_SECTION = 'GLOBAL'

# shown instead of a path when parsing in-memory text.
STRING_SOURCE = '<string>'


class SettingsMessage(str, Enum):
    OPENING_FILE = 'opening_file'
    READING_FILE = 'reading_file'
    WRITING_FILE = 'writing_file'
    DECODING_FILE = 'decoding_file'
    MISSING_START_SECTION_TAG = 'missing_start_section_tag'
    MISSING_END_SECTION_TAG = 'missing_end_section_tag'
    MISSING_ASSIGN_TAG = 'missing_assign_tag'
    MISSING_KEY = 'missing_key'
    KEY_OUTSIDE_SECTION = 'key_outside_section'
    DUPLICATED_KEY = 'duplicated_key'
    INVALID_SECTION_NAME = 'invalid_section_name'
    INVALID_LINE = 'invalid_line'
    YAML_SYNTAX = 'yaml_syntax'
    YAML_STRUCTURE = 'yaml_structure'
    SECTION_NOT_FOUND = 'section_not_found'
    KEY_NOT_FOUND = 'key_not_found'
    INVALID_VALUE = 'invalid_value'
    PADDED_VALUE = 'padded_value'
    VALUE_NOT_STR = 'value_not_str'
    INVALID_NAME = 'invalid_name'


MessageTable = Mapping[SettingsMessage, str]

# `str.format` templates, any of them may be replaced through `messages=`.
DEFAULT_MESSAGES: dict[SettingsMessage, str] = {
    SettingsMessage.OPENING_FILE:
        "Error opening settings file '{path}': {error}",
    SettingsMessage.READING_FILE:
        "Error reading settings file '{path}': {error}",
    SettingsMessage.WRITING_FILE:
        "Error writing settings file '{path}': {error}",
    SettingsMessage.DECODING_FILE:
        "Unable to decode settings file '{path}' as {encoding}: {error}",
    SettingsMessage.MISSING_START_SECTION_TAG:
        "Missing start section tag '{tag}' at line {lineno} "
        "of settings file '{source}': {line!r}",
    SettingsMessage.MISSING_END_SECTION_TAG:
        "Missing end section tag '{tag}' at line {lineno} "
        "of settings file '{source}': {line!r}",
    SettingsMessage.MISSING_ASSIGN_TAG:
        "Missing assign tag '{tag}' at line {lineno} "
        "of settings file '{source}': {line!r}",
    SettingsMessage.MISSING_KEY:
        "Missing key at line {lineno} of settings file '{source}': {line!r}",
    SettingsMessage.KEY_OUTSIDE_SECTION:
        "Key/value pair outside of any section at line {lineno} "
        "of settings file '{source}': {line!r}",
    SettingsMessage.DUPLICATED_KEY:
        "Duplicated key '{key}' at line {lineno} previously defined "
        "at line {previous} of settings file '{source}'",
    SettingsMessage.INVALID_SECTION_NAME:
        "Invalid section name at line {lineno} "
        "of settings file '{source}': {line!r}",
    SettingsMessage.INVALID_LINE:
        "Invalid key/value pair at line {lineno} "
        "of settings file '{source}': {line!r}",
    SettingsMessage.YAML_SYNTAX:
        "Malformed YAML at line {lineno} of settings file '{source}': {line}",
    SettingsMessage.YAML_STRUCTURE:
        "Unexpected YAML structure in settings file '{source}': {line}",
    SettingsMessage.SECTION_NOT_FOUND:
        "Section '{section}' not found",
    SettingsMessage.KEY_NOT_FOUND:
        "Section '{section}' key '{key}' not found",
    SettingsMessage.INVALID_VALUE:
        "Section '{section}' key '{key}': value {value!r} "
        "must not contain a line break",
    SettingsMessage.PADDED_VALUE:
        "Section '{section}' key '{key}': value {value!r} "
        "must not start or end with whitespace",
    SettingsMessage.VALUE_NOT_STR:
        "Section '{section}' key '{key}': value {value!r} "
        "is {type}, expected str",
    SettingsMessage.INVALID_NAME:
        "Invalid {kind} name {name!r}",
}


def render_message(
    msgid: SettingsMessage,
    messages: MessageTable | None = None,
    **fields: object
) -> str:
    """Format a diagnostic, preferring the caller's table over the defaults."""
    template = (messages or {}).get(msgid) or DEFAULT_MESSAGES[msgid]
    return template.format(**fields)
