# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2026/10/18 16:22:09
# @Author : Kariko Lin

from .ini import (
    DEFAULT_MESSAGES,
    GLOBAL_SECTION,
    InvalidName,
    InvalidValue,
    KeyNotFound,
    ParseError,
    SectionNotFound,
    Settings,
    SettingsError,
    SettingsFileHandler,
    SettingsIOError,
    SettingsMessage,
    SettingsSection,
    SettingsYamlHandler,
    load,
    parse,
    save,
    serialize
)

__all__ = [
    'Settings', 'SettingsSection',
    'parse', 'serialize', 'load', 'save',
    'SettingsFileHandler', 'SettingsYamlHandler',
    'SettingsError', 'ParseError', 'SectionNotFound', 'KeyNotFound',
    'InvalidValue', 'InvalidName', 'SettingsIOError',
    'SettingsMessage', 'DEFAULT_MESSAGES', 'GLOBAL_SECTION'
]
