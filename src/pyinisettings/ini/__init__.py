# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2026/10/18 16:20:44
# @Author : Kariko Lin

from .consts import (
    DEFAULT_MESSAGES,
    GLOBAL_SECTION,
    MessageTable,
    SettingsMessage
)
from .errors import (
    InvalidName,
    InvalidValue,
    KeyNotFound,
    ParseError,
    SectionNotFound,
    SettingsError,
    SettingsIOError
)
from .model import Settings, SettingsSection
from .parser import (
    SettingsFileHandler,
    SettingsYamlHandler,
    load,
    parse,
    save,
    serialize
)
