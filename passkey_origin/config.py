# Copyright (c) 2018 Yubico AB
# All rights reserved.
#
#   Redistribution and use in source and binary forms, with or
#   without modification, are permitted provided that the following
#   conditions are met:
#
#    1. Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#    2. Redistributions in binary form must reproduce the above
#       copyright notice, this list of conditions and the following
#       disclaimer in the documentation and/or other materials provided
#       with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""
Settings for the command line tool.

Settings are read from a YAML file, by default ~/.passkey-origin-validator.yaml,
and can be overridden by environment variables named after the setting, such as
PASSKEY_ORIGIN_VALIDATOR_DEBUG=true.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

import yaml

from .sources import DEFAULT_DOMAIN, TIMEOUT

logger = logging.getLogger(__name__)


CONFIG_NAME = ".passkey-origin-validator.yaml"
ENV_PREFIX = "PASSKEY_ORIGIN_VALIDATOR_"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


class ConfigError(Exception):
    """Invalid or unreadable configuration."""


@dataclass(frozen=True)
class Config:
    debug: bool = False
    file: Optional[str] = None
    domain: str = DEFAULT_DOMAIN
    timeout: float = TIMEOUT


def _convert(name: str, value: Any) -> Any:
    if name == "debug":
        if isinstance(value, bool):
            return value
        if str(value).lower() in _TRUE:
            return True
        if str(value).lower() in _FALSE:
            return False
        raise ConfigError(f"Invalid value for debug: {value!r}")
    if name == "timeout":
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid value for timeout: {value!r}")
        if timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {timeout}")
        return timeout
    if value is None:
        if name == "file":
            return None
        raise ConfigError(f"Missing value for {name}")
    return str(value)


def _read_file(path: str) -> Mapping[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read config file: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Config:
    """Loads settings from a config file and the environment.

    :param path: Optional path of a config file, which must exist. If not given,
        ~/.passkey-origin-validator.yaml is used when present.
    :param environ: Optional environment variables, defaults to os.environ.
    :return: The loaded settings.
    """
    if environ is None:
        environ = os.environ

    values = {}
    if path is None:
        default_path = os.path.join(os.path.expanduser("~"), CONFIG_NAME)
        if os.path.isfile(default_path):
            path = default_path
    if path is not None:
        values.update(_read_file(path))
        logger.debug(f"Using config file: {path}")

    names = [f.name for f in fields(Config)]
    for name in names:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            values[name] = environ[key]

    unknown = set(values) - set(names)
    if unknown:
        logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")

    return replace(
        Config(), **{k: _convert(k, v) for k, v in values.items() if k in names}
    )
