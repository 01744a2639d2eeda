# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/config/loader.py

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import SetupConfig


def load_config(path: str | Path) -> SetupConfig:
    """
    Load a setup config from a JSON or YAML document.

    Environment variables like ${GRAFANA_ADMIN_PASSWORD} are expanded before
    parsing. Every failure is reported as ConfigError.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc

    expanded = os.path.expandvars(raw)

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(expanded)
        else:
            data = yaml.safe_load(expanded)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to parse config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain an object at the top level")

    try:
        return SetupConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config file {path}:\n{exc}") from exc
