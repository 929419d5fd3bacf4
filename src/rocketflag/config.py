"""設定ファイル読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import RocketFlagError, RocketFlagErrorCodes
from .models import DEFAULT_API_URL, DEFAULT_VERSION
from .options import ClientOption, with_api_url, with_timeout, with_version


class RocketFlagSettings(BaseModel):
    """RocketFlag クライアント設定。"""

    api_url: str = DEFAULT_API_URL
    version: str = DEFAULT_VERSION
    timeout_seconds: float | None = Field(default=None, gt=0)

    def to_options(self) -> list[ClientOption]:
        """RocketFlagClient / AsyncRocketFlagClient 用のオプション列を返す。"""
        options = [with_api_url(self.api_url), with_version(self.version)]
        if self.timeout_seconds is not None:
            options.append(with_timeout(self.timeout_seconds))
        return options


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.CONFIG,
            message=f"error loading settings: failed to read {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.CONFIG,
            message=f"error loading settings: failed to parse YAML {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise RocketFlagError(
            code=RocketFlagErrorCodes.CONFIG,
            message=f"error loading settings: top level of {path} must be a mapping",
        )
    return data


def load_settings(path: Path, section: str = "rocketflag") -> RocketFlagSettings:
    """設定ファイルの指定セクションを読み込んで RocketFlagSettings を返す。

    path: 設定ファイルパス
    section: 読み込むセクション名。存在しない場合はデフォルト値を使う。
    """
    data = _read_yaml(path)
    try:
        return RocketFlagSettings.model_validate(data.get(section) or {})
    except ValidationError as e:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.CONFIG,
            message=f"error loading settings: {e}",
            cause=e,
        ) from e
