"""検証対象プロジェクトのファイルを読み取り専用で参照するプローブ。"""

import json
import os
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

from gangway.models.errors import (
    ArtifactError,
    ArtifactNotFoundError,
    ArtifactParseError,
    ArtifactReadError,
    PathOutsideRootError,
)

_GLOB_CHARS = set("*?[")


class ArtifactProbe:
    """target_rootを起点に存在確認・内容取得を行う。

    すべてのパスはtarget_rootからの相対パスとして解決し、ルートの外は参照しない。
    書き込み操作は持たない。
    """

    def __init__(self, target_root: Path, environ: Mapping[str, str] | None = None) -> None:
        self._root = target_root
        self._environ = os.environ if environ is None else environ

    @property
    def target_root(self) -> Path:
        return self._root

    def _candidates(self, path: str) -> list[Path]:
        # ディレクトリトラバーサル防止
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts or Path(path).is_absolute():
            raise PathOutsideRootError(path)

        if _GLOB_CHARS & set(path):
            matches = sorted(self._root.glob(path))
        else:
            matches = [self._root / relative]

        root = self._root.resolve()
        safe: list[Path] = []
        for match in matches:
            if not match.resolve().is_relative_to(root):
                raise PathOutsideRootError(path)
            safe.append(match)
        return safe

    def file_exists(self, path: str) -> bool:
        """ファイルが存在するか。I/Oエラーやルート外のパスはFalseを返す。"""
        try:
            return any(p.is_file() for p in self._candidates(path))
        except (OSError, ArtifactError):
            return False

    def dir_exists(self, path: str) -> bool:
        """ディレクトリが存在するか。I/Oエラーやルート外のパスはFalseを返す。"""
        try:
            return any(p.is_dir() for p in self._candidates(path))
        except (OSError, ArtifactError):
            return False

    def resolve(self, path: str) -> Path:
        """パス（globパターン可）に一致する最初のファイルを返す。

        Raises:
            ArtifactNotFoundError: 一致するファイルが無い場合。
            PathOutsideRootError: ルート外を指す場合。
        """
        try:
            for candidate in self._candidates(path):
                if candidate.is_file():
                    return candidate
        except OSError as e:
            raise ArtifactReadError(path, str(e)) from e
        raise ArtifactNotFoundError(path)

    def relative(self, path: Path) -> str:
        return path.relative_to(self._root).as_posix()

    def read_text(self, path: str) -> str:
        """ファイル内容をテキストで返す。

        Raises:
            ArtifactNotFoundError: ファイルが存在しない場合。
            ArtifactReadError: 存在するが読み込めない場合。
        """
        return self._read(self.resolve(path), path)

    def read_all_text(self, path: str) -> dict[str, str]:
        """パターンに一致するすべてのファイルの内容を{相対パス: 内容}で返す。

        Raises:
            ArtifactNotFoundError: 一致するファイルが1つも無い場合。
            ArtifactReadError: 一致したファイルのいずれかを読み込めない場合。
        """
        try:
            files = [p for p in self._candidates(path) if p.is_file()]
        except OSError as e:
            raise ArtifactReadError(path, str(e)) from e
        if not files:
            raise ArtifactNotFoundError(path)
        return {self.relative(p): self._read(p, self.relative(p)) for p in files}

    def _read(self, file_path: Path, path: str) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ArtifactNotFoundError(path) from None
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactReadError(path, str(e)) from e

    def read_json(self, path: str) -> Any:
        """ファイルをJSONとして読み込む。

        Raises:
            ArtifactNotFoundError: ファイルが存在しない場合。
            ArtifactReadError: 存在するが読み込めない場合。
            ArtifactParseError: JSONとして不正な場合。
        """
        text = self.read_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ArtifactParseError(path, str(e)) from e

    @staticmethod
    def contains_substring(text: str, needle: str) -> bool:
        return needle in text

    def env(self, name: str) -> str | None:
        value = self._environ.get(name)
        return value or None
