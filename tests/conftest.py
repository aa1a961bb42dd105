"""テスト共通フィクスチャ。"""

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

from gangway.config import GangwayConfig
from gangway.probe.artifact import ArtifactProbe
from gangway.services.validation import ValidationService

ProjectFactory = Callable[[dict[str, Any]], Path]

APP_JSON: dict[str, Any] = {
    "expo": {
        "name": "Demo",
        "version": "1.0.0",
        "ios": {
            "bundleIdentifier": "com.example.demo",
            "buildNumber": "3",
            "infoPlist": {
                "NSCameraUsageDescription": "Take a profile photo",
                "NSMicrophoneUsageDescription": "Record voice notes",
                "NSPhotoLibraryUsageDescription": "Pick a profile photo",
                "NSLocationWhenInUseUsageDescription": "Find nearby clinics",
                "NSFaceIDUsageDescription": "Unlock your journal with Face ID",
                "ITSAppUsesNonExemptEncryption": False,
            },
        },
    }
}

ENTITLEMENTS = """<?xml version="1.0" encoding="UTF-8"?>
<plist version="1.0">
<dict>
  <key>aps-environment</key>
  <string>production</string>
</dict>
</plist>
"""

EXPORT_OPTIONS = """<?xml version="1.0" encoding="UTF-8"?>
<plist version="1.0">
<dict>
  <key>method</key>
  <string>app-store</string>
</dict>
</plist>
"""

XCODE_CLOUD = """version: 1
workflows:
  production:
    archive:
      scheme: Demo
    deploy:
      destination: app-store-connect
"""


def write_tree(root: Path, files: dict[str, Any]) -> Path:
    """{相対パス: 内容}からファイルを作成する。dict/listの内容はJSONで書き出す。"""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            path.write_text(json.dumps(content, indent=2), encoding="utf-8")
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """CLIがstructlogを再設定するため、テストごとに初期状態へ戻す。"""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config_dir() -> Path:
    """設定ファイルディレクトリ。"""
    return Path(__file__).parent.parent / "src" / "gangway" / "data"


@pytest.fixture
def validation_service(config_dir: Path) -> ValidationService:
    """テスト用ValidationService。"""
    return ValidationService(config_dir=config_dir)


@pytest.fixture
def gangway_config(config_dir: Path) -> GangwayConfig:
    """テスト用GangwayConfig。"""
    return GangwayConfig(config_dir=config_dir)


@pytest.fixture
def make_project(tmp_path: Path) -> ProjectFactory:
    """ファイル構成を指定してプロジェクトディレクトリを作成する。"""
    counter = iter(range(1000))

    def factory(files: dict[str, Any]) -> Path:
        return write_tree(tmp_path / f"project-{next(counter)}", files)

    return factory


@pytest.fixture
def ready_files() -> dict[str, Any]:
    """提出に必要な成果物が揃ったプロジェクトのファイル構成。"""
    return {
        "package.json": {"name": "demo", "version": "1.0.0"},
        "app.json": json.loads(json.dumps(APP_JSON)),
        "ios/Demo/Demo.entitlements": ENTITLEMENTS,
        "ios/ExportOptions.plist": EXPORT_OPTIONS,
        ".xcode-cloud.yml": XCODE_CLOUD,
    }


@pytest.fixture
def ready_project(make_project: ProjectFactory, ready_files: dict[str, Any]) -> Path:
    return make_project(ready_files)


@pytest.fixture
def probe(tmp_path: Path) -> ArtifactProbe:
    """空のtmp_pathを対象にしたプローブ。"""
    return ArtifactProbe(tmp_path, environ={})
