"""Gangwayのカスタム例外クラス。"""


class GangwayError(Exception):
    """Gangwayの基底例外クラス。"""


class ArtifactError(GangwayError):
    """成果物（ファイル）を評価できない場合の基底例外。"""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class ArtifactNotFoundError(ArtifactError):
    """成果物が存在しない場合の例外。"""

    def __init__(self, path: str) -> None:
        super().__init__(f"not found: {path}", path)


class ArtifactReadError(ArtifactError):
    """成果物は存在するが読み込めない場合の例外。"""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}", path)
        self.reason = reason


class ArtifactParseError(ArtifactError):
    """JSONの構文エラー。パーサーのメッセージをそのまま保持する。"""

    def __init__(self, path: str, parser_message: str) -> None:
        super().__init__(f"invalid JSON in {path}: {parser_message}", path)
        self.parser_message = parser_message


class PathOutsideRootError(ArtifactError):
    """検証対象ルートの外を指すパスを拒否する例外。"""

    def __init__(self, path: str) -> None:
        super().__init__(f"path escapes the target root: {path}", path)


class RuleDefinitionError(GangwayError):
    """ルールセット定義（YAML）が不正な場合の例外。"""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class ProfileNotFoundError(GangwayError):
    """指定されたプロファイルが見つからない場合の例外。"""

    def __init__(self, profile: str) -> None:
        super().__init__(f"Profile not found: {profile}")
        self.profile = profile
