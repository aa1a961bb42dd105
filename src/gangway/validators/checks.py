"""ルール定義のcheck種別から述語（プローブ → 判定結果）を組み立てる。

各check種別はYAMLのparamsを受け取り、ArtifactProbeを引数に取る述語を返す。
述語は入力が存在しない場合に例外（ArtifactError）を送出し、
「評価不能」と「不合格」の区別は呼び出し側（Rule）が行う。
"""

import json
import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from gangway.models.errors import ArtifactNotFoundError
from gangway.probe.artifact import ArtifactProbe


class CheckResult(BaseModel):
    """述語の評価結果。valuesはメッセージテンプレートの埋め込みに使う。"""

    passed: bool
    values: dict[str, Any] = Field(default_factory=dict)


Predicate = Callable[[ArtifactProbe], CheckResult]
CheckBuilder = Callable[[dict[str, Any]], Predicate]

CHECKS: dict[str, CheckBuilder] = {}

_MISSING = object()

DEFAULT_SECRET_PATTERNS = [
    r"(?i)secret",
    r"\b[sp]k_(?:live|test)_[0-9A-Za-z]{8,}",
    r"\bAKIA[0-9A-Z]{16}\b",
    r"-----BEGIN (?:[A-Z]+ )?PRIVATE KEY-----",
]


def _register(kind: str) -> Callable[[CheckBuilder], CheckBuilder]:
    def decorator(builder: CheckBuilder) -> CheckBuilder:
        CHECKS[kind] = builder
        return builder

    return decorator


def _require(params: dict[str, Any], key: str) -> Any:
    value = params.get(key)
    if value is None or value == "":
        raise ValueError(f"missing parameter '{key}'")
    return value


def _string_list(params: dict[str, Any], key: str) -> list[str]:
    value = _require(params, key)
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"parameter '{key}' must be a string or a list of strings")
    return value


def lookup(data: Any, dotted: str) -> Any:
    """ドット区切りのキーでネストしたdictを辿る。見つからない場合は_MISSINGを返す。"""
    current = data
    for key in dotted.split("."):
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _is_empty(value: Any) -> bool:
    return value is _MISSING or value is None or value == "" or value == [] or value == {}


def mask(value: str) -> str:
    """秘匿情報を全文表示しないためのマスク。"""
    if len(value) <= 6:
        return "***"
    return f"{value[:2]}…{value[-2:]}"


@_register("file_exists")
def file_exists(params: dict[str, Any]) -> Predicate:
    path = _require(params, "path")

    def predicate(probe: ArtifactProbe) -> CheckResult:
        if not probe.file_exists(path):
            return CheckResult(passed=False, values={"path": path})
        found = probe.relative(probe.resolve(path))
        return CheckResult(passed=True, values={"path": found})

    return predicate


@_register("dir_exists")
def dir_exists(params: dict[str, Any]) -> Predicate:
    path = _require(params, "path")

    def predicate(probe: ArtifactProbe) -> CheckResult:
        return CheckResult(passed=probe.dir_exists(path), values={"path": path})

    return predicate


@_register("json_field")
def json_field(params: dict[str, Any]) -> Predicate:
    path = _require(params, "path")
    fields = _string_list(params, "any_of") if "any_of" in params else _string_list(params, "field")
    pattern = re.compile(params["pattern"]) if params.get("pattern") else None
    expected = params.get("equals")

    def predicate(probe: ArtifactProbe) -> CheckResult:
        data = probe.read_json(path)
        values: dict[str, Any] = {"path": path, "field": fields[0], "value": "", "reason": "not configured"}
        for field in fields:
            value = lookup(data, field)
            if _is_empty(value):
                continue
            values.update(field=field, value=value)
            if pattern is not None and not pattern.fullmatch(str(value)):
                values["reason"] = f"'{value}' is malformed"
                return CheckResult(passed=False, values=values)
            if expected is not None and value != expected:
                values["reason"] = f"is '{value}', expected '{expected}'"
                return CheckResult(passed=False, values=values)
            values["reason"] = "configured"
            return CheckResult(passed=True, values=values)
        return CheckResult(passed=False, values=values)

    return predicate


@_register("text_contains")
def text_contains(params: dict[str, Any]) -> Predicate:
    path = _require(params, "path")
    needle = _require(params, "needle")

    def predicate(probe: ArtifactProbe) -> CheckResult:
        text = probe.read_text(path)
        return CheckResult(
            passed=probe.contains_substring(text, needle),
            values={"path": path, "needle": needle},
        )

    return predicate


@_register("env_var")
def env_var(params: dict[str, Any]) -> Predicate:
    name = _require(params, "name")

    def predicate(probe: ArtifactProbe) -> CheckResult:
        value = probe.env(name)
        if value is None:
            return CheckResult(passed=False, values={"name": name, "masked": ""})
        return CheckResult(passed=True, values={"name": name, "masked": mask(value)})

    return predicate


@_register("secret_scan")
def secret_scan(params: dict[str, Any]) -> Predicate:
    path = _require(params, "path")
    patterns = [re.compile(p) for p in params.get("patterns") or DEFAULT_SECRET_PATTERNS]

    def predicate(probe: ArtifactProbe) -> CheckResult:
        blob = json.dumps(probe.read_json(path), ensure_ascii=False, sort_keys=True)
        matches: list[str] = []
        for pattern in patterns:
            matches.extend(m.group(0) for m in pattern.finditer(blob))
        return CheckResult(
            passed=not matches,
            values={
                "path": path,
                "count": len(matches),
                "matches": ", ".join(mask(m) for m in matches),
            },
        )

    return predicate


@_register("capability_pairing")
def capability_pairing(params: dict[str, Any]) -> Predicate:
    entitlements = _require(params, "entitlements")
    capability = _require(params, "capability")
    usage_keys = _string_list(params, "usage_keys")
    config_path = params.get("config_path")
    config_field = params.get("config_field")
    plist = params.get("plist")

    def _declared_keys(probe: ArtifactProbe) -> tuple[set[str], str]:
        keys: set[str] = set()
        if config_path and config_field:
            try:
                declared = lookup(probe.read_json(config_path), config_field)
            except ArtifactNotFoundError:
                declared = _MISSING
            if isinstance(declared, dict):
                keys.update(k for k, v in declared.items() if not _is_empty(v))
        plist_text = ""
        if plist and probe.file_exists(plist):
            plist_text = "\n".join(probe.read_all_text(plist).values())
        return keys, plist_text

    def predicate(probe: ArtifactProbe) -> CheckResult:
        # App Clipや拡張機能のターゲットも含め、いずれかで要求されていれば対象
        requested_in = [
            name
            for name, text in probe.read_all_text(entitlements).items()
            if probe.contains_substring(text, capability)
        ]
        values: dict[str, Any] = {
            "capability": capability,
            "missing": "",
            "status": "not requested",
            "entitlements": ", ".join(requested_in),
        }
        if not requested_in:
            return CheckResult(passed=True, values=values)

        keys, plist_text = _declared_keys(probe)
        missing = [k for k in usage_keys if k not in keys and not probe.contains_substring(plist_text, k)]
        values["missing"] = ", ".join(missing)
        values["status"] = "usage descriptions present"
        return CheckResult(passed=not missing, values=values)

    return predicate


_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


@_register("version_at_least")
def version_at_least(params: dict[str, Any]) -> Predicate:
    path = _require(params, "path")
    field = _require(params, "field")
    minimum_match = _VERSION_RE.match(str(_require(params, "minimum")))
    if minimum_match is None:
        raise ValueError("parameter 'minimum' must look like 'major.minor'")
    minimum = (int(minimum_match.group(1)), int(minimum_match.group(2)))

    def predicate(probe: ArtifactProbe) -> CheckResult:
        value = lookup(probe.read_json(path), field)
        values: dict[str, Any] = {"field": field, "value": "", "minimum": params["minimum"]}
        if _is_empty(value):
            return CheckResult(passed=False, values=values)
        values["value"] = value
        match = _VERSION_RE.search(str(value))
        if match is None:
            return CheckResult(passed=False, values=values)
        return CheckResult(passed=(int(match.group(1)), int(match.group(2))) >= minimum, values=values)

    return predicate


def build_predicate(kind: str, params: dict[str, Any]) -> Predicate:
    """check種別とparamsから述語を生成する。

    Raises:
        KeyError: 未知のcheck種別の場合。
        ValueError: paramsが不正な場合。
    """
    builder = CHECKS[kind]
    return builder(params)
