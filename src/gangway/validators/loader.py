"""ルールセットとプロファイルの定義をYAMLファイルから読み込む。"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from gangway.models.errors import ProfileNotFoundError, RuleDefinitionError
from gangway.models.validation import Profile, RuleSetDefinition
from gangway.validators.checks import CHECKS, build_predicate
from gangway.validators.rules import Rule, RuleSet

logger = structlog.get_logger()


def _read_yaml(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RuleDefinitionError(path.name, f"invalid YAML: {e}") from e


def build_rule_set(definition: RuleSetDefinition, source: str = "<memory>") -> RuleSet:
    """ルールセット定義から評価可能なRuleSetを組み立てる。"""
    rules: list[Rule] = []
    seen: set[str] = set()
    for rule_def in definition.rules:
        if rule_def.id in seen:
            raise RuleDefinitionError(source, f"duplicate rule id '{rule_def.id}' in {definition.category}")
        seen.add(rule_def.id)

        if rule_def.check not in CHECKS:
            raise RuleDefinitionError(source, f"rule '{rule_def.id}' uses unknown check '{rule_def.check}'")
        try:
            predicate = build_predicate(rule_def.check, rule_def.params)
        except (ValueError, TypeError) as e:
            raise RuleDefinitionError(source, f"rule '{rule_def.id}': {e}") from e

        rules.append(
            Rule(
                rule_id=rule_def.id,
                category=definition.category,
                predicate=predicate,
                on_pass=rule_def.on_pass,
                on_fail=rule_def.on_fail,
                on_skip=rule_def.on_skip,
                description=rule_def.description,
            )
        )
    return RuleSet(
        category=definition.category,
        title=definition.title,
        rules=rules,
        description=definition.description,
    )


class RuleSetLoader:
    """config_dir配下のvalidation-rules/*.yamlとprofiles.yamlを読み込む。"""

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = config_dir
        self._rule_sets: dict[str, RuleSet] | None = None
        self._definitions: dict[str, RuleSetDefinition] | None = None
        self._profiles: dict[str, Profile] | None = None

    @property
    def rules_dir(self) -> Path:
        return self._config_dir / "validation-rules"

    @property
    def profiles_file(self) -> Path:
        return self._config_dir / "profiles.yaml"

    def definitions(self) -> dict[str, RuleSetDefinition]:
        """カテゴリ名をキーとしたルールセット定義を返す。

        Raises:
            RuleDefinitionError: validation-rulesディレクトリが無い場合や定義が不正な場合。
        """
        if self._definitions is not None:
            return self._definitions

        if not self.rules_dir.is_dir():
            raise RuleDefinitionError(str(self.rules_dir), "rule set directory not found")

        definitions: dict[str, RuleSetDefinition] = {}
        for rule_file in sorted(self.rules_dir.glob("*.yaml")):
            data = _read_yaml(rule_file)
            if not data:
                continue
            try:
                definition = RuleSetDefinition.model_validate(data)
            except ValidationError as e:
                raise RuleDefinitionError(rule_file.name, str(e)) from e
            if definition.category in definitions:
                raise RuleDefinitionError(rule_file.name, f"duplicate category '{definition.category}'")
            definitions[definition.category] = definition

        self._definitions = definitions
        return definitions

    def rule_sets(self) -> dict[str, RuleSet]:
        """カテゴリ名をキーとした評価可能なルールセットを返す。"""
        if self._rule_sets is not None:
            return self._rule_sets

        self._rule_sets = {
            category: build_rule_set(definition, source=category)
            for category, definition in self.definitions().items()
        }
        logger.debug(
            "rule_sets_loaded",
            config_dir=str(self._config_dir),
            categories=list(self._rule_sets),
            rules=sum(len(rs.rules) for rs in self._rule_sets.values()),
        )
        return self._rule_sets

    def profiles(self) -> dict[str, Profile]:
        """プロファイル名をキーとしたプロファイル定義を返す。"""
        if self._profiles is not None:
            return self._profiles

        if not self.profiles_file.is_file():
            raise RuleDefinitionError(str(self.profiles_file), "profile definitions not found")

        profiles: dict[str, Profile] = {}
        data = _read_yaml(self.profiles_file) or {}
        for profile_data in data.get("profiles", []):
            try:
                profile = Profile.model_validate(profile_data)
            except ValidationError as e:
                raise RuleDefinitionError(self.profiles_file.name, str(e)) from e
            profiles[profile.name] = profile

        known = self.definitions()
        for profile in profiles.values():
            unknown = [name for name in profile.rule_sets if name not in known]
            if unknown:
                raise RuleDefinitionError(
                    self.profiles_file.name,
                    f"profile '{profile.name}' references unknown rule sets: {', '.join(unknown)}",
                )

        self._profiles = profiles
        return profiles

    def profile(self, name: str) -> Profile:
        """
        Raises:
            ProfileNotFoundError: プロファイルが存在しない場合。
        """
        profile = self.profiles().get(name)
        if profile is None:
            raise ProfileNotFoundError(name)
        return profile

    def rule_sets_for(self, profile: Profile) -> list[RuleSet]:
        """プロファイルに含まれるルールセットを宣言順に返す。"""
        rule_sets = self.rule_sets()
        return [rule_sets[name] for name in profile.rule_sets]
