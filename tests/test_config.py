"""
Tests for AkashaConfig.
"""

import pytest

from akasha.config import AkashaConfig

ENV_VARS = [
    "OPENAI_API_KEY",
    "DEEPSEEK_API_KEY",
    "ANTHROPIC_API_KEY",
    "AKASHA_SCOPE_ID",
    "AKASHA_SCOPE_TYPE",
    "AKASHA_SCOPE_NAME",
    "AKASHA_LLM_PROVIDER",
    "AKASHA_LLM_MODEL",
    "AKASHA_LLM_BASE_URL",
    "AKASHA_EMBEDDING_PROVIDER",
    "AKASHA_EMBEDDING_MODEL",
    "AKASHA_STORAGE_BACKEND",
    "AKASHA_STORAGE_PATH",
    "AKASHA_SIMILARITY_THRESHOLD",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def errors_for(config: AkashaConfig) -> set[str]:
    return {issue.field for issue in config.validate().errors}


class TestDefaults:
    def test_defaults(self):
        config = AkashaConfig()
        assert config.scope is None
        assert config.llm_provider == "openai"
        assert config.storage_backend == "memory"
        assert config.query_similarity_threshold == 0.7
        assert config.query_seed_limit == 10
        assert config.query_limit == 50
        assert config.query_max_depth == 2

    def test_unknown_option(self):
        with pytest.raises(ValueError, match="Unknown configuration option"):
            AkashaConfig(scope="S1")

    def test_scope_property(self):
        config = AkashaConfig(scope_id="S1", scope_type="tenant", scope_name="One")
        assert config.scope.id == "S1"
        assert config.scope.type == "tenant"
        assert config.scope.name == "One"


class TestEnvironment:
    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("AKASHA_SCOPE_ID", "env-scope")
        monkeypatch.setenv("AKASHA_STORAGE_BACKEND", "duckdb")
        monkeypatch.setenv("AKASHA_SIMILARITY_THRESHOLD", "0.55")

        config = AkashaConfig()

        assert config.openai_api_key == "sk-env"
        assert config.scope_id == "env-scope"
        assert config.storage_backend == "duckdb"
        assert config.query_similarity_threshold == 0.55

    def test_kwargs_win_over_env(self, monkeypatch):
        monkeypatch.setenv("AKASHA_LLM_MODEL", "from-env")
        assert AkashaConfig(llm_model="explicit").llm_model == "explicit"


class TestFromFile:
    def test_sections_are_flattened(self, tmp_path):
        path = tmp_path / "akasha.toml"
        path.write_text(
            """
query_max_depth = 3

[scope]
id = "tenant-1"
name = "Tenant One"

[llm]
provider = "deepseek"
model = "deepseek-chat"

[storage]
backend = "duckdb"
path = "./graph.duckdb"

[api_keys]
deepseek = "ds-key"
""",
            encoding="utf-8",
        )

        config = AkashaConfig.from_file(path)

        assert config.scope_id == "tenant-1"
        assert config.scope_name == "Tenant One"
        assert config.llm_provider == "deepseek"
        assert config.llm_model == "deepseek-chat"
        assert config.storage_backend == "duckdb"
        assert config.storage_path == "./graph.duckdb"
        assert config.deepseek_api_key == "ds-key"
        assert config.query_max_depth == 3

    def test_env_and_overrides_layering(self, tmp_path, monkeypatch):
        path = tmp_path / "akasha.toml"
        path.write_text('[llm]\nmodel = "file-model"\n[scope]\nid = "file-scope"\n')
        monkeypatch.setenv("AKASHA_LLM_MODEL", "env-model")

        config = AkashaConfig.from_file(path, scope_id="override-scope")

        assert config.llm_model == "env-model"
        assert config.scope_id == "override-scope"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AkashaConfig.from_file(tmp_path / "nope.toml")

    def test_unknown_key_in_file(self, tmp_path):
        path = tmp_path / "akasha.toml"
        path.write_text('[llm]\ncolour = "blue"\n')
        with pytest.raises(ValueError):
            AkashaConfig.from_file(path)


class TestWithOverrides:
    def test_returns_new_config(self):
        base = AkashaConfig(scope_id="S1", scope_name="One")
        derived = base.with_overrides(query_limit=5)

        assert derived.query_limit == 5
        assert derived.scope_id == "S1"
        assert base.query_limit == 50


class TestValidate:
    def test_valid_config(self):
        config = AkashaConfig(scope_id="S1", scope_name="One", openai_api_key="sk-test")
        result = config.validate()
        assert result.valid
        assert result.errors == []

    def test_missing_scope_is_a_warning(self):
        result = AkashaConfig(openai_api_key="sk-test").validate()
        assert result.valid
        assert [issue.field for issue in result.warnings] == ["scope_id"]

    def test_partial_scope(self):
        config = AkashaConfig(scope_id="S1", openai_api_key="sk-test")
        assert errors_for(config) == {"scope_name"}

    def test_missing_api_key(self):
        config = AkashaConfig(scope_id="S1", scope_name="One")
        assert errors_for(config) == {"openai_api_key"}

    def test_deepseek_needs_both_keys(self):
        config = AkashaConfig(scope_id="S1", scope_name="One", llm_provider="deepseek")
        assert errors_for(config) == {"deepseek_api_key", "openai_api_key"}

    def test_unknown_backend_and_provider(self):
        config = AkashaConfig(
            openai_api_key="sk-test", llm_provider="nope", storage_backend="neo4j"
        )
        assert errors_for(config) == {"llm_provider", "storage_backend"}

    @pytest.mark.parametrize(
        "option, value",
        [
            ("query_similarity_threshold", 1.5),
            ("query_max_depth", 0),
            ("query_max_depth", 11),
            ("query_limit", 0),
            ("query_seed_limit", 0),
        ],
    )
    def test_out_of_range_values(self, option, value):
        config = AkashaConfig(openai_api_key="sk-test", **{option: value})
        assert errors_for(config) == {option}

    def test_anthropic_llm_with_openai_embeddings(self):
        config = AkashaConfig(
            llm_provider="anthropic", anthropic_api_key="ak", openai_api_key="sk-test"
        )
        result = config.validate()
        assert result.valid
        assert "llm_provider" not in {issue.field for issue in result.warnings}

    def test_anthropic_requires_its_key(self):
        config = AkashaConfig(llm_provider="anthropic", openai_api_key="sk-test")
        assert errors_for(config) == {"anthropic_api_key"}
