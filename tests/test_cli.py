import json
from pathlib import Path

from click.testing import CliRunner

from env_typed_checker.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


def _write_schema(tmp_path: Path, data) -> Path:
    path = tmp_path / "env.schema.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestCliCheck:
    def test_valid_with_env_file(self, tmp_path):
        schema = _write_schema(tmp_path, {"ETC_PORT": "number"})
        env_file = tmp_path / ".env.custom"
        env_file.write_text("ETC_PORT=3000\n", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, ["check", "--schema", str(schema), "--env-file", str(env_file)])

        assert result.exit_code == 0
        assert "✅ Environment is valid." in result.output

    def test_loads_default_env_in_cwd(self, tmp_path, monkeypatch):
        _write_schema(tmp_path, {"ETC_PORT": "number"})
        (tmp_path / ".env").write_text("ETC_PORT=3000\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        result = CliRunner().invoke(main, ["check", "--schema", "env.schema.json"])

        assert result.exit_code == 0

    def test_env_file_overrides_shell(self, tmp_path):
        schema = _write_schema(tmp_path, {"ETC_PORT": "number"})
        env_file = tmp_path / ".env"
        env_file.write_text("ETC_PORT=3000\n", encoding="utf-8")

        result = CliRunner().invoke(
            main,
            ["check", "--schema", str(schema), "--env-file", str(env_file)],
            env={"ETC_PORT": "not-a-number"},
        )

        assert result.exit_code == 0

    def test_validation_failure_exits_1(self, tmp_path):
        schema = _write_schema(tmp_path, {"ETC_PORT": "number", "ETC_DB_URL": "url"})

        result = CliRunner().invoke(
            main,
            ["check", "--schema", str(schema), "--no-dotenv"],
            env={"ETC_PORT": "abc", "ETC_DB_URL": None},
        )

        assert result.exit_code == 1
        assert "ENV validation failed" in result.output
        assert 'ETC_PORT: expected number, got "abc"' in result.output
        assert "ETC_DB_URL: missing required environment variable" in result.output

    def test_secret_values_redacted(self, tmp_path):
        schema = _write_schema(tmp_path, {"ETC_TOKEN": {"type": "number", "secret": True}})

        result = CliRunner().invoke(
            main,
            ["check", "--schema", str(schema), "--no-dotenv", "--format", "json"],
            env={"ETC_TOKEN": "hunter2"},
        )

        assert result.exit_code == 1
        assert "hunter2" not in result.output
        data = json.loads(result.output)
        assert data["issues"][0]["message"] == 'expected number, got "***"'

    def test_github_format(self, tmp_path):
        schema = _write_schema(tmp_path, {"ETC_MISSING": "string"})

        result = CliRunner().invoke(
            main, ["check", "--schema", str(schema), "--no-dotenv", "--format", "github"], env={"ETC_MISSING": None}
        )

        assert result.exit_code == 1
        assert "::error title=ETC_MISSING::missing required environment variable" in result.output

    def test_fixture_schema(self):
        result = CliRunner().invoke(
            main,
            ["check", "--schema", str(FIXTURES / "env.schema.json"), "--no-dotenv"],
            env={
                "APP_PORT": None,
                "APP_DB_URL": "postgres://db:5432/app",
                "APP_DEBUG": None,
                "APP_ENV": None,
                "APP_SLUG": "My-Slug-1",
                "APP_TOKEN": "tok",
            },
        )

        assert result.exit_code == 0

    def test_schema_from_env_var(self, tmp_path):
        schema = _write_schema(tmp_path, {"ETC_OPT": "string?"})

        result = CliRunner().invoke(
            main, ["check", "--no-dotenv"], env={"ENV_TYPED_CHECKER_SCHEMA": str(schema), "ETC_OPT": None}
        )

        assert result.exit_code == 0


class TestCliErrors:
    def test_missing_schema_option(self):
        result = CliRunner().invoke(main, ["check"], env={"ENV_TYPED_CHECKER_SCHEMA": None})
        assert result.exit_code == 2
        assert "--schema" in result.output

    def test_schema_not_object(self, tmp_path):
        schema = _write_schema(tmp_path, ["PORT"])
        result = CliRunner().invoke(main, ["check", "--schema", str(schema), "--no-dotenv"])
        assert result.exit_code == 2
        assert "Schema must be a JSON object" in result.output

    def test_invalid_declaration(self, tmp_path):
        schema = _write_schema(tmp_path, {"MODE": {"type": "regex", "pattern": "["}})
        result = CliRunner().invoke(main, ["check", "--schema", str(schema), "--no-dotenv"])
        assert result.exit_code == 2
        assert 'Invalid schema value for "MODE"' in result.output

    def test_non_string_schema_key(self, tmp_path):
        schema = tmp_path / "env.schema.yaml"
        schema.write_text("8080: number\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["check", "--schema", str(schema), "--no-dotenv"])
        assert result.exit_code == 2
        assert "keys must be strings" in result.output

    def test_unknown_command(self):
        result = CliRunner().invoke(main, ["wat"])
        assert result.exit_code == 2

    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Usage:" in result.output


class TestCliGenerate:
    def test_update_creates_file(self, tmp_path):
        schema = _write_schema(tmp_path, {"PORT": {"type": "number", "default": 3000}, "DEBUG": "boolean?"})
        out = tmp_path / ".env"

        result = CliRunner().invoke(main, ["generate", "--schema", str(schema), "--out", str(out)])

        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == 'DEBUG=""\nPORT=3000\n'
        assert "Added 2 missing variables" in result.output

    def test_nothing_to_generate(self, tmp_path):
        schema = _write_schema(tmp_path, {"PORT": "number"})
        out = tmp_path / ".env"
        out.write_text("PORT=\n", encoding="utf-8")

        result = CliRunner().invoke(main, ["generate", "--schema", str(schema), "--out", str(out)])

        assert result.exit_code == 0
        assert "Nothing to generate" in result.output

    def test_create_refuses_overwrite(self, tmp_path):
        schema = _write_schema(tmp_path, {"PORT": "number"})
        out = tmp_path / ".env"
        out.write_text("PORT=1\n", encoding="utf-8")

        result = CliRunner().invoke(main, ["generate", "--schema", str(schema), "--out", str(out), "--mode", "create"])

        assert result.exit_code == 2
        assert "Refusing to overwrite" in result.output

    def test_create_with_flags(self, tmp_path):
        schema = _write_schema(
            tmp_path,
            {"SLUG": {"type": "regex", "pattern": "^[a-z]+$", "default": "abc"}, "X": {"type": "json", "default": {"a": 1}}},
        )
        out = tmp_path / ".env.example"

        result = CliRunner().invoke(
            main,
            ["generate", "--schema", str(schema), "--out", str(out), "--mode", "create", "--no-defaults", "--comment-types"],
        )

        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == 'SLUG="" # regex\nX="" # json\n'
        assert "Created" in result.output

    def test_float_default_written_without_fraction(self, tmp_path):
        schema = _write_schema(tmp_path, {"PORT": {"type": "number", "default": "3000.0"}})
        out = tmp_path / ".env"

        CliRunner().invoke(main, ["generate", "--schema", str(schema), "--out", str(out)])

        assert out.read_text(encoding="utf-8") == "PORT=3000\n"

    def test_json_default_quoted(self, tmp_path):
        schema = _write_schema(tmp_path, {"X": {"type": "json", "default": {"a": 1}}})
        out = tmp_path / ".env"

        CliRunner().invoke(main, ["generate", "--schema", str(schema), "--out", str(out)])

        assert 'X="{\\"a\\":1}"' in out.read_text(encoding="utf-8")


class TestCliDocs:
    def test_docs_stdout(self):
        result = CliRunner().invoke(main, ["docs", "--schema", str(FIXTURES / "env.schema.yaml")])
        assert result.exit_code == 0
        assert "| `APP_PORT` | number | no | `8080` |" in result.output
        assert "Feature flag overrides" in result.output

    def test_docs_to_file(self, tmp_path):
        out = tmp_path / "docs" / "ENV.md"
        result = CliRunner().invoke(main, ["docs", "--schema", str(FIXTURES / "env.schema.json"), "-o", str(out)])
        assert result.exit_code == 0
        assert "| `APP_TOKEN` | string | yes |  |  | tok_123 |" in out.read_text(encoding="utf-8")
