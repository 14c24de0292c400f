"""End-to-end tests for the workspace-tools CLI."""

import json
from unittest.mock import MagicMock

import pytest

from workspace_tools import __version__, package_manager
from workspace_tools.cli import main


@pytest.fixture
def project(workspace_root, collections_dir, monkeypatch):
    """A project directory whose config points at the sample collections."""
    (workspace_root / ".git").mkdir()
    (workspace_root / ".workspace-tools.toml").write_text(
        f'[cli]\ncollection_paths = ["{collections_dir.as_posix()}"]\n'
    )
    monkeypatch.chdir(workspace_root)
    return workspace_root


@pytest.fixture
def npm_check(monkeypatch):
    check = MagicMock()
    monkeypatch.setattr("workspace_tools.cli.new_commands.new.ensure_compatible_npm", check)
    return check


class TestTopLevel:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_shows_help(self, project, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "new" in out
        assert "config" in out


class TestNew:
    """Tests for `workspace-tools new`."""

    def test_creates_workspace(self, project, capsys, npm_check):
        assert main(["new", "my-app", "--skip-install", "--style", "scss"]) == 0

        workspace = json.loads((project / "my-app" / "workspace.json").read_text())
        assert workspace["name"] == "my-app"
        assert workspace["style"] == "scss"
        assert workspace["version"] == __version__
        assert "CREATE my-app/README.md" in capsys.readouterr().out
        npm_check.assert_not_called()

    def test_alias(self, project, npm_check):
        assert main(["n", "other-app", "--directory", "apps/other"]) == 0

        assert (project / "apps" / "other" / "README.md").read_text() == "# other-app\n"
        npm_check.assert_called_once_with(project)

    def test_dry_run(self, project, capsys, npm_check):
        assert main(["new", "my-app", "--dry-run", "--skip-install"]) == 0

        assert not (project / "my-app").exists()
        assert '"--dry-run" option means no changes were made' in capsys.readouterr().out

    def test_existing_files_fail_without_force(self, project, capsys, npm_check):
        (project / "my-app").mkdir()
        (project / "my-app" / "README.md").write_text("mine")

        assert main(["new", "my-app", "--skip-install"]) == 1
        assert "already exists" in capsys.readouterr().out

        assert main(["new", "my-app", "--skip-install", "--force"]) == 0
        assert (project / "my-app" / "README.md").read_text() == "# my-app\n"

    def test_missing_collection(self, project, capsys):
        assert main(["new", "my-app", "--collection", "@missing/gen"]) == 1
        assert "Collection '@missing/gen' cannot be resolved" in capsys.readouterr().err

    def test_outdated_npm(self, project, capsys, monkeypatch):
        monkeypatch.setattr(package_manager, "get_package_manager_version", lambda name, root: "7.4.0")

        assert main(["new", "my-app"]) == 3

        assert "npm version 7.4.0 detected" in capsys.readouterr().err
        assert not (project / "my-app").exists()

    def test_missing_name(self, project, capsys, npm_check):
        assert main(["new", "--skip-install", "--no-interactive"]) == 1
        assert "Missing required option(s): name" in capsys.readouterr().err


class TestConfig:
    """Tests for `workspace-tools config`."""

    def test_show(self, project, capsys):
        assert main(["config", "--show"]) == 0

        out = capsys.readouterr().out
        assert "[cli]" in out
        assert "# from: .workspace-tools.toml" in out
        assert "@schematics/angular" in out

    def test_get(self, project, capsys):
        assert main(["config", "get", "new.interactive"]) == 0
        assert capsys.readouterr().out.strip() == "true"

    def test_works_without_default_collection(self, workspace_root, monkeypatch, capsys):
        (workspace_root / ".git").mkdir()
        monkeypatch.chdir(workspace_root)

        assert main(["config", "--paths"]) == 0
        assert "Config file paths" in capsys.readouterr().out

    def test_invalid_config_falls_back_to_defaults(self, workspace_root, monkeypatch, capsys):
        (workspace_root / ".git").mkdir()
        (workspace_root / ".workspace-tools.toml").write_text('cli = "oops"\n')
        monkeypatch.chdir(workspace_root)

        assert main(["config", "get", "cli.package_manager"]) == 0
        assert "# not set" in capsys.readouterr().out

    def test_init(self, project, capsys, isolated_user_config):
        (project / ".workspace-tools.toml").unlink()

        assert main(["config", "--init"]) == 0
        assert (project / ".workspace-tools.toml").exists()

        assert main(["config", "--init", "--user"]) == 0
        assert isolated_user_config.exists()

        assert main(["config", "--init"]) == 1
        assert "already exists" in capsys.readouterr().err


OPTIONS_FACTORY = '''
import json


def generate(context):
    if context.options.get("fail"):
        raise RuntimeError("generator exploded")
    context.tree.create("options.json", json.dumps(context.options, sort_keys=True))
'''


class TestSchemaOptionsNamedLikeGlobalFlags:
    """Schema options may reuse names of top-level parser flags."""

    @pytest.fixture
    def verbose_project(self, project, collections_dir, make_collection, ng_new_schema):
        ng_new_schema["properties"]["verbose"] = {
            "type": "boolean",
            "alias": "v",
            "description": "Add more details to output logging.",
        }
        ng_new_schema["properties"]["fail"] = {"type": "boolean"}
        make_collection(collections_dir / "@schematics" / "angular", schema=ng_new_schema, factory=OPTIONS_FACTORY)
        return project

    def test_verbose_reaches_generator(self, verbose_project, npm_check):
        assert main(["new", "my-app", "--skip-install", "--verbose"]) == 0

        options = json.loads((verbose_project / "options.json").read_text())
        assert options["verbose"] is True
        assert options["name"] == "my-app"

    def test_short_alias_after_subcommand(self, verbose_project, npm_check):
        assert main(["-v", "new", "my-app", "--skip-install", "-v"]) == 0

        assert json.loads((verbose_project / "options.json").read_text())["verbose"] is True

    def test_generator_failure_still_reports_exit_code(self, verbose_project, capsys, npm_check):
        assert main(["new", "my-app", "--skip-install", "--verbose", "--fail"]) == 1
        assert "generator exploded" in capsys.readouterr().err


class TestMalformedSchema:
    """A broken option schema disables `new` only."""

    @pytest.fixture
    def broken_project(self, project, collections_dir, make_collection, ng_new_schema):
        ng_new_schema["properties"]["name"]["$default"] = {"$source": "argv", "index": "first"}
        make_collection(collections_dir / "@schematics" / "angular", schema=ng_new_schema)
        return project

    def test_config_still_works(self, broken_project, capsys):
        assert main(["config", "--paths"]) == 0
        assert "Config file paths" in capsys.readouterr().out

    def test_new_reports_schema_error(self, broken_project, capsys):
        assert main(["new", "my-app"]) == 1
        assert "invalid argv index" in capsys.readouterr().err
