import os

import pytest

from kube_manager.commands.environments import current_context, list_environments
from kube_manager.errors import KubeManagerError
from kube_manager.main import app

KUBECONFIG_TEMPLATE = """\
apiVersion: v1
kind: Config
clusters:
- name: {name}
  cluster:
    server: https://{name}.example.com
users:
- name: {name}-admin
  user:
    token: abc123
contexts:
- name: {name}
  context:
    cluster: {name}
    user: {name}-admin
current-context: {name}
"""


def write_environment(directory, name, mtime):
    path = directory / f"{name}.yaml"
    path.write_text(KUBECONFIG_TEMPLATE.format(name=name))
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def config_dir(tmp_path):
    directory = tmp_path / "kube"
    directory.mkdir()
    write_environment(directory, "staging", 1_700_000_000)
    write_environment(directory, "prod", 1_700_000_100)
    return directory


def switch_args(config_dir, kubeconfig):
    return ["-m", "switch-env", "--config-dir", str(config_dir), "--kubeconfig", str(kubeconfig)]


def test_list_environments_numbers_oldest_first(config_dir):
    environments = list_environments(config_dir)
    assert {number: path.stem for number, path in environments.items()} == {1: "staging", 2: "prod"}


def test_list_environments_ignores_other_files(config_dir):
    (config_dir / "config").write_text("not an environment")
    (config_dir / "notes.txt").write_text("")
    assert len(list_environments(config_dir)) == 2


def test_switch_env(runner, config_dir, tmp_path):
    kubeconfig = tmp_path / "active" / "config"

    result = runner.invoke(app, switch_args(config_dir, kubeconfig), input="2\n")

    assert result.exit_code == 0
    assert "1) staging" in result.output
    assert "2) prod" in result.output
    assert "Switched to environment: prod" in result.output
    assert kubeconfig.read_text() == (config_dir / "prod.yaml").read_text()


@pytest.mark.parametrize("choice", ["0", "3", "-1", "prod", ""])
def test_switch_env_rejects_invalid_selection(runner, config_dir, tmp_path, choice):
    kubeconfig = tmp_path / "config"
    kubeconfig.write_text("original")

    result = runner.invoke(app, switch_args(config_dir, kubeconfig), input=f"{choice}\n")

    assert result.exit_code == 1
    assert "Invalid selection" in result.output
    assert kubeconfig.read_text() == "original"


def test_switch_env_without_environments(runner, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()

    result = runner.invoke(app, switch_args(empty, tmp_path / "config"), input="1\n")

    assert result.exit_code == 1
    assert "No environment files" in result.output
    assert not (tmp_path / "config").exists()


def test_switch_env_does_not_need_an_app_or_cluster(runner, config_dir, tmp_path, core_api):
    result = runner.invoke(app, switch_args(config_dir, tmp_path / "config"), input="1\n")

    assert result.exit_code == 0
    core_api.assert_not_called()


def test_verify_env(runner, config_dir):
    kubeconfig = config_dir / "prod.yaml"

    result = runner.invoke(app, ["-m", "verify-env", "--kubeconfig", str(kubeconfig)])

    assert result.exit_code == 0
    assert "The current environment is prod" in result.output


def test_verify_env_after_switch(runner, config_dir, tmp_path):
    kubeconfig = tmp_path / "config"
    runner.invoke(app, switch_args(config_dir, kubeconfig), input="1\n")

    assert current_context(kubeconfig) == "staging"


def test_verify_env_missing_kubeconfig(runner, tmp_path):
    result = runner.invoke(app, ["-m", "verify-env", "--kubeconfig", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "Error: Kubeconfig" in result.output


def test_current_context_requires_current_context_key(tmp_path):
    kubeconfig = tmp_path / "config"
    kubeconfig.write_text(KUBECONFIG_TEMPLATE.format(name="dev").replace("current-context: dev\n", ""))

    with pytest.raises(KubeManagerError, match="No current-context set"):
        current_context(kubeconfig)


def test_verify_env_reports_context_missing_from_contexts_list(runner, tmp_path):
    kubeconfig = tmp_path / "config"
    kubeconfig.write_text(KUBECONFIG_TEMPLATE.format(name="other").replace("current-context: other", "current-context: prod"))

    result = runner.invoke(app, ["-m", "verify-env", "--kubeconfig", str(kubeconfig)])

    assert result.exit_code == 0
    assert "The current environment is prod" in result.output


@pytest.mark.parametrize(
    "content, message",
    [
        ("current-context: [unclosed\n", "Could not parse"),
        ("", "No current-context set"),
        ("- just\n- a list\n", "No current-context set"),
        ("current-context:\n", "No current-context set"),
    ],
)
def test_verify_env_unreadable_kubeconfig(runner, tmp_path, content, message):
    kubeconfig = tmp_path / "config"
    kubeconfig.write_text(content)

    result = runner.invoke(app, ["-m", "verify-env", "--kubeconfig", str(kubeconfig)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert message in result.output


def test_switch_env_uses_first_entry_of_kubeconfig_list(runner, config_dir, tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"

    result = runner.invoke(
        app,
        ["-m", "switch-env", "--config-dir", str(config_dir)],
        input="2\n",
        env={"KUBECONFIG": f"{first}{os.pathsep}{second}"},
    )

    assert result.exit_code == 0
    assert first.read_text() == (config_dir / "prod.yaml").read_text()
    assert not second.exists()
    assert sorted(path.name for path in tmp_path.iterdir()) == ["first", "kube"]
