from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from booster.cmdexec import CommandError, MockRunner
from booster.tasks.core import Status, TaskArgsError
from booster.tasks.git_config import (
    GitConfig,
    GitConfigItem,
    Prompter,
    new_git_config,
    parse_git_config_args,
)


@dataclass
class MockPrompter(Prompter):
    prompt_func: Callable[[str], str] | None = None
    calls: list[str] = field(default_factory=list)

    def prompt(self, prompt_text: str) -> str:
        self.calls.append(prompt_text)
        if self.prompt_func is not None:
            return self.prompt_func(prompt_text)
        return ""


def fail(name, *args, output=b""):
    raise CommandError(name, args, 1, output)


def missing_then_set(name, *args):
    if name == "git" and len(args) == 4 and args[0] == "config" and args[1] == "--global":
        if args[2] == "--get":
            fail(name, *args)
        return b""
    raise RuntimeError("unexpected command")


def test_skips_when_value_already_set():
    def run(name, *args):
        if name == "git" and len(args) == 4 and args[3] == "init.defaultBranch":
            return b"main\n"
        raise RuntimeError("unexpected command")

    runner = MockRunner(run_func=run)
    prompter = MockPrompter()
    task = GitConfig(runner, prompter, [GitConfigItem("init.defaultBranch", value="main")])

    result = task.run()

    assert result.status is Status.SKIPPED
    assert result.message == "all keys already configured"
    assert len(runner.calls) == 1
    assert runner.calls[0].name == "git"
    assert runner.calls[0].args == ("config", "--global", "--get", "init.defaultBranch")
    assert prompter.calls == []


def test_sets_new_value_when_key_missing():
    runner = MockRunner(run_func=missing_then_set)
    task = GitConfig(runner, MockPrompter(), [GitConfigItem("init.defaultBranch", value="main")])

    result = task.run()

    assert result.status is Status.DONE
    assert result.message == "configured 1 keys"
    assert [c.args for c in runner.calls] == [
        ("config", "--global", "--get", "init.defaultBranch"),
        ("config", "--global", "init.defaultBranch", "main"),
    ]


def test_updates_value_when_different():
    def run(name, *args):
        if args[2] == "--get":
            return b"master\n"
        return b""

    runner = MockRunner(run_func=run)
    task = GitConfig(runner, MockPrompter(), [GitConfigItem("init.defaultBranch", value="main")])

    result = task.run()

    assert result.status is Status.DONE
    assert result.message == "configured 1 keys"
    assert runner.calls[1].args == ("config", "--global", "init.defaultBranch", "main")


def test_skips_when_key_exists_and_no_explicit_value():
    def run(name, *args):
        if args[3] == "user.name":
            return b"Existing User\n"
        raise RuntimeError("unexpected command")

    runner = MockRunner(run_func=run)
    prompter = MockPrompter()
    task = GitConfig(runner, prompter, [GitConfigItem("user.name", prompt="What is your name?")])

    result = task.run()

    assert result.status is Status.SKIPPED
    assert result.message == "all keys already configured"
    assert len(runner.calls) == 1
    assert prompter.calls == []


def test_skips_when_no_prompt_and_no_value():
    runner = MockRunner(run_func=missing_then_set)
    task = GitConfig(runner, MockPrompter(), [GitConfigItem("user.name")])

    result = task.run()

    assert result.status is Status.SKIPPED
    assert result.message == "all keys already configured"
    assert len(runner.calls) == 1


def test_empty_items():
    runner = MockRunner()
    task = GitConfig(runner, MockPrompter(), [])

    result = task.run()

    assert result.status is Status.SKIPPED
    assert result.message == "no items to configure"
    assert runner.calls == []


def test_prompts_when_key_missing():
    runner = MockRunner(run_func=missing_then_set)
    prompter = MockPrompter(prompt_func=lambda text: "John Doe")
    task = GitConfig(
        runner, prompter, [GitConfigItem("user.name", prompt="What is your name for git commits?")]
    )

    result = task.run()

    assert result.status is Status.DONE
    assert result.message == "configured 1 keys"
    assert prompter.calls == ["What is your name for git commits?"]
    assert len(runner.calls) == 2
    assert runner.calls[1].args == ("config", "--global", "user.name", "John Doe")


def test_does_not_prompt_with_explicit_value():
    runner = MockRunner(run_func=missing_then_set)
    prompter = MockPrompter()
    task = GitConfig(
        runner, prompter, [GitConfigItem("user.name", value="Jane Doe", prompt="What is your name?")]
    )

    result = task.run()

    assert result.status is Status.DONE
    assert result.message == "configured 1 keys"
    assert prompter.calls == []
    assert runner.calls[1].args == ("config", "--global", "user.name", "Jane Doe")


def test_fails_when_prompt_cancelled():
    def cancel(text):
        raise KeyError("user cancelled")

    runner = MockRunner(run_func=missing_then_set)
    prompter = MockPrompter(prompt_func=cancel)
    task = GitConfig(runner, prompter, [GitConfigItem("user.name", prompt="What is your name?")])

    result = task.run()

    assert result.status is Status.FAILED
    assert "prompt for user.name" in str(result.error)
    assert len(prompter.calls) == 1


def test_fails_when_prompter_not_configured():
    runner = MockRunner(run_func=missing_then_set)
    task = GitConfig(runner, None, [GitConfigItem("user.name", prompt="What is your name?")])

    result = task.run()

    assert result.status is Status.FAILED
    assert "no prompter configured" in str(result.error)


def test_handles_multiple_items():
    def run(name, *args):
        if args[2] != "--get":
            return b""
        if args[3] == "user.name":
            return b"John Doe\n"
        fail(name, *args)

    def answer(text):
        if text == "What is your email?":
            return "john@example.com"
        raise RuntimeError("unexpected prompt")

    runner = MockRunner(run_func=run)
    prompter = MockPrompter(prompt_func=answer)
    task = GitConfig(
        runner,
        prompter,
        [
            GitConfigItem("user.name", prompt="What is your name?"),
            GitConfigItem("user.email", prompt="What is your email?"),
            GitConfigItem("init.defaultBranch", value="main"),
        ],
    )

    result = task.run()

    assert result.status is Status.DONE
    assert result.message == "configured 2 keys (skipped 1)"
    assert len(prompter.calls) == 1
    assert len(runner.calls) == 5
    assert runner.calls[2].args == ("config", "--global", "user.email", "john@example.com")


def test_fails_when_git_command_fails():
    def run(name, *args):
        if args[2] == "--get":
            fail(name, *args)
        fail(name, *args, output=b"permission denied")

    task = GitConfig(MockRunner(run_func=run), MockPrompter(), [GitConfigItem("user.name", value="John Doe")])

    result = task.run()

    assert result.status is Status.FAILED
    assert "set user.name" in str(result.error)
    assert result.output == "permission denied"


def test_error_output_has_no_leading_newline():
    def run(name, *args):
        if args[2] == "--get":
            fail(name, *args)
        fail(name, *args, output=b"error output")

    task = GitConfig(MockRunner(run_func=run), MockPrompter(), [GitConfigItem("user.name", value="test")])

    result = task.run()

    assert result.status is Status.FAILED
    assert not result.output.startswith("\n")
    assert result.output == "error output"


@pytest.mark.parametrize(
    "items, expected",
    [
        ([GitConfigItem("user.name")], "configure git: user.name"),
        (
            [GitConfigItem("user.name"), GitConfigItem("user.email"), GitConfigItem("init.defaultBranch")],
            "configure git: user.name, user.email, init.defaultBranch",
        ),
        ([], "configure git: (none)"),
    ],
)
def test_name(items, expected):
    assert GitConfig(items=items).name() == expected


def test_factory_valid_args():
    factory = new_git_config(MockRunner(), MockPrompter())
    tasks = factory(
        [
            {"key": "user.name", "prompt": "What is your name?"},
            {"key": "user.email", "value": "test@example.com"},
        ]
    )

    assert len(tasks) == 1
    task = tasks[0]
    assert isinstance(task, GitConfig)
    assert task.items == [
        GitConfigItem("user.name", value="", prompt="What is your name?"),
        GitConfigItem("user.email", value="test@example.com", prompt=""),
    ]


def test_factory_only_key():
    tasks = new_git_config(MockRunner(), MockPrompter())([{"key": "user.name"}])
    assert len(tasks) == 1
    assert tasks[0].items == [GitConfigItem("user.name")]


def test_factory_empty_list():
    assert new_git_config(MockRunner(), MockPrompter())([]) == []


@pytest.mark.parametrize(
    "args, fragments",
    [
        ("not a list", ["must be a list"]),
        (["string instead of map"], ["arg 1", "must be a map"]),
        ([{"value": "test"}], ["arg 1", "key", "required"]),
        ([{"key": ""}], ["arg 1", "key"]),
    ],
)
def test_factory_invalid_args(args, fragments):
    factory = new_git_config(MockRunner(), MockPrompter())
    with pytest.raises(TaskArgsError) as info:
        factory(args)
    for fragment in fragments:
        assert fragment in str(info.value)


def test_error_index_first_arg():
    with pytest.raises(TaskArgsError) as info:
        parse_git_config_args([{"value": "no key provided"}])
    assert "arg 1:" in str(info.value)
    assert "arg 0:" not in str(info.value)


def test_error_index_second_arg():
    with pytest.raises(TaskArgsError, match="arg 2:"):
        parse_git_config_args([{"key": "valid.key"}, {"value": "missing key"}])