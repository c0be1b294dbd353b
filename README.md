# booster

Building blocks for bootstrapping a machine from a YAML description.

booster loads and checks a bootstrap file. It provides idempotent tasks that
create directories, set global git configuration, pin toolchains with mise
and write macOS defaults. A sequential executor runs those tasks and
records each outcome as done, skipped or failed. Every task checks the
current state first and changes only what differs.

## Installation

```
pip install .
pip install ".[test]"   # with pytest, to run the test suite
```

## The configuration file

```yaml
version: "1"
profiles:
  - personal
  - work
variables:
  Email:
    prompt: "Your email address"
    default: "user@example.com"
tasks:
  - action: dir.create
    args:
      - ~/.config/nvim
      - ~/.local/share/nvim
  - action: dir.create
    when:
      os: ["arch", "darwin"]
      profile: work
    args:
      - ~/work
  - action: git.config
    args:
      - key: user.email
        prompt: "What is your email for git commits?"
      - key: init.defaultBranch
        value: main
  - action: mise.use
    args:
      - go@1.22.0
      - node@20.10.0
  - action: set.darwin.defaults
    args:
      file: macos-defaults.yaml
```

`booster.config.load(path)` reads this file and returns a `Config`. A leading
`~/` in the path is expanded. The `Config` has these fields:

- `version`: a string.
- `tasks`: a list of `TaskSpec`, each with `action`, the raw `args` and an
  optional `When`.
- `profiles`: a list, or `None` when the file does not give one.
- `variables`: a dict of `VariableDef` with `prompt` and `default`, or `None`.

A `when` field such as `os` or `profile` accepts a single string or a list of
strings. `load` raises `ConfigError` in these cases:

- the file cannot be read;
- the YAML is malformed;
- `version` is missing or is not `"1"`;
- a task has an empty `action`.

## Tasks

Every task is a `booster.tasks.core.Task` with `name()`, `needs_sudo()` and
`run()`. `run()` returns a `Result`, which has these fields:

- `status`: a `Status`, one of `PENDING`, `DONE`, `SKIPPED` or `FAILED`.
- `message`.
- `error`: an exception, or `None`.
- `output`: text captured from the commands the task ran.
- `duration`: in seconds.

A task reports failure in its `Result`; it does not raise.

Each factory below turns the `args` of one configuration entry into a list of
tasks. When the arguments are malformed, a factory raises `TaskArgsError`,
and the message gives the 1-based position of the bad entry.

| Factory | Task | What it does |
| --- | --- | --- |
| `booster.tasks.dir.new_dir_create(args)` | `DirCreate` | Creates each listed directory, with its parents. |
| `booster.tasks.git_config.new_git_config(runner, prompter)` | `GitConfig` | Sets `git config --global` keys. |
| `booster.tasks.mise_use.new_mise_use_factory(runner=None)` | `MiseUse` | Runs `mise use --global tool@version` for tools not at that version. |
| `booster.tasks.darwin_defaults.new_darwin_defaults_factory(runner=None, os_name="", config_dir="")` | `DarwinDefaults` | Runs `defaults write` for settings that differ; skipped unless `os_name` is `"darwin"`. |

`GitConfig` handles each item as follows:

- An item with a `value` is written whenever the current value differs.
- An item with only a `prompt` is asked for through the `Prompter`, and only
  when the key is not yet set.
- The task fails if a prompt is needed and no prompter was given.

The file given to `set.darwin.defaults` is resolved against `config_dir`
unless it starts with `/` or `~`. It looks like this, with `type` one of
`bool`, `int`, `float` or `string`:

```yaml
defaults:
  - domain: com.apple.finder
    key: AppleShowAllFiles
    type: bool
    value: true
```

`booster.tasks.core.parse_source_target_args(args)` parses lists of
`{source, target}` mappings into `SourceTarget` pairs.

## Conditions

`booster.condition.SystemDetector().detect()` returns a `Context`:

- On macOS its `os` is `darwin`.
- On Linux it is the `ID` from `/etc/os-release` (`arch`, `ubuntu`,
  `fedora`, …).
- Otherwise it is the platform name.

An `Evaluator` checks a `Condition` against a `Context`:

- Within one field, the values are alternatives.
- All non-empty fields must match.
- `failure_reason()` explains a mismatch, for example
  `os=ubuntu, want arch or darwin`.

`ConditionalTask(task, condition, evaluator)` returns a skipped result when
the condition does not hold.

## Putting it together

```python
from booster import config
from booster.condition import Condition, Context, Evaluator, SystemDetector
from booster.executor import Executor
from booster.tasks.core import ConditionalTask
from booster.tasks.darwin_defaults import new_darwin_defaults_factory
from booster.tasks.dir import new_dir_create
from booster.tasks.git_config import Prompter, new_git_config
from booster.tasks.mise_use import new_mise_use_factory


class ConsolePrompter(Prompter):
    def prompt(self, prompt_text):
        return input(prompt_text + " ")


cfg = config.load("~/dotfiles/bootstrap.yaml")
ctx = Context(os=SystemDetector().detect().os, profile="work")
evaluator = Evaluator(ctx)

factories = {
    "dir.create": new_dir_create,
    "git.config": new_git_config(None, ConsolePrompter()),
    "mise.use": new_mise_use_factory(),
    "set.darwin.defaults": new_darwin_defaults_factory(
        os_name=ctx.os, config_dir="~/dotfiles"
    ),
}

tasks = []
for spec in cfg.tasks:
    for task in factories[spec.action](spec.args):
        if spec.when is not None:
            cond = Condition(os=spec.when.os, profile=spec.when.profile)
            task = ConditionalTask(task, cond, evaluator)
        tasks.append(task)

executor = Executor(tasks)
while (result := executor.run_next()) is not None:
    print(result.status.value, result.message)
    if result.status.name == "FAILED":
        executor.abort()

print(executor.summary(), f"{executor.elapsed_time():.1f}s")
```

`Executor.run_next()` returns `None` once every task has run or after
`abort()`. The `Summary` counts done, skipped, failed and pending tasks.

## Commands and output

Tasks run external programs through a `booster.cmdexec.Runner`:

- `RealRunner` returns the combined output of a command and raises
  `CommandError` on a non-zero exit.
- `MockRunner` records every call in `calls` and answers from `run_func` and
  `look_path_func`, so tasks can be tested without touching the system.

To watch output as it is produced, pass a `booster.logstream.ChannelWriter`
to `with_writer()`. Every command run by `RealRunner` inside that block also
writes to it. Iterate over the writer to receive complete lines. `log(msg)`
writes a line to the current writer, if there is one.

## What booster does not do

- There is no `booster` command. The package is a library, and a program
  that uses it decides which action names map to which factories, as in the
  example above.
- There is no interactive progress screen.
- There are no tasks for installing system packages or package managers,
  creating symlinks or rendering templates.
- `profiles` and `variables` are parsed but not acted on. Nothing checks a
  chosen profile against the list, prompts for variables or stores their
  values.
- Nothing asks for or caches sudo credentials. `needs_sudo()` is reported
  by each task (all current tasks return `False`), and acting on it is left
  to the caller.