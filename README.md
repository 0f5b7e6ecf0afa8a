# aifmt

`aifmt` is a command-line tool that asks an AI model to fix, optimise and
optionally comment your source files, then writes the model's code back in
place. Requests go to the OpenRouter chat completions endpoint.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

Settings live in a YAML file named `config.yaml` (or `config.yml`). It is
looked for first in `~/.aifmt/`, then in the current working directory. If
none is found, `~/.aifmt/` is created when missing and `~/.aifmt/config.yaml`
is written with these defaults:

| key                 | default   | used for                                  |
|---------------------|-----------|-------------------------------------------|
| `api_key`           | empty     | bearer token sent to the endpoint         |
| `comments_language` | `Русский` | language of comments added with `-c`      |
| `max_retry`         | `5`       | number of retries for a failed step       |
| `channels`          | `10`      | number of files processed at the same time |

Keys are case-insensitive. Set your API key before formatting anything:

```
aifmt set api_key placeholder
```

Any key can be changed the same way; values given to `set` are stored as
strings (`max_retry` and `channels` are read back as integers):

```
aifmt set comments_language English
aifmt set max_retry 3
```

## Formatting files

```
aifmt fmt -l go main.go
aifmt fmt -l python --model claude-2 "*.py"
aifmt fmt -w -l go "*.go"
```

Options of `aifmt fmt`:

- `-l`, `--language` — programming language of the files (required)
- `-m`, `--model` — model to use (default `deepseek/deepseek-chat:free`)
- `-w`, `--with-context` — read every matched file and send them along as
  project context (only when more than one file was read)
- `-c`, `--comments` — ask the model to comment the code, in
  `comments_language`; otherwise it is told not to add comments
- `-r`, `--report` — write the suggested changes as a JSON array to
  `report_YYYY-MM-DD_HH:MM:SS.json` in the current directory; needs
  `comments_language` to be set
- `-s`, `--skip` — do not retry when reading, formatting or writing fails

Arguments are glob patterns, expanded in sorted order. For each file the
suggested changes are printed with their descriptions and the file is
overwritten with the new code. A failed read, request or write is retried up
to `max_retry` times, waiting one second longer after each attempt; an empty
answer from the model is retried the same way. With `--skip` the file is left
alone instead.

The command exits with status 1 when the API key or the language is missing,
when `--report` is given without a `comments_language`, or when no files are
named.

## Using it as a library

```python
from aifmt.service import format_code

result = format_code(source, "go", "deepseek/deepseek-chat:free", token)
print(result.code)
for update in result.updates:
    print(update.code, update.description)
```

- `aifmt.service.format_code(content, language, model, token, comments=False,
  comments_language="", context=None)` returns a `FormatResult` with `code`
  and a list of `aifmt.entity.Update` records. `build_prompt` and
  `build_dialog` return the text and the list of `aifmt.entity.Message`
  records that are sent; `context` is a sequence of `aifmt.entity.File`.
- `aifmt.api.get_answer` returns the text of the last choice in the reply;
  `aifmt.api.get_json_answer` strips a surrounding ```` ```json ```` fence and
  decodes it. Both raise `aifmt.api.ApiError` on failure.
- `aifmt.config.Config.load(config_dir=None)` reads or creates the
  configuration; `get`, `set` and `save` work on its values and raise
  `aifmt.config.ConfigError` on I/O or parse errors.
- `aifmt.cli.retry_operation(max_retries, op, sleep=time.sleep)` is the retry
  helper used by the command.

## Limits

The endpoint address is fixed to OpenRouter and the temperature to 0.3; neither
can be changed from the command line or the configuration. The model's answer
is used as given: the new code is written over the file without a diff, a
backup or a confirmation step.