"""Command line interface: format files with a model and edit settings."""

from __future__ import annotations

import argparse
import glob
import json
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Sequence, TypeVar

from aifmt.api import ApiError
from aifmt.config import Config, ConfigError
from aifmt.entity import File, Update
from aifmt.service import FormatResult, format_code

T = TypeVar("T")

DEFAULT_MODEL = "deepseek/deepseek-chat:free"

_REPORT_LOCK = threading.Lock()


def retry_operation(
    max_retries: int,
    op: Callable[[], T],
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """Call op until it succeeds, waiting one second longer after each failure."""
    last_error: Exception | None = None
    for attempt in range(1, max_retries + 1):
        try:
            return op()
        except Exception as exc:
            last_error = exc
            print(f"Attempt {attempt} of {max_retries}: {exc}")
            sleep(attempt)
    raise RuntimeError(
        f"maximum number of attempts reached ({max_retries}): {last_error}"
    ) from last_error


def expand_patterns(patterns: Iterable[str]) -> Iterator[str]:
    """Yield the paths matched by each glob pattern, in sorted order per pattern."""
    for pattern in patterns:
        yield from sorted(glob.glob(pattern))


def load_context(patterns: Iterable[str]) -> list[File]:
    """Read every file matched by the patterns; unreadable files are skipped."""
    context = []
    for path in expand_patterns(patterns):
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Error reading context file {path}: {exc}")
            continue
        context.append(File(path=path, content=content))
    return context


def report_name(now: datetime | None = None) -> str:
    """Return the report file name for the given moment."""
    return (now or datetime.now()).strftime("report_%Y-%m-%d_%H:%M:%S.json")


def write_report(updates: Iterable[Update], path: str | Path) -> None:
    """Write the updates as a JSON array to the report file."""
    data = json.dumps(
        [upd.to_dict() for upd in updates], ensure_ascii=False, separators=(",", ":")
    )
    with _REPORT_LOCK:
        Path(path).write_bytes(data.encode("utf-8"))


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class _FormatJob:
    token: str
    language: str
    model: str
    with_context: bool
    comments: bool
    comments_language: str
    report: bool
    skip: bool
    max_retries: int
    context: list[File]
    report_path: str
    sleep: Callable[[float], Any]
    all_updates: list[Update] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def _format(self, content: str) -> FormatResult:
        return format_code(
            content,
            self.language,
            self.model,
            self.token,
            self.comments,
            self.comments_language,
            self.context,
        )

    def _retry(self, op: Callable[[], T], what: str, path: str) -> T | None:
        try:
            return retry_operation(self.max_retries, op, self.sleep)
        except RuntimeError as exc:
            print(f"Could not {what} {path} after {self.max_retries} attempts: {exc}")
            return None

    def process(self, path: str) -> None:
        print(
            f"Processing {path} (Language: {self.language}, Model: {self.model}, "
            f"Context: {str(self.with_context).lower()})..."
        )
        target = Path(path)

        def read() -> str:
            return target.read_text(encoding="utf-8")

        try:
            content = read()
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Error reading file {path}: {exc}")
            if self.skip:
                return
            print("Retrying to read the file...")
            content = self._retry(read, "read file", path)
            if content is None:
                return

        def fmt() -> FormatResult:
            return self._format(content)

        try:
            result = fmt()
        except ApiError as exc:
            print(f"Error formatting {path}: {exc}")
            if self.skip:
                return
            print("Retrying to format...")
            result = self._retry(fmt, "format file", path)
            if result is None:
                return

        if not result.code:
            print("Error: the AI answer is empty.")
            if self.skip:
                return
            print("Retrying to format because of the empty answer...")
            count = 0
            while not result.code and count < self.max_retries:
                count += 1
                try:
                    result = fmt()
                except ApiError as exc:
                    print(f"Attempt {count}: formatting error: {exc}")
                    continue
                if result.code:
                    break
                print(f"Attempt {count}: the AI answer is still empty")
                self.sleep(count)
            if not result.code:
                print(
                    f"Could not get a non-empty answer for file {path} "
                    f"after {self.max_retries} attempts"
                )
                return

        for upd in result.updates:
            upd.path = path
            print(f"{path}:\n```{self.language}\n{upd.code}\n```\n{upd.description}\n")

        data = result.code.encode("utf-8")

        def write() -> None:
            target.write_bytes(data)

        try:
            write()
        except OSError as exc:
            print(f"Error writing to {path}: {exc}")
            if self.skip:
                return
            print("Retrying to write the file...")
            if self._retry(write, "write file", path) is None and not target.exists():
                return

        print(f"File {path} updated successfully")

        if self.report:
            with self.lock:
                self.all_updates.extend(result.updates)
                try:
                    write_report(self.all_updates, self.report_path)
                except OSError as exc:
                    print(f"Error writing to {self.report_path}: {exc}")
                    return
            print(f"Formatting report written to {self.report_path}")


def _build_parser() -> tuple[argparse.ArgumentParser, argparse.ArgumentParser]:
    parser = argparse.ArgumentParser(
        prog="aifmt",
        description="A command line tool that uses AI to format and improve code.",
    )
    sub = parser.add_subparsers(dest="command")

    fmt_parser = sub.add_parser(
        "fmt",
        help="format code with AI",
        description="Format one or more code files using AI.",
    )
    fmt_parser.add_argument("files", nargs="*", help="files or glob patterns")
    fmt_parser.add_argument("-l", "--language", default="", help="programming language of the files")
    fmt_parser.add_argument("-m", "--model", default=DEFAULT_MODEL, help="AI model used for formatting")
    fmt_parser.add_argument(
        "-w", "--with-context", action="store_true",
        help="use the other files as context while formatting",
    )
    fmt_parser.add_argument(
        "-c", "--comments", action="store_true",
        help="add comments to the code in the configured language",
    )
    fmt_parser.add_argument(
        "-r", "--report", action="store_true", help="write formatting results to a file"
    )
    fmt_parser.add_argument(
        "-s", "--skip", action="store_true", help="do not retry when processing fails"
    )

    set_parser = sub.add_parser(
        "set", help="set a configuration value", description="Set or update a configuration value."
    )
    set_parser.add_argument("key")
    set_parser.add_argument("value")
    return parser, fmt_parser


def _run_fmt(args: argparse.Namespace, config: Config, fmt_parser: argparse.ArgumentParser) -> int:
    token = str(config.get("api_key") or "")
    if not token:
        print("API token is not configured. Run 'aifmt set api_key <token>' first.")
        return 1
    if not args.language:
        print("Error: programming language is not specified")
        return 1

    max_retries = _as_int(config.get("max_retry"))
    comments_language = str(config.get("comments_language") or "")
    if args.report and not comments_language:
        print("Comments language is not configured. Run 'aifmt set comments_language <language>' first.")
        return 1
    if not args.files:
        print("Error: no files to process")
        fmt_parser.print_help()
        return 1

    context: list[File] = []
    if args.with_context:
        context = load_context(args.files)
        print(f"Loaded {len(context)} files for context")

    job = _FormatJob(
        token=token,
        language=args.language,
        model=args.model,
        with_context=args.with_context,
        comments=args.comments,
        comments_language=comments_language,
        report=args.report,
        skip=args.skip,
        max_retries=max_retries,
        context=context,
        report_path=report_name(),
        sleep=time.sleep,
    )
    paths = list(expand_patterns(args.files))
    workers = max(1, _as_int(config.get("channels"), 10))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(job.process, paths))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    parser, fmt_parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.load()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.command == "fmt":
        return _run_fmt(args, config, fmt_parser)
    if args.command == "set":
        config.set(args.key, args.value)
        try:
            config.save()
        except ConfigError as exc:
            print(f"Error saving configuration: {exc}")
            return 1
        print(f"Value '{args.value}' set for key '{args.key}'")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())