"""CLI entrypoints for bwconvert commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import ConverterError
from .logging import configure_logging, get_logger
from .models import (
    ConversionRequest,
    UploadedFile,
    VARIANT_FILE,
    VARIANT_PROJECT,
    VARIANT_REPOSITORY,
)
from .orchestrator import ConversionOrchestrator
from .progress import PROGRESS_STEPS, ProgressStep
from .validation import split_repository_urls


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_output_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        help="Where to write the converted output (defaults to the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bwconvert",
        description="Submit TIBCO BusinessWorks sources for conversion to Spring Boot.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config-file",
        help="Path to .bwconvert.yml or the directory holding it (defaults to the current directory).",
    )
    parser.add_argument(
        "--log-file",
        help="Also append log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the web front-end.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, help="Port to listen on.")

    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert a single TIBCO BW source file.",
    )
    _add_verbose_option(convert_parser, suppress_default=True)
    _add_output_option(convert_parser)
    convert_parser.add_argument("file", help="A .bw, .xml, .java or .properties file.")
    convert_parser.add_argument(
        "--print",
        dest="print_code",
        action="store_true",
        help="Print the generated code instead of writing it to disk.",
    )

    repository_parser = subparsers.add_parser(
        "repository",
        help="Convert sources referenced by repository URLs.",
    )
    _add_verbose_option(repository_parser, suppress_default=True)
    _add_output_option(repository_parser)
    repository_parser.add_argument("urls", nargs="*", help="Source repository URLs.")
    repository_parser.add_argument(
        "--target-git",
        default="",
        help="Repository that should receive the converted project.",
    )
    repository_parser.add_argument(
        "--print",
        dest="print_code",
        action="store_true",
        help="Print the generated code instead of writing it to disk.",
    )

    submit_parser = subparsers.add_parser(
        "submit",
        help="Send a project archive to the conversion backend.",
    )
    _add_verbose_option(submit_parser, suppress_default=True)
    _add_output_option(submit_parser)
    submit_parser.add_argument("archive", help="Project ZIP archive.")
    submit_parser.add_argument("--work-dir", default="", help="Work directory inside the project.")
    submit_parser.add_argument("--config", dest="project_config", help="Conversion configuration file.")
    submit_parser.add_argument(
        "--target-git",
        default="",
        help="Repository that should receive the converted project.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bwconvert commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
    )
    logger = get_logger("cli")

    try:
        config = load_config(Path(args.config_file) if args.config_file else None)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(config, host=args.host, port=args.port)
        return

    try:
        request = _build_request(args)
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")

    orchestrator = ConversionOrchestrator(config)

    def _report(step: ProgressStep) -> None:
        logger.info("[%d/%d] %s", step.id, len(PROGRESS_STEPS), step.label)

    try:
        job = asyncio.run(orchestrator.convert(request, on_step=_report))
    except ConverterError as exc:
        parser.exit(1, _format_notification(exc.notification.title, exc.notification.description))

    notification = job.notification
    if not job.show_output:
        title = notification.title if notification else "Conversion Failed"
        description = notification.description if notification else ""
        parser.exit(1, _format_notification(title, description))

    result = orchestrator.artifacts.fetch(job.result_token)
    orchestrator.artifacts.revoke(job.result_token)

    if getattr(args, "print_code", False) and result.text is not None:
        print(result.text)
        return

    destination = _resolve_output(getattr(args, "output", None), result.filename)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(result.content)
    if notification:
        print(notification.title)
    print(f"Output written to {_relativize(destination)}")


def _build_request(args: argparse.Namespace) -> ConversionRequest:
    if args.command == "convert":
        return ConversionRequest(
            variant=VARIANT_FILE,
            source_file=_read_file(args.file, "text/plain"),
        )
    if args.command == "repository":
        return ConversionRequest(
            variant=VARIANT_REPOSITORY,
            repository_urls=split_repository_urls(args.urls),
            target_git=args.target_git.strip(),
        )
    if args.command == "submit":
        return ConversionRequest(
            variant=VARIANT_PROJECT,
            project_archive=_read_file(args.archive, "application/zip"),
            config_file=_read_file(args.project_config) if args.project_config else None,
            work_dir=args.work_dir.strip(),
            target_git=args.target_git.strip(),
        )
    raise ValueError(f"Unknown command: {args.command}")  # pragma: no cover - argparse enforces choices


def _read_file(raw_path: str, content_type: str = "application/octet-stream") -> UploadedFile:
    path = Path(raw_path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return UploadedFile.from_path(path, content_type=content_type)


def _resolve_output(raw_output: str | None, filename: str) -> Path:
    if not raw_output:
        return Path.cwd() / filename
    output = Path(raw_output).expanduser()
    if output.is_dir():
        return output / filename
    return output


def _format_notification(title: str, description: str) -> str:
    if description:
        return f"{title}: {description}\n"
    return f"{title}\n"


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
