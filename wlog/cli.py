import argparse
import os
import sys

from wlog import diagnostics
from wlog.build import iter_uris_from_clf, iter_uris_from_lines, write_log
from wlog.config import WlogSettings, load_config, parse_wlog_option, settings_from_config
from wlog.diagnostics import log
from wlog.engine import Engine
from wlog.errors import EXIT_OK, EXIT_UNKNOWN, ConfigError, WlogError
from wlog.generator import WlogGenerator
from wlog.reader import LogBuffer, LogReader
from wlog.splitter import split_record


def _show(data: bytes) -> str:
    return data.decode("latin-1").encode("unicode_escape").decode("ascii")


def _resolve_settings(args) -> WlogSettings:
    cfg = {}
    config_path = args.config or os.environ.get("WLOG_CONFIG")
    if config_path:
        cfg = load_config(config_path)
    cfg.setdefault("wlog", {})
    if args.wlog:
        loop, path = parse_wlog_option(args.wlog)
        cfg["wlog"] = dict(cfg["wlog"] or {}, file=path, loop=loop)
    if args.embedded_http_headers:
        cfg["wlog"]["embedded_http_headers"] = True
    if args.add_header:
        cfg["add_header"] = list(cfg.get("add_header") or []) + args.add_header
    if args.num_calls is not None:
        cfg["num_calls"] = args.num_calls
    if args.verbose:
        cfg["verbose"] = max(int(cfg.get("verbose") or 0), args.verbose)
    if not cfg["wlog"].get("file"):
        raise ConfigError("no log file: pass --wlog LOOP,FILE or set wlog.file in --config")
    return settings_from_config(cfg)


def replay(args):
    settings = _resolve_settings(args)
    if settings.loop and settings.num_calls is None:
        raise ConfigError("looping replay never ends on its own: set --num-calls")
    if settings.verbose >= 2 and not args.quiet:
        diagnostics.set_log_level("debug")
    engine = Engine(extra_headers=settings.extra_headers())
    generator = WlogGenerator.from_settings(settings)
    calls = engine.run(generator, num_calls=settings.num_calls)
    for call in calls:
        line = f"{call.call_id}\t{_show(call.target or b'')}"
        if call.headers:
            line += f"\t{_show(call.header_block)}"
        print(line)
    log(f"wlog: issued {len(calls)} calls", "debug")
    return EXIT_OK


def build(args):
    with open(args.input, "rb") as f:
        if args.format == "clf":
            methods = set(args.method) if args.method else None
            uris = iter_uris_from_clf(f, methods=methods)
        else:
            uris = iter_uris_from_lines(f)
        try:
            count = write_log(args.output, uris)
        except ValueError as exc:
            raise WlogError(f"{args.input}: {exc}") from exc
    print(f"wrote {count} records to {args.output}")
    return EXIT_OK


def inspect(args):
    with LogBuffer.open(args.file) as buffer:
        reader = LogReader(buffer)
        total = empty = 0
        for data in reader.iter_records():
            total += 1
            record = split_record(data, args.embedded_http_headers)
            if not record.target:
                empty += 1
                continue
            if args.limit is None or total - empty <= args.limit:
                line = _show(record.target)
                if record.header is not None:
                    line = f"[{_show(record.header)}] {line}"
                print(line)
    print(f"records: {total} empty: {empty} bytes: {os.path.getsize(args.file)}")
    return EXIT_OK


def main(argv=None):
    parser = argparse.ArgumentParser(description="Replay a captured request log as a request stream")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="-v: report each URI, -vv: debug")
    parser.add_argument("--quiet", action="store_true", help="suppress non-error output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="dry-run replay: print the calls a client would issue")
    replay_parser.add_argument("--config", default=None, help="YAML config (default: $WLOG_CONFIG)")
    replay_parser.add_argument("--wlog", default=None, help="LOOP,FILE e.g. y,uris.wlog")
    replay_parser.add_argument("--embedded-http-headers", action="store_true")
    replay_parser.add_argument("--add-header", action="append", default=[], help="extra header, escape grammar")
    replay_parser.add_argument("--num-calls", type=int, default=None)
    replay_parser.set_defaults(func=replay)

    build_parser = subparsers.add_parser("build", help="build a replay log from URIs or a CLF access log")
    build_parser.add_argument("--format", choices=["uris", "clf"], default="uris")
    build_parser.add_argument("--method", action="append", default=[], help="clf: keep only these methods")
    build_parser.add_argument("input")
    build_parser.add_argument("output")
    build_parser.set_defaults(func=build)

    inspect_parser = subparsers.add_parser("inspect", help="list the records of a replay log")
    inspect_parser.add_argument("file")
    inspect_parser.add_argument("--embedded-http-headers", action="store_true")
    inspect_parser.add_argument("--limit", type=int, default=20)
    inspect_parser.set_defaults(func=inspect)

    args = parser.parse_args(argv)

    if args.quiet:
        diagnostics.set_log_level("error")
    elif args.verbose >= 2:
        diagnostics.set_log_level("debug")
    else:
        diagnostics.set_log_level("info")

    try:
        return args.func(args)
    except WlogError as exc:
        print(f"wlog: {exc}", file=sys.stderr)
        return exc.code
    except OSError as exc:
        print(f"wlog: {exc}", file=sys.stderr)
        return EXIT_UNKNOWN


if __name__ == "__main__":
    sys.exit(main())
