from __future__ import annotations

import argparse
import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

DEFAULT_CLI_ARGS = [
    "data/examples/score_input.json",
    "--out",
    "data/output/score.json",
]


def _format_cmd(cmd: list[str]) -> str:
    if os.name == "nt":
        return subprocess.list2cmdline(cmd)
    return shlex.join(cmd)


def _run(cmd: list[str], *, cwd: Path | None = None, env: dict[str, str] | None = None) -> int:
    print(f"+ {_format_cmd(cmd)}")
    completed = subprocess.run(cmd, cwd=cwd or ROOT_DIR, env=env)
    return completed.returncode


def _python_for_tasks() -> str:
    venv_python = ROOT_DIR / ".venv" / ("Scripts/python.exe" if os.name == "nt" else "bin/python")
    return str(venv_python) if venv_python.exists() else sys.executable


def cmd_test(args: argparse.Namespace) -> int:
    passthrough = list(args.pytest_args or [])
    if passthrough and passthrough[0] == "--":
        passthrough = passthrough[1:]
    return _run([_python_for_tasks(), "-m", "pytest", *passthrough])


def cmd_cli(args: argparse.Namespace) -> int:
    passthrough = list(args.cli_args or [])
    if passthrough and passthrough[0] == "--":
        passthrough = passthrough[1:]
    if not passthrough:
        passthrough = list(DEFAULT_CLI_ARGS)
    return _run([_python_for_tasks(), "-m", "legalrisk.cli.main", *passthrough])


def cmd_seed(args: argparse.Namespace) -> int:
    script = "seed_demo.py" if args.demo else "seed_catalog.py"
    return _run([_python_for_tasks(), str(ROOT_DIR / "scripts" / script)])


def cmd_generate(args: argparse.Namespace) -> int:
    cmd = [_python_for_tasks(), str(ROOT_DIR / "scripts" / "generate_catalog.py"), args.kind]
    if args.delay is not None:
        cmd += ["--delay", str(args.delay)]
    return _run(cmd)


def cmd_web(args: argparse.Namespace) -> int:
    if not (ROOT_DIR / "app" / "main.py").exists():
        print("error: app/main.py not found.", file=sys.stderr)
        return 2

    env_example = ROOT_DIR / ".env.example"
    env_file = ROOT_DIR / ".env"
    if not env_file.exists() and env_example.exists():
        shutil.copyfile(env_example, env_file)
        print("created .env from .env.example")

    print(f"starting web app at http://{args.host}:{args.port}")
    cmd = [
        _python_for_tasks(),
        "-m",
        "uvicorn",
        "app.main:app",
        "--host",
        args.host,
        "--port",
        str(args.port),
    ]
    if args.reload:
        cmd.append("--reload")
    return _run(cmd, env=os.environ.copy())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Task runner for LegalRisk.")
    sub = parser.add_subparsers(dest="command", required=True)

    test_parser = sub.add_parser("test", help="Run pytest.")
    test_parser.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Optional pytest args.")
    test_parser.set_defaults(func=cmd_test)

    cli_parser = sub.add_parser("cli", help="Run the legalrisk-score CLI.")
    cli_parser.add_argument("cli_args", nargs=argparse.REMAINDER, help="Args forwarded to cli.main.")
    cli_parser.set_defaults(func=cmd_cli)

    seed_parser = sub.add_parser("seed", help="Seed the catalog (or a demo user with --demo).")
    seed_parser.add_argument("--demo", action="store_true", help="Seed the demo user and example risks.")
    seed_parser.set_defaults(func=cmd_seed)

    generate_parser = sub.add_parser("generate", help="Regenerate seed files with DeepSeek.")
    generate_parser.add_argument("kind", choices=["protocols", "scenarios", "wizard", "all"])
    generate_parser.add_argument("--delay", type=float, default=None, help="Seconds between model calls.")
    generate_parser.set_defaults(func=cmd_generate)

    web_parser = sub.add_parser("web", help="Run the FastAPI web app.")
    web_parser.add_argument("--host", default=DEFAULT_HOST, help="Web host (default: 127.0.0.1).")
    web_parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Web port (default: 8000).")
    web_parser.add_argument("--reload", action="store_true", help="Enable uvicorn auto-reload.")
    web_parser.set_defaults(func=cmd_web)

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
