"""Scaffold a commandbot configuration directory."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.config import BOT_FILE, DEFAULT_CONFIG_DIR, ENV_FILE_NAME

LOGGER = logging.getLogger(__name__)

CONFIG_FILES = (ENV_FILE_NAME, BOT_FILE)


def build_bot_yaml(account: str, masters: List[str], public: bool = False) -> Dict[str, Any]:
    return {
        "account": account,
        "masters": masters,
        "public": public,
        "presence": "chat",
        "status": "Ready for commands",
        "priority": 0,
        "poll_interval": 1.0,
        "handler_timeout": 30,
    }


def generate_env_file(path: Path) -> None:
    """Generate a .env template; secrets are filled in by hand."""
    lines = [
        "# commandbot configuration",
        "# Generated by commandbot init",
        f"# {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "# Transport credentials (Slack bot token + Socket Mode app token)",
        "BOT_CREDENTIAL=",
        "SLACK_APP_TOKEN=",
        "",
        "# Logging (optional)",
        "# Standard logging levels: DEBUG, INFO, WARNING, ERROR",
        "LOG_LEVEL=INFO",
        "",
    ]
    path.write_text("\n".join(lines), encoding="utf-8")
    # Set restrictive permissions
    path.chmod(0o600)


def generate_bot_yaml(path: Path, data: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def backup_existing(target_dir: Path) -> List[str]:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_dir = target_dir / f"backup_{timestamp}"

    files_backed_up = []
    for file in CONFIG_FILES:
        src = target_dir / file
        if src.exists():
            backup_dir.mkdir(exist_ok=True)
            shutil.copy2(src, backup_dir / file)
            files_backed_up.append(file)

    if files_backed_up:
        print(f"Backed up existing files to: {backup_dir}")
    return files_backed_up


def run_init_command(args) -> int:
    """
    Entry point for ``commandbot init``.

    Returns:
        Exit status code (0 for success, 1 for error)
    """
    target_dir = Path(args.config_dir).expanduser() if args.config_dir else DEFAULT_CONFIG_DIR
    masters = [m.strip() for m in (args.masters or "").split(",") if m.strip()]
    if not args.account or not masters:
        print("Error: --account and --masters are required.")
        return 1

    existing = [file for file in CONFIG_FILES if (target_dir / file).exists()]
    if existing and not args.force:
        print(f"Configuration already exists in {target_dir}: {', '.join(existing)}")
        print("Re-run with --force to overwrite (existing files are backed up).")
        return 1

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        if existing:
            backup_existing(target_dir)
        print(f"Creating configuration in: {target_dir}")
        generate_env_file(target_dir / ENV_FILE_NAME)
        generate_bot_yaml(target_dir / BOT_FILE, build_bot_yaml(args.account, masters, args.public))
    except OSError as e:
        print(f"Error: Failed to write configuration: {e}")
        return 1

    print("\nNext steps:")
    print(f"  1. Fill in BOT_CREDENTIAL and SLACK_APP_TOKEN in {target_dir / ENV_FILE_NAME}")
    print(f"  2. Review {target_dir / BOT_FILE}")
    print("  3. Start the bot:")
    print("     commandbot run")
    return 0
