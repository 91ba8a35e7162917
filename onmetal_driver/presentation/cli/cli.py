"""
CLI Module

Architectural Intent:
- Command-line interface for exercising the machine driver by hand
- Delegates to the MachineDriver via the composition root
- Supports --verbose/--debug flags for log level control
- Every classified error is printed with its status code; exit status is 1
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from onmetal_driver.composition_root import start_container
from onmetal_driver.domain.entities.machine_request import (
    CreateMachineRequest,
    DeleteMachineRequest,
    GetMachineStatusRequest,
    ListMachinesRequest,
    Machine,
    MachineClass,
    Secret,
)
from onmetal_driver.domain.value_objects.status import MachineError, is_retryable_soon
from onmetal_driver.infrastructure.config import load_config
from onmetal_driver.infrastructure.logging import configure_logging


def _read_object(path: str) -> dict:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a JSON object, got {type(data).__name__}")
    return data


def load_machine_class(path: str) -> MachineClass:
    """Read a machine class from a JSON file with name, provider, providerSpec."""
    data = _read_object(path)
    return MachineClass(
        name=data.get("name", Path(path).stem),
        provider=data.get("provider", ""),
        provider_spec=data.get("providerSpec") or {},
    )


def load_secret(path: Optional[str]) -> Optional[Secret]:
    """Read a secret from a JSON file mapping keys to string values."""
    if not path:
        return None
    data = _read_object(path)
    return Secret(data={k: str(v).encode() for k, v in data.items()})


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="onmetal machine driver: create, inspect, list and delete machines"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to driver config (JSON)"
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="Per-call deadline in seconds"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("create", "Create a machine and its ignition secret"),
        ("delete", "Delete a machine and wait until it is gone"),
        ("status", "Show the provider ID of a machine"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--name", "-n", required=True, help="Machine name")
        sub.add_argument(
            "--class", dest="machine_class", required=True,
            help="Machine class JSON file",
        )
        sub.add_argument("--secret", "-s", help="Secret JSON file (must hold userData)")

    list_parser = subparsers.add_parser("list", help="List machines of a machine class")
    list_parser.add_argument(
        "--class", dest="machine_class", required=True, help="Machine class JSON file"
    )
    list_parser.add_argument("--secret", "-s", help="Secret JSON file (must hold userData)")

    return parser


async def async_main(argv: Optional[list[str]] = None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    # Flags win over the configured level
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = getattr(logging, config.log_level, logging.WARNING)
    configure_logging(level=level, json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    try:
        machine_class = load_machine_class(args.machine_class)
        secret = load_secret(args.secret)
    except FileNotFoundError as e:
        print(f"[-] File not found: {e.filename}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"[-] Invalid JSON input: {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"[-] Invalid input: {e}")
        sys.exit(1)

    container = await start_container(config)
    driver = container.driver

    try:
        if args.command == "list":
            response = await driver.list_machines(
                ListMachinesRequest(machine_class=machine_class, secret=secret),
                timeout=args.timeout,
            )
            _print_json(response.machine_list)
            return

        machine = Machine(name=args.name, namespace=container.config.driver.namespace)

        if args.command == "create":
            response = await driver.create_machine(
                CreateMachineRequest(machine=machine, machine_class=machine_class, secret=secret),
                timeout=args.timeout,
            )
            _print_json(asdict(response))
            return

        if args.command == "status":
            response = await driver.get_machine_status(
                GetMachineStatusRequest(machine=machine, machine_class=machine_class, secret=secret),
                timeout=args.timeout,
            )
            _print_json(asdict(response))
            return

        if args.command == "delete":
            print(f"[*] Deleting machine {args.name}...")
            await driver.delete_machine(
                DeleteMachineRequest(machine=machine, machine_class=machine_class, secret=secret),
                timeout=args.timeout,
            )
            print(f"[+] Machine {args.name} deleted.")
            return
    except MachineError as e:
        print(f"[-] {e}")
        if is_retryable_soon(e.code):
            print("[*] The failure may be transient; retry shortly.")
        if verbose:
            traceback.print_exc()
        sys.exit(1)


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
