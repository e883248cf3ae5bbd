"""
XShare command-line entry point.

``receive`` advertises this device and waits for one transfer;
``send`` pushes text to the device behind a pairing code.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from config import LOG_FORMAT, LOG_LEVEL, RECEIVER_PORT
from pairing.network import discover_local_ipv4
from session.state import SessionStage, SessionState
from transfer.coordinator import ShareCoordinator
from transfer.models import Role

logger = logging.getLogger(__name__)

DONE_STAGES = (
    SessionStage.RECEIVER_COMPLETED,
    SessionStage.SENDER_COMPLETED,
    SessionStage.ERROR,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xshare",
        description="Hand a piece of text to another device on the same network.",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    receive_parser = subparsers.add_parser("receive", help="wait for one transfer")
    receive_parser.add_argument(
        "--port",
        type=int,
        default=RECEIVER_PORT,
        help="port to listen on (default: %(default)s)",
    )
    receive_parser.add_argument(
        "--host",
        default=None,
        help="address to advertise instead of the detected LAN address",
    )

    send_parser = subparsers.add_parser("send", help="send text to a receiver")
    send_parser.add_argument("code", help="pairing code shown by the receiver, e.g. 192.168.1.42:8080")
    send_parser.add_argument("text", help="text to send")
    return parser


async def _run_session(coordinator: ShareCoordinator, drive) -> SessionState:
    done = asyncio.Event()

    async def on_state(state: SessionState) -> None:
        if state.stage is SessionStage.RECEIVER_WAITING:
            print(f"Pairing code: {state.pairing_code}", flush=True)
        if state.stage in DONE_STAGES:
            done.set()

    coordinator.on_state_change(on_state)
    async with coordinator:
        await drive(coordinator)
        await done.wait()
        return coordinator.state


async def receive(port: int, host: Optional[str] = None) -> SessionState:
    discover = (lambda: host) if host else discover_local_ipv4
    coordinator = ShareCoordinator(discover_host=discover, port=port)

    async def drive(c: ShareCoordinator) -> None:
        await c.choose_role(Role.RECEIVER)

    return await _run_session(coordinator, drive)


async def send(code: str, text: str) -> SessionState:
    coordinator = ShareCoordinator()

    async def drive(c: ShareCoordinator) -> None:
        await c.choose_role(Role.SENDER)
        await c.descriptor_obtained(code)
        await c.submit(text)

    return await _run_session(coordinator, drive)


def _report(state: SessionState) -> int:
    if state.stage is SessionStage.RECEIVER_COMPLETED:
        print(state.payload)
        return 0
    if state.stage is SessionStage.SENDER_COMPLETED:
        print(f"Sent {len(state.payload)} characters")
        return 0
    print(f"Error: {state.reason}", file=sys.stderr)
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    if args.command == "send" and not args.text.strip():
        print("Error: nothing to send", file=sys.stderr)
        return 2

    try:
        if args.command == "receive":
            state = asyncio.run(receive(args.port, args.host))
        else:
            state = asyncio.run(send(args.code, args.text))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return _report(state)


if __name__ == "__main__":
    sys.exit(main())
