"""CLI entry point and argument parsing"""

import argparse
import logging
import sys
from rich.console import Console
import settings
from accounts import AccountsFile, AccountStore, SessionDirectory, SessionStore
from errors import GatewayError
from providers.registry import ProviderRegistry


console = Console()


def _stores(args):
    account_store = AccountStore(AccountsFile(args.accounts or settings.ACCOUNTS_FILE))
    session_store = SessionStore(SessionDirectory(args.data_dir or settings.DATA_DIR))
    return account_store, session_store


def cmd_serve(args) -> int:
    from gateway import GatewayServer

    account_store, session_store = _stores(args)
    server = GatewayServer(
        debug=args.debug,
        bind_address=args.bind,
        port=args.port,
        account_store=account_store,
        session_store=session_store,
    )
    server.run()
    return 0


def cmd_accounts(args) -> int:
    from cli.status_display import show_accounts

    account_store, session_store = _stores(args)
    registry = ProviderRegistry(account_store, session_store)
    provider_names = sorted(registry.registrations())
    show_accounts(account_store, session_store, provider_names, console)
    return 0


def cmd_providers(args) -> int:
    from cli.status_display import show_providers

    account_store, session_store = _stores(args)
    registry = ProviderRegistry(account_store, session_store)
    registry.load()
    show_providers(list(registry.providers), registry.failures, console)
    return 1 if registry.failures else 0


def cmd_rotate_token(args) -> int:
    from cli.account_handlers import rotate_token

    account_store, _ = _stores(args)
    return rotate_token(account_store, args.current_token, args.new_token, console)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Social OAuth Gateway CLI")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--accounts", default=None, help="Path to accounts.json (default: from config)")
    parser.add_argument("--data-dir", default=None, help="Session directory (default: from config)")

    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the gateway server")
    serve.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Override port (default: from config)")
    serve.set_defaults(func=cmd_serve)

    accounts = subparsers.add_parser("accounts", help="List accounts and their sessions")
    accounts.set_defaults(func=cmd_accounts)

    providers = subparsers.add_parser("providers", help="List providers and whether they load")
    providers.set_defaults(func=cmd_providers)

    rotate = subparsers.add_parser("rotate-token", help="Replace an account's secret token")
    rotate.add_argument("current_token", help="Token the account holds now")
    rotate.add_argument("new_token", help="Token to replace it with")
    rotate.set_defaults(func=cmd_rotate_token)

    return parser


def main(argv=None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        args.command = "serve"
        args.func = cmd_serve
        args.bind = None
        args.port = None

    if not args.debug:
        logging.basicConfig(
            level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )

    try:
        exit_code = args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        exit_code = 130
    except GatewayError as e:
        console.print(f"[red]ERROR:[/red] {e.message}")
        exit_code = 1
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
