"""Status display functionality for CLI"""

from typing import Dict, List

from rich.table import Table

from accounts import AccountStore, SessionStore, mask_token


def show_accounts(store: AccountStore, sessions: SessionStore, provider_names: List[str], console):
    """
    Display every account with its session status per provider

    Args:
        store: AccountStore instance
        sessions: Root SessionStore instance
        provider_names: Providers to report session status for
        console: Rich console for output
    """
    accounts = store.list_accounts()

    table = Table(title="Accounts")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Token")
    table.add_column("Scopes")
    table.add_column("Manual URN")
    for name in provider_names:
        table.add_column(name)

    scoped = {name: sessions.scoped(name) for name in provider_names}
    for account in accounts:
        row = [
            account.id,
            account.name,
            mask_token(account.secret_token),
            " ".join(account.scopes),
            "Yes" if account.manual_urn else "No",
        ]
        for name in provider_names:
            connected = scoped[name].has_session(account.id)
            row.append("[green]connected[/green]" if connected else "[dim]-[/dim]")
        table.add_row(*row)

    console.print(table)


def show_providers(providers: List[str], failures: Dict[str, str], console):
    """
    Display registered providers and whether they loaded

    Args:
        providers: Names of providers that loaded
        failures: Mapping of provider name to load error
        console: Rich console for output
    """
    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")

    for name in sorted(providers):
        table.add_row(name, "[green]OK[/green]", "")
    for name, error in sorted(failures.items()):
        table.add_row(name, "[red]FAILED[/red]", error)

    console.print(table)
