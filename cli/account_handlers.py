"""Account management handlers for CLI"""

from accounts import AccountStore, mask_token
from errors import ConfigUnavailable, Conflict, Forbidden, MissingCredential


def rotate_token(store: AccountStore, current_token: str, new_token: str, console) -> int:
    """
    Rotate an account's secret token directly against the account table

    Args:
        store: AccountStore instance
        current_token: Token currently held by the account
        new_token: Replacement token
        console: Rich console for output

    Returns:
        Process exit code (0 on success)
    """
    try:
        result = store.rotate_token(current_token, new_token)
    except MissingCredential as e:
        console.print(f"[red]ERROR:[/red] {e.message}")
        return 2
    except Forbidden as e:
        console.print(f"[red]ERROR:[/red] {e.message}")
        return 3
    except Conflict as e:
        console.print(f"[red]ERROR:[/red] {e.message}")
        return 4
    except ConfigUnavailable as e:
        console.print(f"[red]ERROR:[/red] Update failed: {e.message}")
        return 1

    console.print(
        f"[green]✓ Token updated[/green] for {result['accountName']} "
        f"(ID: {result['accountId']}) -> {mask_token(new_token)}"
    )
    return 0
