"""Command-line client for credsafe.

Every command runs one full load-mutate-save cycle against the store file.
The ``shell`` command keeps the master passphrase in a Session and asks for
it again once the session has expired.
"""
import sys
import logging
import functools
from enum import Enum
from typing import Optional

import click

from .exceptions import (
    AuthOrFormatError,
    ConfirmationMismatchError,
    DuplicateNameError,
    SecretNotFoundError,
    StoreIOError,
)
from .models import Secret, confirm_value
from .session import Session
from .vault.migration import LEGACY_FIELD
from .vault import (
    SafeConfig,
    SecretStore,
    change_passphrase,
    detect_legacy,
    insert_new,
    list_view,
    lookup,
    migrate,
    remove,
    replace_for_edit,
)

NOTES_SENTINEL = "."
EXIT_IO_ERROR = 2

_TEXT_FIELDS = (
    ("description", "Description"),
    ("username", "Username"),
    ("url", "URL"),
)


class Action(str, Enum):
    """Verbs understood by the interactive shell."""

    LIST = "list"
    ADD = "add"
    EDIT = "edit"
    SHOW = "show"
    DELETE = "delete"
    MIGRATE = "migrate"
    PASSWD = "passwd"
    HELP = "help"
    QUIT = "quit"


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

def prompt_master(confirm: bool = False) -> str:
    return click.prompt(
        "Master passphrase", hide_input=True, confirmation_prompt=confirm,
    )


def prompt_passphrase() -> str:
    """Ask twice for a secret's passphrase until both entries match."""
    while True:
        first = click.prompt(
            "Passphrase", hide_input=True, default="", show_default=False,
        )
        second = click.prompt(
            "Repeat passphrase", hide_input=True, default="", show_default=False,
        )
        try:
            return confirm_value(first, second)
        except ConfirmationMismatchError as err:
            click.echo(str(err), err=True)


def prompt_notes() -> str:
    """Read note lines until a line holding only the sentinel (or EOF)."""
    click.echo(f"Notes (end with a line containing only '{NOTES_SENTINEL}'):")
    lines = []
    while True:
        # same stream click.prompt reads from, so no input is skipped
        line = sys.stdin.readline()
        if not line or line.rstrip("\r\n") == NOTES_SENTINEL:
            break
        lines.append(line)
    return "".join(lines).removesuffix("\n")


def prompt_name(default: Optional[str] = None) -> str:
    while True:
        name = click.prompt("Name", default=default)
        if name.strip():
            return name
        click.echo("Name cannot be empty", err=True)


def prompt_secret(current: Optional[Secret] = None) -> Secret:
    """Collect the fields of a new secret, or of an edited copy of ``current``."""
    def ask(label: str, value: str) -> str:
        return click.prompt(label, default=value, show_default=bool(value))

    creating = current is None
    fields = {} if creating else current.model_dump()
    fields["name"] = prompt_name(fields.get("name"))
    for field, label in _TEXT_FIELDS:
        fields[field] = ask(label, fields.get(field, ""))
    if creating or click.confirm("Change passphrase?", default=False):
        fields["passphrase"] = prompt_passphrase()
        # a stale legacy value must not come back on migrate
        fields.pop(LEGACY_FIELD, None)
    if creating or click.confirm("Replace notes?", default=False):
        fields["notes"] = prompt_notes()
    return Secret.model_validate(fields)


def print_secret(secret: Secret) -> None:
    click.echo(f"Name:        {secret.name}")
    click.echo(f"Description: {secret.description}")
    click.echo(f"Username:    {secret.username}")
    click.echo(f"Passphrase:  {secret.passphrase}")
    click.echo(f"URL:         {secret.url}")
    click.echo("Notes:")
    if secret.notes:
        click.echo(secret.notes)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def _load(store: SecretStore, passphrase: str):
    secret_set = store.load(passphrase)
    if detect_legacy(secret_set):
        click.echo(
            "This store uses an old record format; run 'migrate' to upgrade it.",
            err=True,
        )
    return secret_set


def do_list(store: SecretStore, passphrase: str) -> None:
    for name, description in list_view(_load(store, passphrase)):
        click.echo(f"{name}: {description}" if description else name)


def do_add(store: SecretStore, passphrase: str) -> None:
    secret_set = _load(store, passphrase)
    secret = prompt_secret()
    insert_new(secret_set, secret)
    store.save(secret_set, passphrase)
    click.echo(f"Added {secret.name}")


def do_edit(store: SecretStore, passphrase: str, name: str) -> None:
    secret_set = _load(store, passphrase)
    current = lookup(secret_set, name)
    edited = prompt_secret(current)
    # a collision leaves the in-memory set without the old entry: never save it
    replace_for_edit(secret_set, current.canonical_name, edited)
    store.save(secret_set, passphrase)
    click.echo(f"Updated {edited.name}")


def do_show(store: SecretStore, passphrase: str, name: str) -> None:
    print_secret(lookup(_load(store, passphrase), name))


def do_delete(store: SecretStore, passphrase: str, name: str) -> None:
    secret_set = _load(store, passphrase)
    secret = lookup(secret_set, name)
    click.confirm(f"Delete {secret.name}?", abort=True)
    remove(secret_set, secret.canonical_name)
    store.save(secret_set, passphrase)
    click.echo(f"Deleted {secret.name}")


def do_migrate(store: SecretStore, passphrase: str) -> None:
    secret_set = store.load(passphrase)
    if not detect_legacy(secret_set):
        click.echo("Store is already in the current format.")
        return
    click.confirm("Upgrade the store to the current record format?", abort=True)
    store.save(migrate(secret_set), passphrase)
    click.echo(f"Migrated {len(secret_set)} secret(s)")


def do_passwd(store: SecretStore, passphrase: str) -> str:
    click.echo("Enter the new master passphrase.")
    new = prompt_master(confirm=True)
    count = change_passphrase(store, passphrase, new)
    click.echo(f"Re-encrypted {count} secret(s)")
    return new


def handle_errors(func):
    """Turn store errors into click exits; filesystem errors are fatal."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreIOError as err:
            click.echo(f"Error: {err}", err=True)
            sys.exit(EXIT_IO_ERROR)
        except (
            AuthOrFormatError,
            DuplicateNameError,
            SecretNotFoundError,
        ) as err:
            raise click.ClickException(str(err)) from err
    return wrapper


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _open(ctx: click.Context, creating: bool = False) -> tuple[SecretStore, str]:
    """Return the store and a master passphrase, offering to create the file."""
    config: SafeConfig = ctx.obj
    store = SecretStore(config.path, kdf_iterations=config.kdf_iterations)
    if not store.exists():
        if not creating:
            raise click.ClickException(f"Store {store.path} does not exist")
        click.confirm(f"{store.path} does not exist. Create it?", abort=True)
        return store, prompt_master(confirm=True)
    return store, prompt_master()


@click.group()
@click.option(
    "-f", "--file", "path", type=click.Path(),
    help="Store file (default: $CREDSAFE_PATH or ~/.credsafe).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="credsafe")
@click.pass_context
def main(ctx: click.Context, path: Optional[str], verbose: bool) -> None:
    """Keep named credentials in a passphrase-encrypted file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = SafeConfig.from_env(path=path)


@main.command("list")
@click.pass_context
@handle_errors
def list_cmd(ctx: click.Context) -> None:
    """List secrets with their descriptions."""
    do_list(*_open(ctx))


@main.command()
@click.pass_context
@handle_errors
def add(ctx: click.Context) -> None:
    """Add a new secret."""
    do_add(*_open(ctx, creating=True))


@main.command()
@click.argument("name")
@click.pass_context
@handle_errors
def edit(ctx: click.Context, name: str) -> None:
    """Edit the secret NAME."""
    do_edit(*_open(ctx), name)


@main.command()
@click.argument("name")
@click.pass_context
@handle_errors
def show(ctx: click.Context, name: str) -> None:
    """Print every field of the secret NAME."""
    do_show(*_open(ctx), name)


@main.command()
@click.argument("name")
@click.pass_context
@handle_errors
def delete(ctx: click.Context, name: str) -> None:
    """Delete the secret NAME."""
    do_delete(*_open(ctx), name)


@main.command("migrate")
@click.pass_context
@handle_errors
def migrate_cmd(ctx: click.Context) -> None:
    """Upgrade a store written by an older release."""
    do_migrate(*_open(ctx))


@main.command()
@click.pass_context
@handle_errors
def passwd(ctx: click.Context) -> None:
    """Change the master passphrase."""
    do_passwd(*_open(ctx))


@main.command()
@click.pass_context
@handle_errors
def shell(ctx: click.Context) -> None:
    """Run commands interactively, asking for the passphrase after a timeout."""
    config: SafeConfig = ctx.obj
    store, passphrase = _open(ctx, creating=True)
    session = Session.supply(passphrase, timeout=config.session_timeout)
    click.echo("Type 'help' for a list of commands.")
    while True:
        try:
            line = click.prompt("credsafe", prompt_suffix="> ")
        except click.Abort:
            click.echo()
            return
        verb, _, argument = line.strip().partition(" ")
        try:
            action = Action(verb.lower())
        except ValueError:
            click.echo(f"Unknown command: {verb}", err=True)
            continue
        if action is Action.QUIT:
            return
        if action is Action.HELP:
            click.echo("Commands: " + ", ".join(a.value for a in Action))
            continue
        if session.is_expired():
            click.echo("Session expired.")
            session.resupply(prompt_master())
        try:
            run_action(store, session, action, argument.strip())
        except (
            AuthOrFormatError,
            DuplicateNameError,
            SecretNotFoundError,
        ) as err:
            click.echo(f"Error: {err}", err=True)
        except click.Abort:
            click.echo("Aborted.")


def run_action(store: SecretStore, session: Session, action: Action, argument: str) -> None:
    passphrase = session.passphrase
    if action in (Action.EDIT, Action.SHOW, Action.DELETE):
        name = argument or prompt_name()
        {
            Action.EDIT: do_edit,
            Action.SHOW: do_show,
            Action.DELETE: do_delete,
        }[action](store, passphrase, name)
    elif action is Action.LIST:
        do_list(store, passphrase)
    elif action is Action.ADD:
        do_add(store, passphrase)
    elif action is Action.MIGRATE:
        do_migrate(store, passphrase)
    elif action is Action.PASSWD:
        session.resupply(do_passwd(store, passphrase))


if __name__ == "__main__":
    main()
