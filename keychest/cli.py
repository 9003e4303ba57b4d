"""CLI for Keychest: generate, score, vault (create/changepw) and API key / password records."""

import argparse
from getpass import getpass

from rich import print
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import generator_defaults, load_config
from .errors import ConfigurationError, RecordNotFoundError, VaultError
from .evaluator import score_password
from .generator import PasswordConfiguration, generate
from .logging_config import setup_logging
from .models import API_KEY, API_KEY_CATEGORIES, PASSWORD, PASSWORD_CATEGORIES
from .service import CredentialService, VaultBackend
from .storage import default_vault_path
from .suggestions import suggest_improvements
from .vault import change_master_password, create_vault

EXIT_OK = 0
EXIT_VAULT_ERROR = 1
EXIT_CONFIG_ERROR = 2

KIND_FOR_COMMAND = {"keys": API_KEY, "passwords": PASSWORD}
CATEGORIES = {API_KEY: API_KEY_CATEGORIES, PASSWORD: PASSWORD_CATEGORIES}
SECRET_LABEL = {API_KEY: "API key", PASSWORD: "Password"}


def _vault_path(args) -> str:
    return args.file or args.cfg.get("vault_path") or default_vault_path()


def _print_report(report, title_prefix="Score") -> None:
    header = f"{title_prefix}: {report.score} / 100 - {report.label}"
    style = {"success": "green", "primary": "cyan", "warning": "yellow"}.get(report.color, "red")
    body = "\n".join(f" • {escape(line)}" for line in report.feedback) or "No suggestions - looks good."
    print(Panel(body, title=header, border_style=style))


def config_from_args(args) -> PasswordConfiguration:
    base = generator_defaults(args.cfg)
    overrides = {}
    if args.length is not None:
        overrides["length"] = args.length
    if args.no_upper:
        overrides["include_uppercase"] = False
    if args.no_lower:
        overrides["include_lowercase"] = False
    if args.no_digits:
        overrides["include_numbers"] = False
    if args.no_symbols:
        overrides["include_symbols"] = False
    if args.exclude_similar:
        overrides["exclude_similar"] = True
    if args.exclude_ambiguous:
        overrides["exclude_ambiguous"] = True
    return PasswordConfiguration.from_mapping(overrides, base=base)


def cmd_generate(args):
    try:
        config = config_from_args(args)
        passwords = [generate(config) for _ in range(args.copies)]
    except ConfigurationError as e:
        print(f"[red]Invalid generator settings: {escape(str(e))}[/red]")
        return EXIT_CONFIG_ERROR
    for i, pw in enumerate(passwords):
        print(f"[bold green]Password #{i+1}:[/bold green] {escape(pw)}")
        if args.show_strength:
            report = score_password(pw, locale=args.cfg.get("locale"))
            print(f"  strength: {report.score} / 100 - {report.label}")
    return EXIT_OK


def cmd_score(args):
    locale = args.locale or args.cfg.get("locale")
    _print_report(score_password(args.password, locale=locale))
    try:
        sugg = suggest_improvements(args.password, config=generator_defaults(args.cfg), locale=locale)
    except ConfigurationError as e:
        print(f"[red]Invalid generator settings: {escape(str(e))}[/red]")
        return EXIT_CONFIG_ERROR
    if sugg["examples"]:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Example stronger password")
        for ex in sugg["examples"]:
            table.add_row(escape(ex))
        print(table)
    return EXIT_OK


# Vault subcommands

def cmd_vault_create(args):
    path = _vault_path(args)
    master = getpass("Enter new master password: ")
    confirm = getpass("Confirm master password: ")
    if master != confirm:
        print("[red]Master password mismatch - aborting.[/red]")
        return EXIT_VAULT_ERROR
    try:
        create_vault(master, path)
    except (OSError, ValueError) as e:
        print(f"[red]Failed to create vault: {escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    print(f"[green]Created vault at:[/green] {escape(path)}")
    return EXIT_OK


def cmd_vault_changepw(args):
    """Change the master password: decrypt using old password then re-encrypt with new password."""
    path = _vault_path(args)
    old = getpass("Current master password: ")
    new = getpass("New master password: ")
    confirm = getpass("Confirm new master password: ")
    if new != confirm:
        print("[red]New password mismatch - aborting.[/red]")
        return EXIT_VAULT_ERROR
    try:
        change_master_password(old, new, path)
    except (VaultError, ValueError) as e:
        print(f"[red]Failed to change master password: {escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    print("[green]Master password changed and vault re-encrypted.[/green]")
    return EXIT_OK


# Record subcommands (keys / passwords)

def _service(args) -> CredentialService:
    master = getpass("Vault master password: ")
    return CredentialService(VaultBackend(master, _vault_path(args)), KIND_FOR_COMMAND[args.cmd])


def _records_table(records, kind) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Service")
    table.add_column("Category")
    table.add_column(SECRET_LABEL[kind])
    table.add_column("Expires")
    for r in records:
        expires = r.expiration or ""
        if r.is_expired():
            expires = f"[red]{expires} (expired)[/red]"
        table.add_row(
            r.id[:8], escape(r.name), escape(r.service), escape(r.category),
            escape(r.masked_secret()), expires,
        )
    return table


def _find(service: CredentialService, prefix: str):
    """Accept the 8-character prefix shown by `list` as well as a full id."""
    matches = [r for r in service.list_all() if r.id.startswith(prefix)]
    if len(matches) != 1:
        raise RecordNotFoundError(prefix)
    return matches[0]


def _ask_secret(args, kind) -> str:
    if args.secret:
        return args.secret
    if kind == PASSWORD and args.generate:
        pw = generate(generator_defaults(args.cfg))
        report = score_password(pw, locale=args.cfg.get("locale"))
        print(f"Generated password strength: {report.score} / 100 - {report.label}")
        return pw
    return getpass(f"{SECRET_LABEL[kind]} (input hidden): ")


def cmd_record_add(args):
    kind = KIND_FOR_COMMAND[args.cmd]
    name = args.name or input("Name: ")
    service_name = args.service or input("Service: ")
    try:
        secret = _ask_secret(args, kind)
    except ConfigurationError as e:
        print(f"[red]Invalid generator settings: {escape(str(e))}[/red]")
        return EXIT_CONFIG_ERROR
    if kind == PASSWORD and not args.generate:
        _print_report(score_password(secret, locale=args.cfg.get("locale")), "Strength")
    try:
        record = _service(args).create(
            name=name,
            service=service_name,
            secret=secret,
            category=args.category or "",
            description=args.description or "",
            expiration=args.expiration,
        )
    except ValueError as e:
        print(f"[red]Invalid record: {escape(str(e))}[/red]")
        return EXIT_CONFIG_ERROR
    except VaultError as e:
        print(f"[red]Failed to add record: {escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    print(f"[green]Added {escape(record.name)}[/green] ({record.id[:8]})")
    return EXIT_OK


def cmd_record_list(args):
    kind = KIND_FOR_COMMAND[args.cmd]
    try:
        svc = _service(args)
        if args.query:
            records = svc.search(args.query)
        elif args.category:
            records = svc.by_category(args.category)
        else:
            records = svc.list_all()
    except VaultError as e:
        print(f"[red]Failed to open vault: {escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    if not records:
        print("[yellow]No records found.[/yellow]")
        return EXIT_OK
    print(_records_table(records, kind))
    return EXIT_OK


def cmd_record_show(args):
    kind = KIND_FOR_COMMAND[args.cmd]
    try:
        svc = _service(args)
        record = _find(svc, args.id)
    except (VaultError, RecordNotFoundError) as e:
        print(f"[red]{escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    lines = [
        f"Service: {escape(record.service)}",
        f"Category: {escape(record.category)}",
        f"{SECRET_LABEL[kind]}: {escape(record.secret if args.reveal else record.masked_secret())}",
    ]
    if record.description:
        lines.append(f"Description: {escape(record.description)}")
    if record.expiration:
        lines.append(f"Expires: {record.expiration}")
    lines.append(f"Created: {record.created_at}")
    lines.append(f"Updated: {record.updated_at}")
    print(Panel("\n".join(lines), title=escape(record.name)))
    if kind == PASSWORD:
        _print_report(score_password(record.secret, locale=args.cfg.get("locale")), "Strength")
    return EXIT_OK


def cmd_record_edit(args):
    changes = {
        field: getattr(args, field)
        for field in ("name", "service", "category", "description", "expiration")
        if getattr(args, field) is not None
    }
    kind = KIND_FOR_COMMAND[args.cmd]
    try:
        if args.generate and kind == PASSWORD:
            changes["secret"] = generate(generator_defaults(args.cfg))
        elif args.new_secret:
            changes["secret"] = getpass(f"New {SECRET_LABEL[kind].lower()} (input hidden): ")
    except ConfigurationError as e:
        print(f"[red]Invalid generator settings: {escape(str(e))}[/red]")
        return EXIT_CONFIG_ERROR
    if not changes:
        print("[yellow]Nothing to change.[/yellow]")
        return EXIT_OK
    try:
        svc = _service(args)
        record = svc.update(_find(svc, args.id).id, **changes)
    except (VaultError, RecordNotFoundError) as e:
        print(f"[red]{escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    except ValueError as e:
        print(f"[red]Invalid record: {escape(str(e))}[/red]")
        return EXIT_CONFIG_ERROR
    print(f"[green]Updated {escape(record.name)}[/green]")
    return EXIT_OK


def cmd_record_remove(args):
    try:
        svc = _service(args)
        record_id = _find(svc, args.id).id
    except (VaultError, RecordNotFoundError) as e:
        print(f"[red]{escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    if not args.yes:
        confirm = input("Remove this record? This cannot be undone. (yes/NO): ")
        if confirm.lower() != "yes":
            print("Aborted.")
            return EXIT_OK
    svc.delete(record_id)
    print("[green]Removed record.[/green]")
    return EXIT_OK


def cmd_record_stats(args):
    try:
        svc = _service(args)
        stats = svc.statistics()
        expiring = svc.expiring(args.days)
    except VaultError as e:
        print(f"[red]Failed to open vault: {escape(str(e))}[/red]")
        return EXIT_VAULT_ERROR
    table = Table(show_header=True, header_style="bold cyan", title=f"Total: {stats['total']}")
    table.add_column("Category")
    table.add_column("Count", justify="right")
    for row in stats["by_category"]:
        table.add_row(escape(row["category"]), str(row["count"]))
    print(table)
    if expiring:
        print(f"[yellow]{len(expiring)} record(s) expire within {args.days} days:[/yellow]")
        for r in expiring:
            print(f" • {escape(r.name)} ({r.expiration})")
    return EXIT_OK


def _add_file_arg(p):
    p.add_argument("--file", "-f", type=str, help="Path to vault file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keychest")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (DEBUG, INFO, WARNING...)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate one or more passwords")
    gen.add_argument("--length", type=int, default=None, help="Password length")
    gen.add_argument("--no-symbols", action="store_true", help="Disable symbols")
    gen.add_argument("--no-upper", action="store_true", help="Disable uppercase")
    gen.add_argument("--no-lower", action="store_true", help="Disable lowercase")
    gen.add_argument("--no-digits", action="store_true", help="Disable digits")
    gen.add_argument("--exclude-similar", action="store_true", help="Leave out I, L, i, l, 1 and 0")
    gen.add_argument("--exclude-ambiguous", action="store_true", help="Leave out brackets, quotes and similar symbols")
    gen.add_argument("--copies", type=int, default=1, help="How many passwords to generate")
    gen.add_argument("--show-strength", action="store_true", help="Score each generated password")
    gen.set_defaults(func=cmd_generate)

    sc = sub.add_parser("score", help="Score a password and show suggestions")
    sc.add_argument("password", type=str, help="Password to evaluate (wrap in quotes)")
    sc.add_argument("--locale", type=str, default=None, help="Message language (en, es)")
    sc.set_defaults(func=cmd_score)

    v = sub.add_parser("vault", help="Vault operations")
    vsub = v.add_subparsers(dest="vcmd", required=True)

    vc_create = vsub.add_parser("create", help="Create a new vault")
    _add_file_arg(vc_create)
    vc_create.set_defaults(func=cmd_vault_create)

    vc_chpw = vsub.add_parser("changepw", help="Change the vault master password")
    _add_file_arg(vc_chpw)
    vc_chpw.set_defaults(func=cmd_vault_changepw)

    for cmd, kind in KIND_FOR_COMMAND.items():
        label = SECRET_LABEL[kind]
        rec = sub.add_parser(cmd, help=f"{label} records")
        rsub = rec.add_subparsers(dest="rcmd", required=True)

        r_add = rsub.add_parser("add", help=f"Add a {label.lower()} record")
        _add_file_arg(r_add)
        r_add.add_argument("--name", type=str, help="Record name")
        r_add.add_argument("--service", type=str, help="Service the secret belongs to")
        r_add.add_argument("--secret", type=str, help="Secret value (avoid passing via CLI in public shells)")
        r_add.add_argument("--category", type=str, choices=CATEGORIES[kind], help="Category")
        r_add.add_argument("--description", type=str, help="Optional description")
        r_add.add_argument("--expiration", type=str, help="Expiration date (YYYY-MM-DD)")
        r_add.add_argument("--generate", action="store_true", help="Generate the password (passwords only)")
        r_add.set_defaults(func=cmd_record_add)

        r_list = rsub.add_parser("list", help="List records")
        _add_file_arg(r_list)
        r_list.add_argument("--category", type=str, help="Only this category")
        r_list.set_defaults(func=cmd_record_list, query=None)

        r_search = rsub.add_parser("search", help="Search by name, service, category or description")
        _add_file_arg(r_search)
        r_search.add_argument("query", type=str)
        r_search.set_defaults(func=cmd_record_list, category=None)

        r_show = rsub.add_parser("show", help="Show one record")
        _add_file_arg(r_show)
        r_show.add_argument("id", type=str, help="Record id (or the prefix shown by list)")
        r_show.add_argument("--reveal", action="store_true", help="Print the secret in clear")
        r_show.set_defaults(func=cmd_record_show)

        r_edit = rsub.add_parser("edit", help="Edit a record")
        _add_file_arg(r_edit)
        r_edit.add_argument("id", type=str, help="Record id (or the prefix shown by list)")
        r_edit.add_argument("--name", type=str)
        r_edit.add_argument("--service", type=str)
        r_edit.add_argument("--category", type=str, choices=CATEGORIES[kind])
        r_edit.add_argument("--description", type=str)
        r_edit.add_argument("--expiration", type=str, help="Expiration date, empty string to clear")
        r_edit.add_argument("--new-secret", action="store_true", help="Prompt for a new secret")
        r_edit.add_argument("--generate", action="store_true", help="Replace with a generated password (passwords only)")
        r_edit.set_defaults(func=cmd_record_edit)

        r_rm = rsub.add_parser("remove", help="Remove a record")
        _add_file_arg(r_rm)
        r_rm.add_argument("id", type=str, help="Record id (or the prefix shown by list)")
        r_rm.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
        r_rm.set_defaults(func=cmd_record_remove)

        r_stats = rsub.add_parser("stats", help="Counts per category and upcoming expirations")
        _add_file_arg(r_stats)
        r_stats.add_argument("--days", type=int, default=30, help="Expiration window in days")
        r_stats.set_defaults(func=cmd_record_stats)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    args.cfg = load_config()
    setup_logging(args.log_level or args.cfg.get("log_level", "WARNING"))
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
