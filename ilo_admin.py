"""
iLO Admin
================================
Command line administration of HPE iLO management controllers over Redfish.
Features include:
- AlertMail SMTP secure-connection read and change, with verification
- Optional test alert mail after a read or change
- Physical drive inventory and server summaries
- Local history of every batch run
"""

import argparse
import getpass
import json
import logging
from datetime import datetime
from functools import partial

import yaml

import config
import history
import inventory
from batch import build_targets, run_batch
from logging_config import configure_logging
from models import Credential
from smtp_security import SmtpSecureState, get_smtp_secure, set_smtp_secure

logger = logging.getLogger("ilo_admin")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ilo-admin", description="Administer HPE iLO controllers over Redfish.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")
    parser.add_argument("--user", default=config.ILO_USER, help="iLO user name (default: %(default)s)")
    parser.add_argument("--hosts-file", help="YAML list of hosts, used when no HOST is given")
    tls = parser.add_mutually_exclusive_group()
    tls.add_argument("--insecure", dest="verify", action="store_false", help="skip certificate validation")
    tls.add_argument("--verify-tls", dest="verify", action="store_true", help="validate iLO certificates")
    parser.set_defaults(verify=config.VERIFY_TLS)
    parser.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT)
    parser.add_argument("--format", choices=("yaml", "json"), default="yaml")
    parser.add_argument("--record", action="store_true", default=config.RECORD_HISTORY,
                        help="store results in the history database")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    parser.add_argument("--log-file", default=config.LOG_PATH)

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("smtp-secure-get", help="show the AlertMail SMTP secure-connection setting")
    p.add_argument("hosts", nargs="*", metavar="HOST")
    p.add_argument("--send-test-alert", action="store_true")

    p = sub.add_parser("smtp-secure-set", help="change the AlertMail SMTP secure-connection setting")
    p.add_argument("state", choices=[s.value for s in SmtpSecureState])
    p.add_argument("hosts", nargs="*", metavar="HOST")
    p.add_argument("--dry-run", action="store_true", help="report what would change without writing")
    p.add_argument("--send-test-alert", action="store_true")

    p = sub.add_parser("drives", help="list physical drives")
    p.add_argument("hosts", nargs="*", metavar="HOST")

    p = sub.add_parser("summary", help="show model, serial, power and firmware")
    p.add_argument("hosts", nargs="*", metavar="HOST")

    p = sub.add_parser("history", help="show recorded batch runs")
    p.add_argument("--limit", type=int, default=10)
    return parser


def _action(args):
    if args.command == "smtp-secure-get":
        return partial(get_smtp_secure, send_test_alert=args.send_test_alert)
    if args.command == "smtp-secure-set":
        return partial(
            set_smtp_secure,
            state=SmtpSecureState(args.state),
            dry_run=args.dry_run,
            send_test_alert=args.send_test_alert,
        )
    if args.command == "drives":
        return inventory.get_physical_drives
    return inventory.get_server_summary


def _password() -> str:
    return config.ILO_PASS or getpass.getpass("iLO password: ")


def render(data, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(data, indent=2, default=str)
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    if args.command == "history":
        engine = history.get_engine()
        history.init_db(engine)
        print(render(history.recent_runs(engine, args.limit), args.format), end="")
        return 0

    hosts = args.hosts or inventory.load_hosts_file(args.hosts_file or config.HOSTS_FILE)
    if not hosts:
        parser.error("no hosts given and the hosts file lists none")

    targets = build_targets(hosts, Credential(args.user, _password()))
    started_at = datetime.utcnow()
    logger.info("Running %s on %d hosts", args.command, len(targets))
    records = run_batch(targets, _action(args), verify=args.verify, timeout=args.timeout)

    if args.record:
        engine = history.get_engine()
        history.init_db(engine)
        history.record_batch(engine, args.command, records, started_at=started_at)

    print(render([r.as_dict() for r in records], args.format), end="")
    return 0 if all(r.ok for r in records) else 1


if __name__ == "__main__":
    raise SystemExit(main())
