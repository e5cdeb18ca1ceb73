import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import http.client as http_client

from . import __version__
from .config import DEPLOYMENT_TYPES, SyncSettings
from .core.coordinator import Coordinator
from .core.errors import AggregateError, SyncError
from .core.models import ImportOptions
from .utils.bundle_files import load_bundle, save_bundle

SENSITIVE_KEYS = {"token"}


def mask_sensitive(ns: argparse.Namespace) -> dict:
    """Return a dict copy of args with sensitive values masked."""
    data = vars(ns).copy()
    for k in list(data.keys()):
        if k in SENSITIVE_KEYS and data[k]:
            data[k] = "****"
    return data


def configure_logging(debug: bool, log_file: Optional[Path]) -> None:
    level = logging.DEBUG if debug else logging.INFO
    handlers = []
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )

    if debug:
        http_client.HTTPConnection.debuglevel = 1  # type: ignore[attr-defined]
        for noisy in ("urllib3", "requests"):
            logging.getLogger(noisy).setLevel(logging.DEBUG)
            logging.getLogger(noisy).propagate = True


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="idmsync", description="Export, import and delete IDM config entities")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--url", help="IDM base URL (env: IDMSYNC_BASE_URL)")
    p.add_argument("--token", help="Bearer access token (env: IDMSYNC_TOKEN)")
    p.add_argument("--deployment-type", choices=DEPLOYMENT_TYPES,
                   help="Target deployment type (env: IDMSYNC_DEPLOYMENT_TYPE)")
    p.add_argument("--username", help="Recorded as exportedBy in export metadata")
    p.add_argument("--export-workers", type=int,
                   help="Concurrent fetches during export; 0 means one per entity")
    p.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    p.add_argument("--insecure", action="store_true", help="Do not verify TLS certificates")
    p.add_argument("--policy", type=Path, dest="policy_file",
                   help="JSON file replacing the built-in known-failure tables")
    p.add_argument("--ignore-case", action="store_true",
                   help="Match error reasons and messages case-insensitively")
    p.add_argument("--debug", action="store_true",
                   help="Enable verbose debug logging (incl. HTTP wire logs).")
    p.add_argument("--log-file", type=Path, default=None,
                   help="Write logs to this file instead of stderr.")

    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("types", help="List config entity types")

    exp = sub.add_parser("export", help="Export all config entities to a file")
    exp.add_argument("-f", "--file", type=Path, required=True, help="Export file to write")

    imp = sub.add_parser("import", help="Import config entities from an export file")
    imp.add_argument("-f", "--file", type=Path, required=True, help="Export file to read")
    imp.add_argument("--validate", action="store_true", help="Validate script hooks before import")
    imp.add_argument("--wait", action="store_true",
                     help="Wait until the server confirms each change was consumed")

    dele = sub.add_parser("delete", help="Delete all config entities, or all of one type")
    dele.add_argument("-t", "--type", dest="entity_type", help="Only delete entities of this type")
    return p


def settings_from_args(args: argparse.Namespace) -> SyncSettings:
    return SyncSettings.from_env(
        base_url=args.url,
        token=args.token,
        deployment_type=args.deployment_type,
        username=args.username,
        export_workers=args.export_workers,
        timeout=args.timeout,
        verify_tls=False if args.insecure else None,
        policy_file=args.policy_file,
        case_sensitive=False if args.ignore_case else None,
    )


def run(coord: Coordinator, args: argparse.Namespace) -> None:
    log = logging.getLogger("cli")
    if args.command == "types":
        for type_ in coord.list_types():
            print(type_)
    elif args.command == "export":
        bundle = coord.export_all()
        save_bundle(bundle, args.file)
    elif args.command == "import":
        bundle = load_bundle(args.file)
        results = coord.import_all(bundle, ImportOptions(validate=args.validate, wait=args.wait))
        log.info("Imported %d config entities from %s", len(results), args.file)
    elif args.command == "delete":
        if args.entity_type:
            deleted = coord.delete_all_of_type(args.entity_type)
        else:
            deleted = coord.delete_all()
        log.info("Deleted %d config entities", len(deleted))


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug, args.log_file)

    log = logging.getLogger("cli")
    log.debug("Parsed args (masked): %s", mask_sensitive(args))

    try:
        coord = Coordinator.from_settings(settings_from_args(args))
        log.debug("Coordinator initialized")
        run(coord, args)
        log.info("Done.")
    except KeyboardInterrupt:
        log.warning("Interrupted by user.")
        sys.exit(130)
    except AggregateError as e:
        log.error("%s: %d item(s) failed", e.message, len(e.errors))
        for err in e.errors:
            log.error("  %s", err)
        sys.exit(1)
    except (SyncError, ValueError) as e:
        log.error("%s", e)
        sys.exit(1)
    except Exception:
        log.exception("Unhandled error during execution")
        sys.exit(1)


if __name__ == "__main__":

    main()
