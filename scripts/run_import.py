"""Run a catalog import from the command line without the job queue."""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import tempfile
from pathlib import Path

from dotenv import load_dotenv

from catalog.db.migrate import run_migrations
from catalog.db.session import create_engine_from_env
from catalog.db.store import CatalogStore
from catalog.jobs.imports import run_import


def _staged_copy(path: str, workdir: Path) -> str:
    # the pipeline deletes its input files, so hand it a copy
    target = workdir / Path(path).name
    shutil.copyfile(path, target)
    return str(target)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("products_csv")
    parser.add_argument("--inventory-csv")
    parser.add_argument("--database-url")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    engine = create_engine_from_env(args.database_url)
    run_migrations(engine)
    store = CatalogStore(engine)

    with tempfile.TemporaryDirectory() as workdir:
        products_path = _staged_copy(args.products_csv, Path(workdir))
        inventory_path = _staged_copy(args.inventory_csv, Path(workdir)) if args.inventory_csv else None
        import_id = store.create_import(
            filename=Path(args.products_csv).name,
            inventory_filename=Path(args.inventory_csv).name if args.inventory_csv else None,
        )
        stats = asyncio.run(run_import(import_id, products_path, inventory_path, store=store))

    job = store.get_import(import_id)
    print(f"Import #{import_id} {job['status']}")
    for key, value in stats.as_dict().items():
        if isinstance(value, list):
            continue
        print(f"  {key}: {value}")
    for warning in stats.warnings:
        print(f"  ! {warning}")
    if job["error_messages"]:
        print(f"  error: {job['error_messages']}")


if __name__ == "__main__":
    main()
