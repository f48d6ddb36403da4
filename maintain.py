#!/usr/bin/env python3
"""
Maintenance jobs: refresh summaries, purge the query cache, index campaigns.

Usage:
    python maintain.py                   # Refresh all tenants + purge cache
    python maintain.py refresh t1 t2     # Refresh specific tenants
    python maintain.py purge             # Purge stale cache entries only
    python maintain.py index [t1 ...]    # Embed campaigns for retrieval
    python maintain.py --validate        # Check data integrity
"""

import asyncio
import sys
from pathlib import Path

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from app.container import container
from etl import index_all, purge_cache, refresh_all, validate_tenant
from settings.logging import setup_logging

logger = setup_logging(level="INFO", to_file=True)


def print_validation(results: dict[str, dict]) -> bool:
    print("\n" + "=" * 60)
    print("DATA VALIDATION REPORT")
    print("=" * 60)

    all_valid = True
    for tenant_id, result in results.items():
        status = "OK" if result["valid"] else "ISSUES"
        print(f"\nTenant {tenant_id} [{status}]")
        print(f"  Rows: {result['stats']['rows']:,}")
        print(f"  Campaigns: {result['stats']['campaigns']:,}")
        print(f"  Summary rows: {result['stats']['summary_rows']:,}")
        print(f"  Embedded campaigns: {result['stats']['embedded_campaigns']:,}")
        for issue in result["issues"]:
            all_valid = False
            print(f"  ! {issue}")

    print("\n" + "=" * 60)
    print("All data valid!" if all_valid else "Some issues found. Run maintenance to fix.")
    print("=" * 60 + "\n")
    return all_valid


async def run(command: str, tenants: list[str] | None) -> bool:
    await container.init()
    try:
        if command == "validate":
            tenants = tenants or await container.metrics_repo.tenants()
            cur = container.db.cursor()
            try:
                return print_validation({t: validate_tenant(cur, t) for t in tenants})
            finally:
                cur.close()
        if command == "purge":
            await purge_cache(container.cache_repo)
        elif command == "index":
            result = await index_all(container.indexer, container.metrics_repo, tenants)
            return not result["failed"]
        else:
            result = await refresh_all(
                container.metrics_repo, container.summary_repo, container.cache_repo, tenants
            )
            return not result["failed"]
        return True
    finally:
        await container.close()


def main():
    args = sys.argv[1:]

    if "--validate" in args:
        command = "validate"
        args = [a for a in args if a != "--validate"]
    elif args and args[0] in ("refresh", "purge", "index"):
        command, args = args[0], args[1:]
    elif not args:
        command = "refresh"
    else:
        print(__doc__)
        sys.exit(1)

    tenants = args or None
    logger.info("Running {} for {}", command, tenants or "all tenants")
    ok = asyncio.run(run(command, tenants))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
