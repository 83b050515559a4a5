"""Provision a tenant and its first tenant administrator.

Tenants are never created through the API. Run this as an operator with
the administrative database role (SHIELDED_DB_ADMIN_USERNAME and
SHIELDED_DB_ADMIN_PASSWORD), which bypasses row level security:

    python scripts/provision_tenant.py --name "Acme" --slug acme \\
        --admin-id auth0|123 --admin-email admin@acme.example
"""

import argparse
import asyncio
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import async_sessionmaker

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path / "src" / "api"))

from iam.application.services import TenantBootstrapService  # noqa: E402
from iam.domain.value_objects import UserId  # noqa: E402
from iam.infrastructure.tenant_provisioning_repository import (  # noqa: E402
    TenantProvisioningRepository,
)
from iam.ports.exceptions import DuplicateTenantSlugError  # noqa: E402
from infrastructure.database.engines import create_admin_engine  # noqa: E402
from infrastructure.logging import configure_logging  # noqa: E402
from infrastructure.settings import get_database_settings  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--name", required=True, help="Tenant display name")
    parser.add_argument("--slug", required=True, help="Globally unique short name")
    parser.add_argument("--plan", default="free", help="Subscription plan")
    parser.add_argument(
        "--admin-id", required=True, help="Identity provider subject of the admin"
    )
    parser.add_argument("--admin-email", required=True, help="Admin email address")
    return parser.parse_args(argv)


async def provision(args: argparse.Namespace) -> int:
    engine = create_admin_engine(get_database_settings())
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
    service = TenantBootstrapService(
        provisioning_repository=TenantProvisioningRepository(sessionmaker=sessionmaker),
    )
    try:
        tenant, admin = await service.provision_tenant(
            name=args.name,
            slug=args.slug,
            admin_user_id=UserId.from_string(args.admin_id),
            admin_email=args.admin_email,
            plan=args.plan,
        )
    except DuplicateTenantSlugError:
        print(f"A tenant with slug '{args.slug}' already exists", file=sys.stderr)
        return 1
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    finally:
        await engine.dispose()

    print(f"Provisioned tenant {tenant.id} ({tenant.slug}) with admin {admin.id}")
    return 0


def main() -> None:
    configure_logging()
    sys.exit(asyncio.run(provision(parse_args())))


if __name__ == "__main__":
    main()
