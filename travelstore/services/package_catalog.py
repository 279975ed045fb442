from sqlmodel import Session

from travelstore.models.package import Package
from travelstore.pricing.errors import PackageNotFound
from travelstore.pricing.ledger import PackageQuote


def to_quote(package: Package) -> PackageQuote:
    pricing = {}
    for flights_key, table in (package.pricing or {}).items():
        pricing[flights_key] = {str(days): int(price) for days, price in (table or {}).items()}

    return PackageQuote(
        package_ref=package.id,
        title=package.title,
        base_price=package.price,
        list_price=max(package.original_price, package.price),
        pricing=pricing,
    )


class PackageCatalog:
    """Read-only view over the package table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, package_ref: int) -> PackageQuote:
        package = self.session.get(Package, package_ref)
        if not package:
            raise PackageNotFound(f"Package {package_ref} not found")
        return to_quote(package)

    def get_active(self, package_ref: int) -> PackageQuote:
        package = self.session.get(Package, package_ref)
        if not package or not package.is_active:
            raise PackageNotFound(f"Package {package_ref} not found")
        return to_quote(package)
