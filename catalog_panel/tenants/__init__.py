"""
Tenants app: мультитенантность для клубов.

Каждая организация (Organization) = отдельный tenant на общей базе.
Определение: поддомен (oakmont.catalog.app) или заголовок X-Catalog-Organization.

Модель данных:
    Organization ← N OrganizationMembership (ORG_ADMIN / ORG_STAFF / CUSTOMER)
    Organization ← FK из Location, Customer, ClassTemplate и т.д.
"""
