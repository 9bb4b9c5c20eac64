"""
API route modules.

Subrouters for auth and users, usage, company/timbrado and DNIT configuration,
catalog, customers and vehicles, work orders, inventory, sales, print previews,
dashboard, reports and administration.

Routers are included from carwash_api.api.main (under the /api prefix).
"""
